"""
Transaction Filtering

Narrows a transaction list by period, category selection, free-text
search and direction. All predicates are combined with AND.

The input list is never mutated; the result keeps the input order.
"""

from typing import Iterable, Optional

from cashbook.models.ledger import Transaction, TransactionType
from cashbook.models.report import PeriodRange, TypeFilter
from cashbook.reports.periods import transaction_day


def in_range(transaction: Transaction, period_range: Optional[PeriodRange]) -> bool:
    """
    Check whether a transaction falls inside a resolved range.

    ALL (unbounded) matches every transaction, including ones without a
    readable date. Bounded ranges exclude undated transactions.
    """
    if period_range is None or period_range.is_unbounded:
        return True
    if period_range.is_empty:
        return False

    day = transaction_day(transaction)
    if day is None:
        return False
    if period_range.start is not None and day < period_range.start:
        return False
    if period_range.end is not None and day > period_range.end:
        return False
    return True


def amount_text(transaction: Transaction) -> str:
    """Plain decimal rendering of the amount used by text search ("1500", "12.5")."""
    return format(transaction.amount.normalize(), "f")


def matches_search(transaction: Transaction, term: Optional[str]) -> bool:
    """Case-insensitive substring match over description, category, merchant and amount."""
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    haystack = (
        transaction.description,
        transaction.category,
        transaction.merchant or "",
        amount_text(transaction),
    )
    return any(needle in field.lower() for field in haystack)


def matches_type(transaction: Transaction, type_filter: TypeFilter) -> bool:
    type_filter = TypeFilter(type_filter)
    if type_filter == TypeFilter.INCOME:
        return transaction.type == TransactionType.INCOME
    if type_filter == TypeFilter.EXPENSE:
        return transaction.type == TransactionType.EXPENSE
    return True


def matches_categories(
    transaction: Transaction,
    categories: Optional[Iterable[str]],
) -> bool:
    """An empty or missing selection matches every category."""
    if not categories:
        return True
    return transaction.category in categories


def filter_transactions(
    transactions: Iterable[Transaction],
    period_range: Optional[PeriodRange] = None,
    categories: Optional[Iterable[str]] = None,
    search: Optional[str] = None,
    type_filter: TypeFilter = TypeFilter.ALL,
) -> list[Transaction]:
    """
    Return the transactions matching every given predicate.

    Args:
        transactions: Source list (not modified)
        period_range: Resolved range; None means no date filtering
        categories: Category allow-list; empty means all
        search: Free-text search term
        type_filter: ALL, INCOME or EXPENSE

    Returns:
        A new list in the original relative order
    """
    selected = set(categories) if categories else None
    return [
        t for t in transactions
        if in_range(t, period_range)
        and matches_categories(t, selected)
        and matches_search(t, search)
        and matches_type(t, type_filter)
    ]
