"""
Sorting and Pagination

Stable sort of a filtered transaction list followed by fixed-size,
1-indexed pages.
"""

import math
from datetime import date
from typing import Iterable, Optional

from cashbook.models.ledger import Transaction
from cashbook.models.report import DayGroup, SortOrder, Totals, TransactionPage
from cashbook.reports.aggregator import summarize
from cashbook.reports.periods import transaction_day


def _day_key(transaction: Transaction) -> date:
    # Undated transactions sort as the oldest
    return transaction_day(transaction) or date.min


def sort_transactions(
    transactions: Iterable[Transaction],
    order: SortOrder = SortOrder.NEWEST,
) -> list[Transaction]:
    """
    Sort a transaction list. The sort is stable: ties keep input order.
    """
    order = SortOrder(order)
    items = list(transactions)
    if order == SortOrder.NEWEST:
        return sorted(items, key=_day_key, reverse=True)
    if order == SortOrder.OLDEST:
        return sorted(items, key=_day_key)
    if order == SortOrder.HIGHEST:
        return sorted(items, key=lambda t: t.amount, reverse=True)
    return sorted(items, key=lambda t: t.amount)


def group_by_day(transactions: Iterable[Transaction]) -> list[DayGroup]:
    """
    Group consecutive page items by their date string.

    The net of a group only covers the given items. A day split across
    two pages shows a partial net on each page.
    """
    groups: dict[Optional[str], DayGroup] = {}
    for t in transactions:
        group = groups.get(t.date)
        if group is None:
            group = groups[t.date] = DayGroup(day=t.date)
        group.transactions.append(t)
        group.net += t.signed_amount
    return list(groups.values())


def paginate(
    ordered: Iterable[Transaction],
    page_size: int = 10,
    page: int = 1,
    summary: Optional[Totals] = None,
) -> TransactionPage:
    """
    Slice an ordered list into one page.

    total_pages = ceil(count / page_size). The requested page is clamped
    into [1, total_pages], so asking past the end returns the last page.
    """
    items = list(ordered)
    page_size = max(int(page_size), 1)
    total_count = len(items)
    total_pages = math.ceil(total_count / page_size)

    page = min(max(int(page), 1), max(total_pages, 1))
    start = (page - 1) * page_size
    page_items = items[start:start + page_size]

    return TransactionPage(
        items=page_items,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_count=total_count,
        groups=group_by_day(page_items),
        summary=summary if summary is not None else summarize(items),
    )
