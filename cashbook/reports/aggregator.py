"""
Transaction Aggregation

Reduces a transaction subset into totals, category sums, account
balances and a bucketed time series.

DESIGN DECISION: Account balances are always computed over ALL
transactions, never the period subset. The dashboard shows what is in
each account right now, while the other figures describe the period.

GUARANTEES:
- Decimal accumulation starting from Decimal("0"); no float drift
- Empty input gives zero totals and empty groupings, never an error
- Sort orders are stable (ties keep first-encountered order)
"""

import calendar
from decimal import Decimal
from typing import Iterable, Optional

from cashbook.models.ledger import Account, Transaction, TransactionType
from cashbook.models.report import (
    AccountBalance,
    Aggregate,
    CategoryAmount,
    Period,
    PeriodRange,
    SeriesBucket,
    Totals,
)
from cashbook.reports.periods import transaction_day


ZERO = Decimal("0")

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def summarize(transactions: Iterable[Transaction]) -> Totals:
    """Total income, total expense and net of a subset."""
    income = ZERO
    expense = ZERO
    count = 0
    for t in transactions:
        count += 1
        if t.type == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return Totals(income=income, expense=expense, net=income - expense, count=count)


def sum_by_category(
    transactions: Iterable[Transaction],
    type: TransactionType,
) -> list[CategoryAmount]:
    """
    Sum amounts per category for one direction, largest first.

    Unknown or stale category strings get their own bucket.
    """
    sums: dict[str, Decimal] = {}
    for t in transactions:
        if t.type != type:
            continue
        sums[t.category] = sums.get(t.category, ZERO) + t.amount

    # dicts keep insertion order and sorted() is stable
    ranked = sorted(sums.items(), key=lambda item: item[1], reverse=True)
    return [CategoryAmount(name=name, amount=amount) for name, amount in ranked]


def expense_by_category(transactions: Iterable[Transaction]) -> list[CategoryAmount]:
    """Expense distribution per category, largest first."""
    return sum_by_category(transactions, TransactionType.EXPENSE)


def account_balances(
    accounts: Iterable[Account],
    all_transactions: Iterable[Transaction],
) -> list[AccountBalance]:
    """
    Current balance of every known account.

    current = initial balance + income on the account - expense on the account.
    Pass the full transaction list here, not a period subset.
    """
    income: dict[str, Decimal] = {}
    expense: dict[str, Decimal] = {}
    for t in all_transactions:
        if not t.account_id:
            continue
        bucket = income if t.type == TransactionType.INCOME else expense
        bucket[t.account_id] = bucket.get(t.account_id, ZERO) + t.amount

    balances = []
    for account in accounts:
        acc_income = income.get(account.id, ZERO)
        acc_expense = expense.get(account.id, ZERO)
        balances.append(AccountBalance(
            account_id=account.id,
            name=account.name,
            type=account.type,
            initial_balance=account.initial_balance,
            income=acc_income,
            expense=acc_expense,
            current_balance=account.initial_balance + acc_income - acc_expense,
        ))
    return balances


def total_assets(balances: Iterable[AccountBalance]) -> Decimal:
    """Sum of all account balances."""
    return sum((b.current_balance for b in balances), ZERO)


def unassigned_totals(
    accounts: Iterable[Account],
    all_transactions: Iterable[Transaction],
) -> Totals:
    """Totals of transactions with no account or an account that no longer exists."""
    known = {a.id for a in accounts}
    return summarize(t for t in all_transactions if t.account_id not in known)


def _bucket_key(period_range: PeriodRange, day) -> tuple[str, int]:
    period = period_range.period
    if period == Period.THIS_YEAR:
        return MONTH_LABELS[day.month - 1], day.month
    if period == Period.ALL:
        return f"{MONTH_LABELS[day.month - 1]} {day.year % 100:02d}", day.year * 12 + day.month
    if period in (Period.THIS_MONTH, Period.LAST_MONTH):
        return str(day.day), day.day
    if period in (Period.THIS_WEEK, Period.TODAY):
        weekday = day.isoweekday()
        return WEEKDAY_LABELS[weekday - 1], weekday
    # CUSTOM: one bucket per calendar day, can span years
    return f"{day.day} {MONTH_LABELS[day.month - 1]} {day.year % 100:02d}", day.toordinal()


def _prefill(period_range: PeriodRange) -> dict[str, SeriesBucket]:
    buckets: dict[str, SeriesBucket] = {}
    period = period_range.period
    start = period_range.start
    if start is None:
        return buckets

    if period == Period.THIS_YEAR:
        for month, label in enumerate(MONTH_LABELS, start=1):
            buckets[label] = SeriesBucket(label=label, order=month)
    elif period in (Period.THIS_MONTH, Period.LAST_MONTH):
        days_in_month = calendar.monthrange(start.year, start.month)[1]
        for day in range(1, days_in_month + 1):
            buckets[str(day)] = SeriesBucket(label=str(day), order=day)
    return buckets


def time_series(
    transactions: Iterable[Transaction],
    period_range: PeriodRange,
) -> list[SeriesBucket]:
    """
    Bucket income and expense over time for the chart.

    - THIS_YEAR: one bucket per month, all 12 pre-filled
    - ALL: one bucket per month actually present, labelled "Mon YY"
    - THIS_MONTH / LAST_MONTH: one bucket per day of the month, pre-filled
    - THIS_WEEK / TODAY: one bucket per weekday, Monday first
    - CUSTOM: one bucket per day present

    Transactions without a readable date are skipped. The result is
    sorted by the numeric order key, not by insertion order.
    """
    if period_range.is_empty:
        return []

    buckets = _prefill(period_range)
    income: dict[str, Decimal] = {}
    expense: dict[str, Decimal] = {}
    orders: dict[str, int] = {label: b.order for label, b in buckets.items()}

    for t in transactions:
        day = transaction_day(t)
        if day is None:
            continue
        label, order = _bucket_key(period_range, day)
        orders.setdefault(label, order)
        target = income if t.type == TransactionType.INCOME else expense
        target[label] = target.get(label, ZERO) + t.amount

    series = [
        SeriesBucket(
            label=label,
            income=income.get(label, ZERO),
            expense=expense.get(label, ZERO),
            order=order,
        )
        for label, order in orders.items()
    ]
    return sorted(series, key=lambda b: b.order)


def aggregate(
    transactions: Iterable[Transaction],
    period_range: PeriodRange,
    accounts: Iterable[Account] = (),
    all_transactions: Optional[Iterable[Transaction]] = None,
) -> Aggregate:
    """
    Build the full dashboard aggregate.

    Args:
        transactions: The period subset (already filtered)
        period_range: The resolved range the subset was filtered with
        accounts: Known accounts
        all_transactions: Full ledger for account balances; defaults to
            the subset when not given

    Returns:
        Aggregate with totals, category distribution, account balances,
        the time series and the unassigned group
    """
    subset = list(transactions)
    everything = subset if all_transactions is None else list(all_transactions)
    accounts = list(accounts)

    balances = account_balances(accounts, everything)
    return Aggregate(
        totals=summarize(subset),
        by_category=expense_by_category(subset),
        by_account=balances,
        by_series=time_series(subset, period_range),
        total_assets=total_assets(balances),
        unassigned=unassigned_totals(accounts, everything),
    )
