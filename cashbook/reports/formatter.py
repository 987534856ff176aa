"""
Report Formatting

Turns a period's transactions into the two report shapes:
- Visual report (totals, category distribution, top expenses, chart series)
- Income statement (revenue and expense line items, net profit)

DESIGN DECISION: A category selection narrows the distribution, the top
expenses, the category comparison and the statement line items. It never
narrows the period totals or the time series, which always describe the
whole period.
"""

from decimal import Decimal
from typing import Iterable, Optional

from cashbook.models.ledger import Transaction, TransactionType
from cashbook.models.report import (
    CategoryComparison,
    IncomeStatement,
    LineItem,
    PeriodRange,
    VisualReport,
)
from cashbook.reports.aggregator import (
    expense_by_category,
    sum_by_category,
    summarize,
    time_series,
)
from cashbook.reports.filters import matches_categories


ZERO = Decimal("0")


def _narrow(
    transactions: Iterable[Transaction],
    categories: Optional[Iterable[str]],
) -> list[Transaction]:
    selected = set(categories) if categories else None
    return [t for t in transactions if matches_categories(t, selected)]


def group_line_items(
    transactions: Iterable[Transaction],
    type: TransactionType,
) -> list[LineItem]:
    """
    Line items for one side of the income statement, largest first.

    Shared by the on-screen statement and the CSV export so both list
    exactly the same lines in the same order.
    """
    return [
        LineItem(name=c.name, amount=c.amount)
        for c in sum_by_category(transactions, type)
    ]


def top_expenses(transactions: Iterable[Transaction], limit: int = 5) -> list[Transaction]:
    """The largest individual expenses; ties keep their original order."""
    expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]
    return sorted(expenses, key=lambda t: t.amount, reverse=True)[:max(limit, 0)]


def category_comparison(transactions: Iterable[Transaction]) -> list[CategoryComparison]:
    """Income next to expense for every category, by combined amount."""
    income: dict[str, Decimal] = {}
    expense: dict[str, Decimal] = {}
    names: list[str] = []
    for t in transactions:
        if t.category not in income:
            names.append(t.category)
            income[t.category] = ZERO
            expense[t.category] = ZERO
        if t.type == TransactionType.INCOME:
            income[t.category] += t.amount
        else:
            expense[t.category] += t.amount

    rows = [
        CategoryComparison(name=name, income=income[name], expense=expense[name])
        for name in names
    ]
    return sorted(rows, key=lambda row: row.combined, reverse=True)


def build_visual_report(
    period_transactions: Iterable[Transaction],
    period_range: PeriodRange,
    categories: Optional[Iterable[str]] = None,
    limit: int = 5,
) -> VisualReport:
    """
    Build the chart-oriented report.

    Args:
        period_transactions: Transactions already filtered to the period
        period_range: The resolved range (drives the series buckets)
        categories: Optional category selection
        limit: Number of top expenses to include
    """
    subset = list(period_transactions)
    narrowed = _narrow(subset, categories)
    return VisualReport(
        range=period_range,
        totals=summarize(subset),
        category_distribution=expense_by_category(narrowed),
        top_expenses=top_expenses(narrowed, limit),
        series=time_series(subset, period_range),
        category_comparison=category_comparison(narrowed),
    )


def build_income_statement(
    period_transactions: Iterable[Transaction],
    period_range: PeriodRange,
    categories: Optional[Iterable[str]] = None,
) -> IncomeStatement:
    """
    Build the accounting-style income statement.

    Line items honor the category selection. Total revenue, total expense
    and net profit are the totals of the whole period, so they match the
    visual report for the same period.
    """
    subset = list(period_transactions)
    narrowed = _narrow(subset, categories)
    totals = summarize(subset)
    return IncomeStatement(
        range=period_range,
        income_lines=group_line_items(narrowed, TransactionType.INCOME),
        expense_lines=group_line_items(narrowed, TransactionType.EXPENSE),
        total_revenue=totals.income,
        total_expense=totals.expense,
        net_profit=totals.net,
    )
