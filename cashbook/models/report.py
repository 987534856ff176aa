"""
Report Models for Cashbook

Inputs (period selection, filters, sort order) and the read-only result
structures produced by cashbook.reports.

DESIGN DECISION: Results are plain Pydantic models with Decimal amounts.
Currency formatting is a presentation concern and never happens here.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from cashbook.models.ledger import AccountType, Transaction


ZERO = Decimal("0")


# =============================================================================
# INPUTS
# =============================================================================

class Period(str, Enum):
    """
    Named report windows.

    WEEKLY, MONTHLY and YEARLY are aliases used by the report view for
    the navigable windows; they resolve exactly like THIS_WEEK,
    THIS_MONTH and THIS_YEAR.
    """
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    ALL = "all"
    CUSTOM = "custom"

    WEEKLY = "this_week"
    MONTHLY = "this_month"
    YEARLY = "this_year"


class CustomRange(BaseModel):
    """Caller-supplied custom bounds as YYYY-MM-DD strings (inclusive)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    start: str
    end: str


class PeriodRange(BaseModel):
    """
    A resolved, inclusive [start, end] day range.

    start and end are both None for ALL (unbounded).
    is_empty marks a range that matches nothing (unreadable custom bounds).
    """
    model_config = ConfigDict(frozen=True)

    period: Period
    reference: dt.date
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    is_empty: bool = False

    @property
    def is_unbounded(self) -> bool:
        return not self.is_empty and self.start is None and self.end is None


class TypeFilter(str, Enum):
    """Direction filter for the transaction list."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


class SortOrder(str, Enum):
    """Sort orders for the transaction list."""
    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


# =============================================================================
# AGGREGATES
# =============================================================================

class Totals(BaseModel):
    """Income and expense sums of a transaction subset."""
    income: Decimal = ZERO
    expense: Decimal = ZERO
    net: Decimal = ZERO
    count: int = 0


class CategoryAmount(BaseModel):
    """One category with its summed amount."""
    name: str
    amount: Decimal = ZERO


class AccountBalance(BaseModel):
    """Derived all-time balance of one account."""
    account_id: str
    name: str
    type: AccountType
    initial_balance: Decimal = ZERO
    income: Decimal = ZERO
    expense: Decimal = ZERO
    current_balance: Decimal = ZERO


class SeriesBucket(BaseModel):
    """
    One time slice of the income/expense chart.

    order is the chronological sort key; label is display text only.
    """
    label: str
    income: Decimal = ZERO
    expense: Decimal = ZERO
    order: int


class Aggregate(BaseModel):
    """Everything the dashboard needs for one period."""
    totals: Totals = Field(default_factory=Totals)
    by_category: list[CategoryAmount] = Field(default_factory=list)
    by_account: list[AccountBalance] = Field(default_factory=list)
    by_series: list[SeriesBucket] = Field(default_factory=list)
    total_assets: Decimal = ZERO
    unassigned: Totals = Field(
        default_factory=Totals,
        description="Transactions with no or an unknown account"
    )


# =============================================================================
# FORMATTED REPORTS
# =============================================================================

class CategoryComparison(BaseModel):
    """Income and expense of one category side by side."""
    name: str
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def combined(self) -> Decimal:
        return self.income + self.expense


class VisualReport(BaseModel):
    """Chart-oriented report over one period."""
    range: PeriodRange
    totals: Totals
    category_distribution: list[CategoryAmount] = Field(default_factory=list)
    top_expenses: list[Transaction] = Field(default_factory=list)
    series: list[SeriesBucket] = Field(default_factory=list)
    category_comparison: list[CategoryComparison] = Field(default_factory=list)


class LineItem(BaseModel):
    """One category line of the income statement."""
    name: str
    amount: Decimal = ZERO


class IncomeStatement(BaseModel):
    """Accounting-style report: revenue lines, expense lines and net profit."""
    range: PeriodRange
    income_lines: list[LineItem] = Field(default_factory=list)
    expense_lines: list[LineItem] = Field(default_factory=list)
    total_revenue: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_profit: Decimal = ZERO


# =============================================================================
# PAGINATION
# =============================================================================

class DayGroup(BaseModel):
    """
    Transactions of one day on one page.

    net only covers the items on this page, even when the day continues
    on the next page.
    """
    day: Optional[str] = None
    transactions: list[Transaction] = Field(default_factory=list)
    net: Decimal = ZERO


class TransactionPage(BaseModel):
    """One page of the sorted, filtered transaction list."""
    items: list[Transaction] = Field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total_pages: int = 0
    total_count: int = 0
    groups: list[DayGroup] = Field(default_factory=list)
    summary: Totals = Field(
        default_factory=Totals,
        description="Totals of the whole filtered list, not just this page"
    )
