"""
Reporting Package

Pure, synchronous functions from a transaction snapshot to report views:
period resolution, filtering, aggregation, formatting, pagination and
CSV export. Nothing here performs I/O or raises for bad input.
"""

from cashbook.reports.aggregator import (
    account_balances,
    aggregate,
    expense_by_category,
    sum_by_category,
    summarize,
    time_series,
    total_assets,
    unassigned_totals,
)
from cashbook.reports.export import (
    export_filename,
    income_statement_csv,
    income_statement_rows,
    transaction_rows,
    transactions_csv,
)
from cashbook.reports.filters import (
    filter_transactions,
    in_range,
    matches_search,
)
from cashbook.reports.formatter import (
    build_income_statement,
    build_visual_report,
    category_comparison,
    group_line_items,
    top_expenses,
)
from cashbook.reports.paginator import (
    group_by_day,
    paginate,
    sort_transactions,
)
from cashbook.reports.periods import (
    can_navigate,
    describe_period,
    parse_day,
    resolve_range,
    shift_reference,
    transaction_day,
)

__all__ = [
    "account_balances",
    "aggregate",
    "expense_by_category",
    "sum_by_category",
    "summarize",
    "time_series",
    "total_assets",
    "unassigned_totals",
    "export_filename",
    "income_statement_csv",
    "income_statement_rows",
    "transaction_rows",
    "transactions_csv",
    "filter_transactions",
    "in_range",
    "matches_search",
    "build_income_statement",
    "build_visual_report",
    "category_comparison",
    "group_line_items",
    "top_expenses",
    "group_by_day",
    "paginate",
    "sort_transactions",
    "can_navigate",
    "describe_period",
    "parse_day",
    "resolve_range",
    "shift_reference",
    "transaction_day",
]
