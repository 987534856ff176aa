"""
Report Export

Flat delimited text (CSV) versions of the reports.

DESIGN DECISION: The export reuses the same grouping functions as the
on-screen statement, so the CSV and the view never disagree.
Amounts are written as plain decimal numbers; currency formatting is
left to whatever opens the file.
"""

import csv
import io
import re
from decimal import Decimal
from typing import Iterable

from cashbook.models.ledger import Transaction
from cashbook.models.report import IncomeStatement


TRANSACTION_HEADERS = ["Date", "Type", "Category", "Description", "Merchant", "Amount"]


def _amount(value: Decimal) -> str:
    return format(value.normalize(), "f") if value else "0"


def income_statement_rows(statement: IncomeStatement, period_label: str) -> list[list[str]]:
    """Rows of the income statement export, top to bottom."""
    rows: list[list[str]] = [
        ["INCOME STATEMENT"],
        [f"Period: {period_label}"],
        [],
        ["REVENUE", ""],
    ]
    if statement.income_lines:
        rows.extend([line.name, _amount(line.amount)] for line in statement.income_lines)
    else:
        rows.append(["(No revenue)", "0"])
    rows.append(["TOTAL REVENUE", _amount(statement.total_revenue)])
    rows.append([])

    rows.append(["EXPENSES", ""])
    if statement.expense_lines:
        rows.extend([line.name, _amount(line.amount)] for line in statement.expense_lines)
    else:
        rows.append(["(No expenses)", "0"])
    rows.append(["TOTAL EXPENSES", _amount(statement.total_expense)])
    rows.append([])

    rows.append(["NET PROFIT", _amount(statement.net_profit)])
    return rows


def transaction_rows(transactions: Iterable[Transaction]) -> list[list[str]]:
    """Header plus one row per transaction, in the given order."""
    rows = [list(TRANSACTION_HEADERS)]
    for t in transactions:
        rows.append([
            t.date or "",
            t.type.value,
            t.category,
            t.description,
            t.merchant or "",
            _amount(t.amount),
        ])
    return rows


def to_csv(rows: Iterable[list[str]]) -> str:
    """Render rows as CSV text (quoted where needed, "\\n" line endings)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def income_statement_csv(statement: IncomeStatement, period_label: str) -> str:
    return to_csv(income_statement_rows(statement, period_label))


def transactions_csv(transactions: Iterable[Transaction]) -> str:
    return to_csv(transaction_rows(transactions))


def export_filename(prefix: str, period_label: str) -> str:
    """File name for an export, e.g. income_statement_march_2024.csv."""
    safe = re.sub(r"[^a-z0-9]", "_", period_label.lower())
    return f"{prefix}_{safe}.csv"
