"""Tests for the visual report and the income statement."""

import random
from datetime import date
from decimal import Decimal

from cashbook.models.ledger import TransactionType
from cashbook.models.report import Period
from cashbook.reports.formatter import (
    build_income_statement,
    build_visual_report,
    category_comparison,
    top_expenses,
)
from cashbook.reports.periods import resolve_range

from conftest import make_transaction


INCOME = TransactionType.INCOME
MARCH = resolve_range(Period.THIS_MONTH, date(2024, 3, 10))


def march_ledger():
    return [
        make_transaction("5000", INCOME, category="Sales", date="2024-03-02"),
        make_transaction("1200", INCOME, category="Investment", date="2024-03-03"),
        make_transaction("800", category="Payroll", date="2024-03-04"),
        make_transaction("300", category="Transport", date="2024-03-05"),
        make_transaction("150", category="Transport", date="2024-03-06"),
    ]


class TestTopExpenses:
    """Tests for the largest expenses list."""

    def test_sorted_and_limited(self):
        result = top_expenses(march_ledger(), limit=2)
        assert [t.amount for t in result] == [Decimal("800"), Decimal("300")]

    def test_ignores_income(self):
        result = top_expenses([make_transaction("9", INCOME)])
        assert result == []

    def test_ties_keep_original_order(self):
        first = make_transaction("10", description="first")
        second = make_transaction("10", description="second")
        assert top_expenses([first, second]) == [first, second]

    def test_distinct_amounts_ignore_input_order(self):
        expenses = [make_transaction(str(amount)) for amount in (40, 5, 900, 75, 12, 300, 61)]
        expected = top_expenses(expenses)
        assert [t.amount for t in expected] == [Decimal(a) for a in (900, 300, 75, 61, 40)]
        for seed in range(5):
            shuffled = list(expenses)
            random.Random(seed).shuffle(shuffled)
            assert top_expenses(shuffled) == expected


class TestCategoryComparison:
    def test_combined_order(self):
        rows = category_comparison([
            make_transaction("10", category="Other"),
            make_transaction("50", INCOME, category="Other"),
            make_transaction("30", category="Transport"),
        ])
        assert [r.name for r in rows] == ["Other", "Transport"]
        assert rows[0].income == Decimal("50")
        assert rows[0].combined == Decimal("60")


class TestVisualReport:
    """Tests for build_visual_report."""

    def test_full_period(self):
        report = build_visual_report(march_ledger(), MARCH)
        assert report.totals.income == Decimal("6200")
        assert report.totals.expense == Decimal("1250")
        assert report.category_distribution[0].name == "Payroll"
        assert len(report.series) == 31

    def test_category_selection_narrows_breakdowns_only(self):
        report = build_visual_report(march_ledger(), MARCH, categories=["Transport"])
        assert [c.name for c in report.category_distribution] == ["Transport"]
        assert [t.amount for t in report.top_expenses] == [Decimal("300"), Decimal("150")]
        # Totals and series still describe the whole period
        assert report.totals.expense == Decimal("1250")
        assert sum(b.expense for b in report.series) == Decimal("1250")


class TestIncomeStatement:
    """Tests for build_income_statement."""

    def test_lines_and_totals(self):
        statement = build_income_statement(march_ledger(), MARCH)
        assert [(l.name, l.amount) for l in statement.income_lines] == [
            ("Sales", Decimal("5000")),
            ("Investment", Decimal("1200")),
        ]
        assert [l.name for l in statement.expense_lines] == ["Payroll", "Transport"]
        assert statement.expense_lines[1].amount == Decimal("450")
        assert statement.total_revenue == Decimal("6200")
        assert statement.total_expense == Decimal("1250")
        assert statement.net_profit == Decimal("4950")

    def test_totals_match_visual_report(self):
        ledger = march_ledger()
        statement = build_income_statement(ledger, MARCH, categories=["Sales"])
        report = build_visual_report(ledger, MARCH, categories=["Sales"])
        assert statement.total_revenue == report.totals.income
        assert statement.net_profit == report.totals.net
        assert [l.name for l in statement.income_lines] == ["Sales"]
        assert statement.expense_lines == []

    def test_net_loss(self):
        statement = build_income_statement([make_transaction("40")], MARCH)
        assert statement.net_profit == Decimal("-40")

    def test_empty_period(self):
        statement = build_income_statement([], MARCH)
        assert statement.income_lines == []
        assert statement.net_profit == Decimal("0")
