"""
Tests for Cashbook models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with in-memory storage and fake models)
3. No real API calls in tests
"""

import json
from datetime import datetime, timezone

import pytest
from decimal import Decimal
from uuid import uuid4

from cashbook.models.ledger import (
    Account,
    AccountType,
    BackupSnapshot,
    CategorySet,
    DEFAULT_EXPENSE_CATEGORIES,
    Invoice,
    InvoiceItem,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from cashbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from cashbook.models.report import Period, PeriodRange


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        t = Transaction(
            date="2024-03-15",
            amount=Decimal("1500"),
            type=TransactionType.EXPENSE,
            category="Transport",
            description="Taxi",
        )
        assert t.amount == Decimal("1500")
        assert t.type == TransactionType.EXPENSE
        assert len(t.id) == 32

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(amount=Decimal("-1"), type=TransactionType.INCOME)

    def test_transaction_is_immutable(self):
        t = Transaction(amount=Decimal("10"), type=TransactionType.INCOME)
        with pytest.raises(ValueError):
            t.amount = Decimal("20")

    def test_blank_merchant_and_account_become_none(self):
        t = Transaction(amount=1, type="expense", merchant="  ", accountId="")
        assert t.merchant is None
        assert t.account_id is None

    def test_account_id_alias(self):
        """Stored data uses camelCase keys."""
        t = Transaction.model_validate(
            {"id": "a", "amount": 5, "type": "income", "accountId": "2"}
        )
        assert t.account_id == "2"
        assert t.model_dump(by_alias=True)["accountId"] == "2"

    def test_missing_date_is_allowed(self):
        t = Transaction(amount=5, type="income")
        assert t.date is None

    def test_signed_amount(self):
        income = Transaction(amount=5, type="income")
        expense = Transaction(amount=5, type="expense")
        assert income.signed_amount == Decimal("5")
        assert expense.signed_amount == Decimal("-5")

    @pytest.mark.parametrize("label, expected", [
        ("Pemasukan", TransactionType.INCOME),
        ("Pengeluaran", TransactionType.EXPENSE),
        ("INCOME", TransactionType.INCOME),
        (" Expense ", TransactionType.EXPENSE),
    ])
    def test_older_type_labels(self, label, expected):
        assert Transaction(amount=1, type=label).type == expected

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Transaction(amount=1, type="transfer")

    def test_long_text_is_kept(self):
        t = Transaction(amount=1, type="expense", description="x" * 2000, merchant="m" * 300)
        assert len(t.description) == 2000


class TestAccountModel:
    """Tests for the Account model."""

    def test_account_defaults(self):
        account = Account(name="Wallet")
        assert account.type == AccountType.CASH
        assert account.initial_balance == Decimal("0")

    def test_account_requires_name(self):
        with pytest.raises(ValueError):
            Account(name="   ")

    def test_account_type_values(self):
        assert AccountType("E-WALLET") == AccountType.E_WALLET
        assert Account.model_validate(
            {"name": "Bank", "type": "BANK", "initialBalance": "250000"}
        ).initial_balance == Decimal("250000")


class TestCategorySet:
    """Tests for the CategorySet model."""

    def test_defaults(self):
        categories = CategorySet()
        assert categories.expense == DEFAULT_EXPENSE_CATEGORIES
        assert "Sales" in categories.income

    def test_add_appends(self):
        categories = CategorySet().add(TransactionType.EXPENSE, "Rent")
        assert categories.expense[-1] == "Rent"

    def test_add_ignores_blank_and_duplicates(self):
        original = CategorySet()
        assert original.add(TransactionType.EXPENSE, "  ") is original
        assert original.add(TransactionType.EXPENSE, "Transport") is original

    def test_add_does_not_mutate_original(self):
        original = CategorySet()
        original.add(TransactionType.INCOME, "Consulting")
        assert "Consulting" not in original.income

    def test_remove(self):
        categories = CategorySet().remove(TransactionType.INCOME, "Gifts")
        assert "Gifts" not in categories.income
        assert categories.expense == DEFAULT_EXPENSE_CATEGORIES


class TestInvoiceModels:
    """Tests for invoice models."""

    def test_invoice_total(self):
        invoice = Invoice(
            clientName="Acme",
            date="2024-03-01",
            dueDate="2024-03-15",
            items=[
                InvoiceItem(description="Design", quantity=2, price=Decimal("150000")),
                InvoiceItem(description="Hosting", quantity=1, price=Decimal("50000")),
            ],
        )
        assert invoice.total == Decimal("350000")
        assert invoice.id.startswith("INV-")

    def test_invoice_date_validation(self):
        """Test that due_date cannot be before the invoice date."""
        with pytest.raises(ValueError, match="Due date cannot be before invoice date"):
            Invoice(client_name="Acme", date="2024-03-15", due_date="2024-03-01")


class TestBackupSnapshot:
    """Tests for the backup document model."""

    def test_only_transactions_required(self):
        snapshot = BackupSnapshot.model_validate({"transactions": []})
        assert snapshot.accounts is None
        assert snapshot.invoices is None
        assert snapshot.expense_categories is None

    def test_missing_transactions_rejected(self):
        with pytest.raises(ValueError):
            BackupSnapshot.model_validate({"accounts": []})

    def test_dump_uses_backup_file_keys(self):
        snapshot = BackupSnapshot(
            transactions=[Transaction(amount=1, type="income", account_id="1")],
            expense_categories=["Food"],
        )
        data = json.loads(snapshot.model_dump_json(by_alias=True))
        assert set(data) >= {
            "transactions", "expenseCategories", "incomeCategories",
            "exportDate", "appVersion",
        }
        assert data["transactions"][0]["accountId"] == "1"
        assert data["appVersion"] == "1.0.0"


class TestReportModels:
    """Tests for report input models."""

    def test_period_aliases(self):
        assert Period.MONTHLY is Period.THIS_MONTH
        assert Period.WEEKLY is Period.THIS_WEEK
        assert Period.YEARLY is Period.THIS_YEAR

    def test_unbounded_range(self):
        from datetime import date
        all_time = PeriodRange(period=Period.ALL, reference=date(2024, 3, 1))
        empty = PeriodRange(period=Period.CUSTOM, reference=date(2024, 3, 1), is_empty=True)
        assert all_time.is_unbounded is True
        assert empty.is_unbounded is False


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_timestamps_are_utc(self):
        event = AuditEvent(event_type=AuditEventType.DATA_RESET, description="reset")
        assert event.timestamp.tzinfo == timezone.utc
        stored = AuditEvent.model_validate({
            "event_type": "data_reset",
            "description": "reset",
            "timestamp": "2024-03-01T10:00:00",
        })
        assert stored.timestamp == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.INVOICE_SAVED,
            description="Invoice saved",
            details={"total": "1000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "invoice_saved"
        assert log_dict["details"]["total"] == "1000"

    def test_audit_event_to_json_line(self):
        event = AuditEventBuilder.data_reset()
        data = json.loads(event.to_json_line())
        assert data["event_type"] == "data_reset"
        assert data["severity"] == "warning"

    def test_builder_transaction_added(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.transaction_added(
            transaction_id="abc",
            type="expense",
            amount="1500",
            category="Transport",
            correlation_id=correlation_id,
        )
        assert event.entity_id == "abc"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_transactions_deleted(self):
        single = AuditEventBuilder.transactions_deleted(["a"])
        many = AuditEventBuilder.transactions_deleted(["a", "b"])
        assert single.entity_id == "a"
        assert many.entity_id is None
        assert many.details["ids"] == ["a", "b"]

    def test_builder_account_changed(self):
        event = AuditEventBuilder.account_changed(AuditEventType.ACCOUNT_REMOVED, "2", "Bank")
        assert event.description == "Account removed: Bank"

    def test_builder_external_service_error(self):
        event = AuditEventBuilder.external_service_error("gemini", "timeout")
        assert event.severity == AuditSeverity.ERROR
        assert event.details["service"] == "gemini"
        assert event.error_message == "timeout"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            scan_id="s1",
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            can_proceed_with_review=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Total amount required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            scan_id="s1",
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            can_proceed_with_review=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
