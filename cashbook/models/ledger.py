"""
Core Data Models for Cashbook

These models define the schemas for everything the ledger stores:
transactions, accounts, category lists, invoices and backups.
They are designed to:
1. Enforce type safety at runtime
2. Tolerate the loose data found in older stores and backups
3. Be serializable for storage, backup and logging

DESIGN DECISION: Transaction dates are kept as the raw YYYY-MM-DD string.
A missing or malformed date must still load; the reporting layer decides
how such a transaction is treated (see cashbook.reports.periods.parse_day).

DESIGN DECISION: Money is Decimal everywhere. Totals are accumulated over
thousands of transactions and must not drift.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def new_id() -> str:
    """Generate a new entity identifier."""
    return uuid4().hex


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction. Determines its sign in totals."""
    INCOME = "income"
    EXPENSE = "expense"


# Indonesian labels used by backups from the first version of the app
LEGACY_TYPE_NAMES = {
    "pemasukan": TransactionType.INCOME,
    "pengeluaran": TransactionType.EXPENSE,
}


class AccountType(str, Enum):
    """Kind of account a transaction is booked against."""
    CASH = "CASH"
    BANK = "BANK"
    E_WALLET = "E-WALLET"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"


DEFAULT_EXPENSE_CATEGORIES = [
    "Food & Drinks",
    "Transport",
    "Utilities",
    "Inventory",
    "Payroll",
    "Marketing",
    "Other",
]

DEFAULT_INCOME_CATEGORIES = [
    "Sales",
    "Investment",
    "Gifts",
    "Other",
]


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable once created: they are only ever added
    or deleted, never edited in place.

    The category is an open string. It should belong to the configured
    CategorySet but stale labels are kept as they are.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=new_id,
        description="Unique, stable transaction ID"
    )
    date: Optional[str] = Field(
        default=None,
        description="Calendar day as YYYY-MM-DD (may be missing in old data)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude; the type gives the sign"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    category: str = Field(
        default="",
        description="Category label"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    merchant: Optional[str] = Field(
        default=None,
        description="Merchant or counterparty name"
    )
    account_id: Optional[str] = Field(
        default=None,
        alias="accountId",
        description="Account this transaction is booked against"
    )

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        """Accept the labels older backups were written with."""
        if isinstance(v, str):
            key = v.strip().lower()
            return LEGACY_TYPE_NAMES.get(key, key)
        return v

    @field_validator('merchant', 'account_id')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as absent."""
        return v or None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction applied (expenses are negative)."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class Account(BaseModel):
    """
    A money container (cash box, bank account, e-wallet).

    The current balance is never stored. It is derived from the initial
    balance and the transactions booked against the account.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_id,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )
    type: AccountType = Field(
        default=AccountType.CASH,
        description="Account type"
    )
    initial_balance: Decimal = Field(
        default=Decimal("0"),
        alias="initialBalance",
        description="Balance before any recorded transaction"
    )


class CategorySet(BaseModel):
    """
    The two ordered category lists (expense and income).

    Mutations return a new CategorySet; the original is left untouched.
    """
    model_config = ConfigDict(frozen=True)

    expense: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXPENSE_CATEGORIES)
    )
    income: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCOME_CATEGORIES)
    )

    def for_type(self, type: TransactionType) -> list[str]:
        if type == TransactionType.INCOME:
            return list(self.income)
        return list(self.expense)

    def contains(self, type: TransactionType, name: str) -> bool:
        return name in self.for_type(type)

    def add(self, type: TransactionType, name: str) -> "CategorySet":
        """Append a label. Blank and duplicate labels are ignored."""
        name = (name or "").strip()
        if not name or self.contains(type, name):
            return self
        return self._with(type, self.for_type(type) + [name])

    def remove(self, type: TransactionType, name: str) -> "CategorySet":
        """Drop a label. Existing transactions keep their category string."""
        remaining = [c for c in self.for_type(type) if c != name]
        return self._with(type, remaining)

    def _with(self, type: TransactionType, labels: list[str]) -> "CategorySet":
        if type == TransactionType.INCOME:
            return CategorySet(expense=list(self.expense), income=labels)
        return CategorySet(expense=labels, income=list(self.income))


# =============================================================================
# INVOICE MODELS
# =============================================================================

class InvoiceItem(BaseModel):
    """One billed line on an invoice."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    description: str = ""
    quantity: Decimal = Field(default=Decimal("1"), ge=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.price


class Invoice(BaseModel):
    """
    A billing document.

    Invoices are independent of the transaction ledger: saving or paying
    an invoice never creates a transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=lambda: f"INV-{uuid4().hex[:8].upper()}",
        description="Invoice number"
    )
    client_name: str = Field(
        default="",
        alias="clientName",
        description="Billed client"
    )
    date: str = Field(
        ...,
        description="Invoice date (YYYY-MM-DD)"
    )
    due_date: str = Field(
        ...,
        alias="dueDate",
        description="Payment due date (YYYY-MM-DD)"
    )
    items: list[InvoiceItem] = Field(default_factory=list)
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)

    @model_validator(mode='after')
    def validate_dates(self) -> 'Invoice':
        """Due date cannot precede the invoice date."""
        # Both are fixed-width ISO strings, so string order is date order.
        if self.due_date and self.date and self.due_date < self.date:
            raise ValueError("Due date cannot be before invoice date")
        return self

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))


class BusinessProfile(BaseModel):
    """Sender details printed on invoices."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    bank_info: str = Field(default="", alias="bankInfo")


# =============================================================================
# AI RESULT MODELS
# =============================================================================

class ReceiptScan(BaseModel):
    """
    Data read from a receipt image by the scan agent.

    CRITICAL: This is PROPOSED data, NOT verified.
    It goes through ReceiptValidator and user confirmation before
    it becomes a Transaction.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    scan_id: str = Field(
        default_factory=new_id,
        description="Unique ID for this scan attempt"
    )
    scanned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    merchant: Optional[str] = None
    date: Optional[str] = Field(
        default=None,
        description="Receipt date as read (YYYY-MM-DD expected)"
    )
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    description: Optional[str] = None
    items: list[str] = Field(default_factory=list)


class FinancialAdvice(BaseModel):
    """Advisor output: a short analysis and actionable tips."""
    analysis: str = ""
    tips: list[str] = Field(default_factory=list)


class ReportAnalysis(BaseModel):
    """Advisor output for a report period: a few summary points."""
    summary: list[str] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage receipt validation.

    Stage 1: Schema validation (required values present and readable)
    Stage 2: Semantic validation (plausibility checks)
    """

    scan_id: str = Field(
        ...,
        description="ID of the scan being validated"
    )
    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    can_proceed_with_review: bool = Field(
        ...,
        description="Can we show this to the user for confirmation?"
    )

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# BACKUP MODEL
# =============================================================================

class BackupSnapshot(BaseModel):
    """
    A full export of the ledger.

    On import only the transaction list is required. A collection that
    is absent (None) keeps its current value.
    """
    model_config = ConfigDict(populate_by_name=True)

    transactions: list[Transaction]
    invoices: Optional[list[Invoice]] = None
    accounts: Optional[list[Account]] = None
    expense_categories: Optional[list[str]] = Field(
        default=None, alias="expenseCategories"
    )
    income_categories: Optional[list[str]] = Field(
        default=None, alias="incomeCategories"
    )
    export_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="exportDate"
    )
    app_version: str = Field(default="1.0.0", alias="appVersion")
