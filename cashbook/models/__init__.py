"""
Data Models Package

This package contains all Pydantic models used in Cashbook.
All data flowing through the system must conform to these schemas.
"""

from cashbook.models.ledger import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    Account,
    AccountType,
    BackupSnapshot,
    BusinessProfile,
    CategorySet,
    FinancialAdvice,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    ReceiptScan,
    ReportAnalysis,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    new_id,
)
from cashbook.models.report import (
    AccountBalance,
    Aggregate,
    CategoryAmount,
    CategoryComparison,
    CustomRange,
    DayGroup,
    IncomeStatement,
    LineItem,
    Period,
    PeriodRange,
    SeriesBucket,
    SortOrder,
    Totals,
    TransactionPage,
    TypeFilter,
    VisualReport,
)
from cashbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_CATEGORIES",
    "Account",
    "AccountType",
    "BackupSnapshot",
    "BusinessProfile",
    "CategorySet",
    "FinancialAdvice",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "ReceiptScan",
    "ReportAnalysis",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "new_id",
    # Report models
    "AccountBalance",
    "Aggregate",
    "CategoryAmount",
    "CategoryComparison",
    "CustomRange",
    "DayGroup",
    "IncomeStatement",
    "LineItem",
    "Period",
    "PeriodRange",
    "SeriesBucket",
    "SortOrder",
    "Totals",
    "TransactionPage",
    "TypeFilter",
    "VisualReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
