"""
Audit Models for Cashbook

Every ledger mutation, backup, receipt scan and external-service failure
is logged for audit purposes. This provides:
1. Traceability of every change to the books
2. Debugging information when things go wrong
3. A record of when backups were taken and restored

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
not even on a data reset (the reset itself is an event).
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_REMOVED = "account_removed"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_REMOVED = "category_removed"

    # Invoices
    INVOICE_SAVED = "invoice_saved"
    INVOICE_DELETED = "invoice_deleted"

    # Receipt scanning
    RECEIPT_SCANNED = "receipt_scanned"
    RECEIPT_SCAN_FAILED = "receipt_scan_failed"
    VALIDATION_FAILED = "validation_failed"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_IMPORTED = "backup_imported"
    CLOUD_BACKUP_COMPLETED = "cloud_backup_completed"
    CLOUD_RESTORE_COMPLETED = "cloud_restore_completed"
    DATA_RESET = "data_reset"

    # Advice
    ADVICE_GENERATED = "advice_generated"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'account', 'invoice')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., scan then confirm)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Events written without an offset were recorded in UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging and storage.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(txn)
        event = AuditEventBuilder.external_service_error("gemini", str(e), cid)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {type} {amount} ({category})",
            details={
                "type": type,
                "amount": amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def transactions_deleted(ids: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=ids[0] if len(ids) == 1 else None,
            description=f"{len(ids)} transaction(s) deleted",
            details={"ids": ids},
            is_user_action=True,
        )

    @staticmethod
    def transactions_cleared(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            description=f"All transactions cleared ({count} removed)",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def account_changed(
        event_type: AuditEventType,
        account_id: str,
        name: str,
    ) -> AuditEvent:
        verb = {
            AuditEventType.ACCOUNT_ADDED: "added",
            AuditEventType.ACCOUNT_UPDATED: "updated",
            AuditEventType.ACCOUNT_REMOVED: "removed",
        }[event_type]
        return AuditEvent(
            event_type=event_type,
            entity_type="account",
            entity_id=account_id,
            description=f"Account {verb}: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def category_changed(
        added: bool,
        type: str,
        name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.CATEGORY_ADDED if added
                else AuditEventType.CATEGORY_REMOVED
            ),
            entity_type="category",
            entity_id=name,
            description=f"{type.capitalize()} category {'added' if added else 'removed'}: {name}",
            details={"type": type, "name": name},
            is_user_action=True,
        )

    @staticmethod
    def invoice_changed(
        invoice_id: str,
        deleted: bool = False,
        total: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.INVOICE_DELETED if deleted
                else AuditEventType.INVOICE_SAVED
            ),
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {'deleted' if deleted else 'saved'}: {invoice_id}",
            details={"total": total} if total is not None else {},
            is_user_action=True,
        )

    @staticmethod
    def receipt_scanned(
        scan_id: str,
        merchant: Optional[str],
        amount: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCANNED,
            entity_type="receipt",
            entity_id=scan_id,
            correlation_id=correlation_id,
            description=f"Receipt scanned: {merchant or 'unknown merchant'}",
            details={
                "merchant": merchant,
                "amount": amount,
            },
        )

    @staticmethod
    def validation_failed(
        scan_id: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=scan_id,
            correlation_id=correlation_id,
            description=f"Receipt validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def backup_event(
        event_type: AuditEventType,
        transaction_count: int,
        target: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="backup",
            description=f"{event_type.value.replace('_', ' ').capitalize()} ({target})",
            details={
                "transaction_count": transaction_count,
                "target": target,
            },
            is_user_action=True,
        )

    @staticmethod
    def data_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_RESET,
            severity=AuditSeverity.WARNING,
            description="All ledger data reset to defaults",
            is_user_action=True,
        )

    @staticmethod
    def advice_generated(kind: str, sample_size: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_GENERATED,
            entity_type="advice",
            description=f"AI {kind} generated from {sample_size} transactions",
            details={"kind": kind, "sample_size": sample_size},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
