"""
Audit Logger

DESIGN DECISION: Every change to the books is logged.
This provides:
1. Traceability of every add, delete, import and reset
2. Debugging capability for AI and backup failures
3. A history the user can inspect

The audit logger:
- Is async so storage-backed logging fits the async service flows
- Gracefully handles failures (a failed audit write never breaks a ledger change)
- Supports correlation IDs to trace related events (scan, then confirm)
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from cashbook.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from cashbook.services.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_added(
        self,
        transaction_id: str,
        type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new transaction."""
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            type=type,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    async def log_transactions_deleted(self, ids: list[str]) -> None:
        await self.log(AuditEventBuilder.transactions_deleted(ids))

    async def log_transactions_cleared(self, count: int) -> None:
        await self.log(AuditEventBuilder.transactions_cleared(count))

    async def log_account_changed(
        self,
        event_type: AuditEventType,
        account_id: str,
        name: str,
    ) -> None:
        """Log an account being added, renamed or removed."""
        await self.log(AuditEventBuilder.account_changed(event_type, account_id, name))

    async def log_category_changed(self, added: bool, type: str, name: str) -> None:
        await self.log(AuditEventBuilder.category_changed(added, type, name))

    async def log_invoice_changed(
        self,
        invoice_id: str,
        deleted: bool = False,
        total: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.invoice_changed(invoice_id, deleted, total))

    async def log_receipt_scanned(
        self,
        scan_id: str,
        merchant: Optional[str],
        amount: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log a completed receipt scan."""
        await self.log(AuditEventBuilder.receipt_scanned(
            scan_id=scan_id,
            merchant=merchant,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        scan_id: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        await self.log(AuditEventBuilder.validation_failed(
            scan_id=scan_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_backup(
        self,
        event_type: AuditEventType,
        transaction_count: int,
        target: str,
    ) -> None:
        """Log a backup export/import or a cloud backup/restore."""
        await self.log(AuditEventBuilder.backup_event(event_type, transaction_count, target))

    async def log_data_reset(self) -> None:
        await self.log(AuditEventBuilder.data_reset())

    async def log_advice_generated(self, kind: str, sample_size: int) -> None:
        await self.log(AuditEventBuilder.advice_generated(kind, sample_size))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a receipt scan).
    Pass it through all subsequent operations.
    """
    return uuid4()
