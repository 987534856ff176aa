"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the local JSON store as the default backend
2. Use in-memory storage for testing
3. Keep the ledger service decoupled from where the data lives

Writes replace a whole collection at a time and the last write wins,
the same contract as a browser key-value store.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from cashbook.models.audit import AuditEvent
from cashbook.models.ledger import (
    Account,
    BusinessProfile,
    CategorySet,
    Invoice,
    Transaction,
)


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    A load returns None when the collection has never been saved, so
    the caller can tell "empty" from "not initialised yet".
    """

    @abstractmethod
    async def load_transactions(self) -> Optional[list[Transaction]]:
        """Load all transactions (newest first, as saved)."""
        pass

    @abstractmethod
    async def save_transactions(self, transactions: list[Transaction]) -> bool:
        """
        Replace the stored transaction list.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def load_accounts(self) -> Optional[list[Account]]:
        pass

    @abstractmethod
    async def save_accounts(self, accounts: list[Account]) -> bool:
        pass

    @abstractmethod
    async def load_categories(self) -> Optional[CategorySet]:
        pass

    @abstractmethod
    async def save_categories(self, categories: CategorySet) -> bool:
        pass

    @abstractmethod
    async def load_invoices(self) -> Optional[list[Invoice]]:
        pass

    @abstractmethod
    async def save_invoices(self, invoices: list[Invoice]) -> bool:
        pass

    @abstractmethod
    async def load_business_profile(self) -> Optional[BusinessProfile]:
        pass

    @abstractmethod
    async def save_business_profile(self, profile: BusinessProfile) -> bool:
        pass

    @abstractmethod
    async def get_last_sync(self) -> Optional[datetime]:
        """When the last cloud backup completed, if ever."""
        pass

    @abstractmethod
    async def set_last_sync(self, when: datetime) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every stored collection."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one receipt scan flow).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
