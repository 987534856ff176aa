"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The local JSON store is the primary backend; Google Sheets is the manual
cloud backup target.
"""

from cashbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from cashbook.services.storage.local_store import LocalJSONStorage
from cashbook.services.storage.google_sheets import (
    GoogleSheetsBackup,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "LocalJSONStorage",
    "GoogleSheetsBackup",
    "GoogleSheetsClient",
]
