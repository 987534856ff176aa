"""Services package."""

from cashbook.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    GoogleSheetsBackup,
    GoogleSheetsClient,
    LedgerStorageInterface,
    LocalJSONStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "GoogleSheetsBackup",
    "GoogleSheetsClient",
    "LedgerStorageInterface",
    "LocalJSONStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
