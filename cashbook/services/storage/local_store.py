"""
Local JSON Storage Implementation

DESIGN DECISION: The local store is the source of truth. It is a single
JSON document on disk keyed by collection name, the same shape as the
browser key-value store the ledger was designed around:

    {
        "transactions": [...],
        "accounts": [...],
        "expense_categories": [...],
        "income_categories": [...],
        "invoices": [...],
        "invoice_profile": {...},
        "last_sync": "2024-03-01T10:00:00",
        "audit_log": [...]
    }

TRADEOFFS:
- Every save rewrites the whole file (fine for a small business ledger)
- Writes go to a temp file and are swapped in with os.replace, so a crash
  never leaves a half-written document
- A malformed key or record is skipped with a warning instead of failing
  the whole load
- A document that is not valid JSON is renamed to <name>.corrupt and the
  store starts empty, so no save can overwrite the unreadable data
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from cashbook.models.audit import AuditEvent
from cashbook.models.ledger import (
    Account,
    BusinessProfile,
    CategorySet,
    Invoice,
    Transaction,
)
from cashbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Collection keys in the JSON document
TRANSACTIONS_KEY = "transactions"
ACCOUNTS_KEY = "accounts"
EXPENSE_CATEGORIES_KEY = "expense_categories"
INCOME_CATEGORIES_KEY = "income_categories"
INVOICES_KEY = "invoices"
PROFILE_KEY = "invoice_profile"
LAST_SYNC_KEY = "last_sync"
AUDIT_KEY = "audit_log"


class LocalJSONStorage(LedgerStorageInterface, AuditStorageInterface):
    """
    File-backed implementation of ledger and audit storage.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # -------------------------------------------------------------------------
    # Raw document access
    # -------------------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            self._set_aside(str(e))
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not isinstance(data, dict):
            self._set_aside("top-level value is not an object")
            return {}
        return data

    def _set_aside(self, error: str) -> None:
        """Move an unreadable document out of the way before anything is written over it."""
        corrupt = self._path.with_name(self._path.name + ".corrupt")
        try:
            os.replace(self._path, corrupt)
        except OSError as e:
            raise StorageError(f"Unreadable store {self._path} could not be moved aside: {e}")
        logger.warning("local_store_unreadable", path=str(self._path),
                       moved_to=str(corrupt), error=error)

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=".cashbook-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2, default=str)
            os.replace(tmp_path, self._path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write {self._path}: {e}")

    def _get(self, key: str) -> Any:
        return self._read().get(key)

    def _set(self, key: str, value: Any) -> bool:
        data = self._read()
        data[key] = value
        self._write(data)
        return True

    def _load_list(self, key: str, model: type) -> Optional[list]:
        raw = self._get(key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            logger.warning("local_store_key_malformed", key=key)
            return None

        items = []
        for record in raw:
            try:
                items.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    "local_store_record_skipped",
                    key=key,
                    record_id=record.get("id") if isinstance(record, dict) else None,
                    error=str(e),
                )
        return items

    @staticmethod
    def _dump_list(items: list) -> list[dict]:
        return [item.model_dump(mode="json", by_alias=True) for item in items]

    # -------------------------------------------------------------------------
    # Ledger collections
    # -------------------------------------------------------------------------

    async def load_transactions(self) -> Optional[list[Transaction]]:
        return self._load_list(TRANSACTIONS_KEY, Transaction)

    async def save_transactions(self, transactions: list[Transaction]) -> bool:
        return self._set(TRANSACTIONS_KEY, self._dump_list(transactions))

    async def load_accounts(self) -> Optional[list[Account]]:
        return self._load_list(ACCOUNTS_KEY, Account)

    async def save_accounts(self, accounts: list[Account]) -> bool:
        return self._set(ACCOUNTS_KEY, self._dump_list(accounts))

    async def load_categories(self) -> Optional[CategorySet]:
        data = self._read()
        expense = data.get(EXPENSE_CATEGORIES_KEY)
        income = data.get(INCOME_CATEGORIES_KEY)
        if expense is None and income is None:
            return None

        defaults = CategorySet()
        expense = self._labels(EXPENSE_CATEGORIES_KEY, expense)
        income = self._labels(INCOME_CATEGORIES_KEY, income)
        return CategorySet(
            expense=defaults.expense if expense is None else expense,
            income=defaults.income if income is None else income,
        )

    @staticmethod
    def _labels(key: str, raw: Any) -> Optional[list[str]]:
        if raw is None:
            return None
        if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
            logger.warning("local_store_key_malformed", key=key)
            return None
        return raw

    async def save_categories(self, categories: CategorySet) -> bool:
        data = self._read()
        data[EXPENSE_CATEGORIES_KEY] = list(categories.expense)
        data[INCOME_CATEGORIES_KEY] = list(categories.income)
        self._write(data)
        return True

    async def load_invoices(self) -> Optional[list[Invoice]]:
        return self._load_list(INVOICES_KEY, Invoice)

    async def save_invoices(self, invoices: list[Invoice]) -> bool:
        return self._set(INVOICES_KEY, self._dump_list(invoices))

    async def load_business_profile(self) -> Optional[BusinessProfile]:
        raw = self._get(PROFILE_KEY)
        if raw is None:
            return None
        try:
            return BusinessProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning("local_store_key_malformed", key=PROFILE_KEY, error=str(e))
            return None

    async def save_business_profile(self, profile: BusinessProfile) -> bool:
        return self._set(PROFILE_KEY, profile.model_dump(mode="json", by_alias=True))

    async def get_last_sync(self) -> Optional[datetime]:
        raw = self._get(LAST_SYNC_KEY)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning("local_store_key_malformed", key=LAST_SYNC_KEY)
            return None

    async def set_last_sync(self, when: datetime) -> bool:
        return self._set(LAST_SYNC_KEY, when.isoformat())

    async def clear(self) -> bool:
        """Remove the ledger collections. The audit log is kept."""
        audit = self._get(AUDIT_KEY)
        self._write({AUDIT_KEY: audit} if audit else {})
        return True

    # -------------------------------------------------------------------------
    # Audit log
    # -------------------------------------------------------------------------

    async def append_event(self, event: AuditEvent) -> bool:
        data = self._read()
        events = data.get(AUDIT_KEY)
        if not isinstance(events, list):
            events = []

        event_id = str(event.event_id)
        if any(isinstance(e, dict) and e.get("event_id") == event_id for e in events):
            raise DuplicateError(f"Audit event already recorded: {event_id}")

        events.append(event.model_dump(mode="json"))
        data[AUDIT_KEY] = events
        self._write(data)
        return True

    def _events(self) -> list[AuditEvent]:
        events = []
        for record in self._get(AUDIT_KEY) or []:
            try:
                events.append(AuditEvent.model_validate(record))
            except ValidationError:
                logger.warning("audit_record_skipped")
        return events

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
