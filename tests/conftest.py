"""
Shared fixtures.

No test talks to Gemini, Google Sheets or the real data directory:
storage is in memory (or a tmp_path JSON file) and the Gemini model is
a fake returning canned text.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import pytest

from cashbook.config import AppSettings
from cashbook.models.audit import AuditEvent
from cashbook.models.ledger import (
    Account,
    BusinessProfile,
    CategorySet,
    Invoice,
    Transaction,
    TransactionType,
)
from cashbook.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
)


def make_transaction(
    amount="100",
    type=TransactionType.EXPENSE,
    date: Optional[str] = "2024-03-15",
    category="Other",
    description="",
    merchant=None,
    account_id="1",
    **kwargs,
) -> Transaction:
    """Build a Transaction with sensible defaults."""
    return Transaction(
        amount=Decimal(str(amount)),
        type=type,
        date=date,
        category=category,
        description=description,
        merchant=merchant,
        account_id=account_id,
        **kwargs,
    )


class InMemoryStorage(LedgerStorageInterface, AuditStorageInterface):
    """Dict-backed storage with the same None-when-unset contract."""

    def __init__(self):
        self.data: dict = {}
        self.events: list[AuditEvent] = []
        self.save_calls: list[str] = []

    async def load_transactions(self) -> Optional[list[Transaction]]:
        return self.data.get("transactions")

    async def save_transactions(self, transactions: list[Transaction]) -> bool:
        self.save_calls.append("transactions")
        self.data["transactions"] = list(transactions)
        return True

    async def load_accounts(self) -> Optional[list[Account]]:
        return self.data.get("accounts")

    async def save_accounts(self, accounts: list[Account]) -> bool:
        self.save_calls.append("accounts")
        self.data["accounts"] = list(accounts)
        return True

    async def load_categories(self) -> Optional[CategorySet]:
        return self.data.get("categories")

    async def save_categories(self, categories: CategorySet) -> bool:
        self.save_calls.append("categories")
        self.data["categories"] = categories
        return True

    async def load_invoices(self) -> Optional[list[Invoice]]:
        return self.data.get("invoices")

    async def save_invoices(self, invoices: list[Invoice]) -> bool:
        self.save_calls.append("invoices")
        self.data["invoices"] = list(invoices)
        return True

    async def load_business_profile(self) -> Optional[BusinessProfile]:
        return self.data.get("profile")

    async def save_business_profile(self, profile: BusinessProfile) -> bool:
        self.data["profile"] = profile
        return True

    async def get_last_sync(self) -> Optional[datetime]:
        return self.data.get("last_sync")

    async def set_last_sync(self, when: datetime) -> bool:
        self.data["last_sync"] = when
        return True

    async def clear(self) -> bool:
        self.data = {}
        return True

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]

    def event_types(self) -> list[str]:
        return [e.event_type.value for e in self.events]


class FakeResponse:
    def __init__(self, text: str):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text: str = "{}", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: list = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture
def app_settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def storage():
    return InMemoryStorage()
