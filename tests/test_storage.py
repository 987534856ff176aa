"""
Tests for storage backends.

The local JSON store runs against tmp_path; Google Sheets is replaced by
an in-memory fake client with the same worksheet calls gspread offers.
"""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from cashbook.models.audit import AuditEventBuilder
from cashbook.models.ledger import (
    Account,
    BackupSnapshot,
    BusinessProfile,
    CategorySet,
    Invoice,
    InvoiceItem,
    TransactionType,
)
from cashbook.services.storage import (
    DuplicateError,
    GoogleSheetsBackup,
    LocalJSONStorage,
    NotFoundError,
)
from cashbook.config import GoogleSheetsSettings

from conftest import make_transaction


@pytest.fixture
def store(tmp_path):
    return LocalJSONStorage(tmp_path / "data" / "cashbook.json")


class TestLocalJSONStorage:
    """Tests for LocalJSONStorage."""

    @pytest.mark.asyncio
    async def test_unset_collections_load_as_none(self, store):
        assert await store.load_transactions() is None
        assert await store.load_accounts() is None
        assert await store.load_categories() is None
        assert await store.get_last_sync() is None

    @pytest.mark.asyncio
    async def test_transactions_round_trip(self, store):
        t = make_transaction("12.50", merchant="Cafe")
        await store.save_transactions([t])
        assert await store.load_transactions() == [t]

    @pytest.mark.asyncio
    async def test_file_uses_camel_case_keys(self, store):
        await store.save_transactions([make_transaction(account_id="2")])
        await store.save_accounts([Account(id="2", name="Bank", initial_balance=Decimal("5"))])
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["transactions"][0]["accountId"] == "2"
        assert data["accounts"][0]["initialBalance"] == "5"

    @pytest.mark.asyncio
    async def test_malformed_record_is_skipped(self, store):
        good = make_transaction()
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({
            "transactions": [
                good.model_dump(mode="json", by_alias=True),
                {"id": "bad", "amount": "-5", "type": "expense"},
                "not a record",
            ]
        }), encoding="utf-8")
        assert await store.load_transactions() == [good]

    @pytest.mark.asyncio
    async def test_unreadable_file_loads_empty(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")
        assert await store.load_transactions() is None

    @pytest.mark.asyncio
    async def test_unreadable_file_is_not_overwritten(self, store):
        store.path.parent.mkdir(parents=True)
        truncated = '{"transactions": [{"id": "a", "amount": 5, "type": "income"}'
        store.path.write_text(truncated, encoding="utf-8")

        await store.save_accounts([Account(id="1", name="Cash")])

        corrupt = store.path.with_name("cashbook.json.corrupt")
        assert corrupt.read_text(encoding="utf-8") == truncated
        assert [a.id for a in await store.load_accounts()] == ["1"]

    @pytest.mark.asyncio
    async def test_categories(self, store):
        categories = CategorySet().add(TransactionType.EXPENSE, "Rent")
        await store.save_categories(categories)
        loaded = await store.load_categories()
        assert loaded.expense[-1] == "Rent"
        assert loaded.income == categories.income

    @pytest.mark.asyncio
    async def test_empty_category_list_is_kept(self, store):
        await store.save_categories(CategorySet(expense=[], income=["Sales"]))
        loaded = await store.load_categories()
        assert loaded.expense == []

    @pytest.mark.asyncio
    async def test_invoices_and_profile(self, store):
        invoice = Invoice(
            client_name="Acme", date="2024-03-01", due_date="2024-03-31",
            items=[InvoiceItem(description="Design", price=Decimal("100"))],
        )
        await store.save_invoices([invoice])
        await store.save_business_profile(BusinessProfile(name="Toko Maju", bank_info="BCA 123"))
        assert (await store.load_invoices())[0].total == Decimal("100")
        assert (await store.load_business_profile()).bank_info == "BCA 123"

    @pytest.mark.asyncio
    async def test_last_sync(self, store):
        when = datetime(2024, 3, 1, 10, 30)
        await store.set_last_sync(when)
        assert await store.get_last_sync() == when

    @pytest.mark.asyncio
    async def test_clear_keeps_audit_log(self, store):
        await store.save_transactions([make_transaction()])
        await store.append_event(AuditEventBuilder.data_reset())
        await store.clear()
        assert await store.load_transactions() is None
        assert len(await store.get_recent_events()) == 1

    @pytest.mark.asyncio
    async def test_audit_log_is_append_only(self, store):
        event = AuditEventBuilder.transactions_cleared(3)
        await store.append_event(event)
        with pytest.raises(DuplicateError):
            await store.append_event(event)

    @pytest.mark.asyncio
    async def test_events_by_correlation_id(self, store):
        from uuid import uuid4
        correlation_id = uuid4()
        await store.append_event(AuditEventBuilder.receipt_scanned("s1", "Cafe", "10", correlation_id))
        await store.append_event(AuditEventBuilder.data_reset())
        events = await store.get_events_by_correlation_id(correlation_id)
        assert [e.entity_id for e in events] == ["s1"]


# =============================================================================
# Google Sheets backup
# =============================================================================

class FakeWorksheet:
    def __init__(self):
        self.rows: list[list[str]] = []

    def clear(self):
        self.rows = []

    def append_rows(self, rows, value_input_option=None):
        self.rows.extend([[str(v) for v in row] for row in rows])

    def get_all_values(self):
        return [list(row) for row in self.rows]


class FakeSheetsClient:
    """Same get_sheet contract as GoogleSheetsClient, backed by dicts."""

    def __init__(self):
        self.settings = GoogleSheetsSettings(
            credentials_path="unused.json", spreadsheet_id="sheet-id", _env_file=None
        )
        self.sheets: dict[str, FakeWorksheet] = {}

    def get_sheet(self, title, columns, create=True):
        if title not in self.sheets:
            if not create:
                raise NotFoundError(f"Backup worksheet not found: {title}")
            self.sheets[title] = FakeWorksheet()
        return self.sheets[title]


class TestGoogleSheetsBackup:
    """Tests for cloud backup upload and restore."""

    def snapshot(self):
        return BackupSnapshot(
            transactions=[
                make_transaction("25000", category="Transport", merchant="Bluebird"),
                make_transaction("100000", TransactionType.INCOME, category="Sales",
                                 date=None, account_id=None),
            ],
            accounts=[Account(id="1", name="Cash", initial_balance=Decimal("50000"))],
            invoices=[Invoice(
                client_name="Acme", date="2024-03-01", due_date="2024-03-31",
                items=[InvoiceItem(description="Design", quantity=2, price=Decimal("150"))],
            )],
            expense_categories=["Transport"],
            income_categories=["Sales", "Other"],
            export_date=datetime(2024, 3, 20, 8, 0),
        )

    @pytest.mark.asyncio
    async def test_upload_writes_header_and_rows(self):
        client = FakeSheetsClient()
        await GoogleSheetsBackup(client).upload(self.snapshot())
        rows = client.sheets["Transactions"].rows
        assert rows[0][:3] == ["id", "date", "type"]
        assert len(rows) == 3
        assert client.sheets["Categories"].rows[1:] == [
            ["expense", "Transport"], ["income", "Sales"], ["income", "Other"],
        ]

    @pytest.mark.asyncio
    async def test_upload_replaces_previous_backup(self):
        client = FakeSheetsClient()
        backup = GoogleSheetsBackup(client)
        await backup.upload(self.snapshot())
        await backup.upload(self.snapshot())
        assert len(client.sheets["Transactions"].rows) == 3

    @pytest.mark.asyncio
    async def test_restore_matches_upload(self):
        client = FakeSheetsClient()
        backup = GoogleSheetsBackup(client)
        original = self.snapshot()
        await backup.upload(original)

        restored = await backup.download()
        assert restored.transactions == original.transactions
        assert restored.accounts == original.accounts
        assert restored.invoices[0].total == Decimal("300")
        assert restored.income_categories == ["Sales", "Other"]
        assert restored.export_date == datetime(2024, 3, 20, 8, 0)

    @pytest.mark.asyncio
    async def test_bad_row_is_skipped(self):
        client = FakeSheetsClient()
        backup = GoogleSheetsBackup(client)
        await backup.upload(self.snapshot())
        client.sheets["Transactions"].rows.append(["x", "", "refund", "1", "", "", "", ""])
        restored = await backup.download()
        assert len(restored.transactions) == 2

    @pytest.mark.asyncio
    async def test_restore_without_backup(self):
        with pytest.raises(NotFoundError):
            await GoogleSheetsBackup(FakeSheetsClient()).download()
