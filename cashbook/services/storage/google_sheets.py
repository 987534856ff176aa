"""
Google Sheets Cloud Backup

DESIGN DECISION: Cloud backup is manual and whole-snapshot. The local
store stays the source of truth; a backup overwrites the spreadsheet and
a restore reads it back as a BackupSnapshot that the ledger service
imports like any backup file.

Google Sheets is used because:
1. Non-technical users can open their books directly in Sheets
2. No database or server setup required
3. Service-account access works without a browser OAuth flow

One worksheet per collection:
- Transactions: one transaction per row
- Accounts: one account per row
- Categories: type, name
- Invoices: one invoice per row, items JSON-serialized
- Meta: export date and app version
"""

import json
from datetime import datetime
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cashbook.config import GoogleSheetsSettings, get_settings
from cashbook.models.ledger import (
    Account,
    BackupSnapshot,
    Invoice,
    InvoiceItem,
    Transaction,
)
from cashbook.services.storage.interface import (
    NotFoundError,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)


TRANSACTION_COLUMNS = [
    "id",
    "date",
    "type",
    "amount",
    "category",
    "description",
    "merchant",
    "account_id",
]

ACCOUNT_COLUMNS = [
    "id",
    "name",
    "type",
    "initial_balance",
]

CATEGORY_COLUMNS = [
    "type",
    "name",
]

INVOICE_COLUMNS = [
    "id",
    "client_name",
    "date",
    "due_date",
    "status",
    "items_json",
]

META_COLUMNS = [
    "export_date",
    "app_version",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, title: str, columns: list[str], create: bool = True) -> gspread.Worksheet:
        """Get a worksheet by title, creating it with a header row if needed."""
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            if not create:
                raise NotFoundError(f"Backup worksheet not found: {title}")
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
            return sheet


class GoogleSheetsBackup:
    """
    Uploads and restores full ledger snapshots.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _transaction_to_row(t: Transaction) -> list:
        return [
            t.id,
            t.date or "",
            t.type.value,
            str(t.amount),
            t.category,
            t.description,
            t.merchant or "",
            t.account_id or "",
        ]

    @staticmethod
    def _account_to_row(a: Account) -> list:
        return [a.id, a.name, a.type.value, str(a.initial_balance)]

    @staticmethod
    def _invoice_to_row(inv: Invoice) -> list:
        return [
            inv.id,
            inv.client_name,
            inv.date,
            inv.due_date,
            inv.status.value,
            json.dumps([item.model_dump(mode="json") for item in inv.items]),
        ]

    @staticmethod
    def _records(rows: list[list[str]], columns: list[str]) -> list[dict]:
        """Turn data rows (header excluded) into dicts, padding short rows."""
        records = []
        for row in rows:
            if not row or not any(row):
                continue
            padded = list(row) + [""] * (len(columns) - len(row))
            records.append(dict(zip(columns, padded)))
        return records

    def _row_to_transaction(self, record: dict) -> Transaction:
        return Transaction(
            id=record["id"],
            date=record["date"] or None,
            type=record["type"],
            amount=record["amount"],
            category=record["category"],
            description=record["description"],
            merchant=record["merchant"] or None,
            account_id=record["account_id"] or None,
        )

    def _row_to_account(self, record: dict) -> Account:
        return Account(
            id=record["id"],
            name=record["name"],
            type=record["type"],
            initial_balance=record["initial_balance"] or "0",
        )

    def _row_to_invoice(self, record: dict) -> Invoice:
        items_json = record["items_json"]
        items = [InvoiceItem(**item) for item in json.loads(items_json)] if items_json else []
        return Invoice(
            id=record["id"],
            client_name=record["client_name"],
            date=record["date"],
            due_date=record["due_date"],
            status=record["status"],
            items=items,
        )

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _replace_sheet(self, title: str, columns: list[str], rows: list[list]) -> None:
        sheet = self._client.get_sheet(title, columns)
        sheet.clear()
        sheet.append_rows([columns] + rows, value_input_option="RAW")

    async def upload(self, snapshot: BackupSnapshot) -> bool:
        """
        Overwrite the backup spreadsheet with a snapshot.

        Raises:
            StorageError: If any worksheet write fails
        """
        settings = self._client.settings
        categories = (
            [["expense", name] for name in snapshot.expense_categories or []]
            + [["income", name] for name in snapshot.income_categories or []]
        )
        try:
            self._replace_sheet(
                settings.transactions_sheet_name, TRANSACTION_COLUMNS,
                [self._transaction_to_row(t) for t in snapshot.transactions],
            )
            self._replace_sheet(
                settings.accounts_sheet_name, ACCOUNT_COLUMNS,
                [self._account_to_row(a) for a in snapshot.accounts or []],
            )
            self._replace_sheet(settings.categories_sheet_name, CATEGORY_COLUMNS, categories)
            self._replace_sheet(
                settings.invoices_sheet_name, INVOICE_COLUMNS,
                [self._invoice_to_row(inv) for inv in snapshot.invoices or []],
            )
            self._replace_sheet(
                settings.meta_sheet_name, META_COLUMNS,
                [[snapshot.export_date.isoformat(), snapshot.app_version]],
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to upload backup: {e}")

        logger.info(
            "cloud_backup_uploaded",
            transactions=len(snapshot.transactions),
            spreadsheet_id=settings.spreadsheet_id,
        )
        return True

    # -------------------------------------------------------------------------
    # Restore
    # -------------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(NotFoundError),
        reraise=True,
    )
    def _read_sheet(self, title: str, columns: list[str]) -> list[dict]:
        sheet = self._client.get_sheet(title, columns, create=False)
        return self._records(sheet.get_all_values()[1:], columns)

    def _parse_all(self, records: list[dict], parse, kind: str) -> list:
        parsed = []
        for record in records:
            try:
                parsed.append(parse(record))
            except (ValidationError, ValueError, KeyError) as e:
                logger.warning("cloud_backup_row_skipped", kind=kind,
                               row_id=record.get("id"), error=str(e))
        return parsed

    async def download(self) -> BackupSnapshot:
        """
        Read the last uploaded snapshot back from the spreadsheet.

        Raises:
            NotFoundError: If no backup has been uploaded yet
            StorageError: If reading fails
        """
        settings = self._client.settings
        try:
            transactions = self._read_sheet(settings.transactions_sheet_name, TRANSACTION_COLUMNS)
            accounts = self._read_sheet(settings.accounts_sheet_name, ACCOUNT_COLUMNS)
            categories = self._read_sheet(settings.categories_sheet_name, CATEGORY_COLUMNS)
            invoices = self._read_sheet(settings.invoices_sheet_name, INVOICE_COLUMNS)
            meta = self._read_sheet(settings.meta_sheet_name, META_COLUMNS)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to download backup: {e}")

        snapshot = BackupSnapshot(
            transactions=self._parse_all(transactions, self._row_to_transaction, "transaction"),
            accounts=self._parse_all(accounts, self._row_to_account, "account") or None,
            invoices=self._parse_all(invoices, self._row_to_invoice, "invoice"),
            expense_categories=[r["name"] for r in categories if r["type"] == "expense"] or None,
            income_categories=[r["name"] for r in categories if r["type"] == "income"] or None,
        )
        if meta:
            try:
                snapshot.export_date = datetime.fromisoformat(meta[0]["export_date"])
            except ValueError:
                logger.warning("cloud_backup_meta_unreadable", value=meta[0]["export_date"])
            snapshot.app_version = meta[0]["app_version"] or snapshot.app_version

        logger.info("cloud_backup_downloaded", transactions=len(snapshot.transactions))
        return snapshot
