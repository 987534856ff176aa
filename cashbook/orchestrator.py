"""
Main Orchestrator for Cashbook

This module ties together all the components and defines the
end-to-end flows for:
1. Ledger changes (transactions, accounts, categories, invoices)
2. Receipt scanning (image -> scan -> validate -> user confirms -> transaction)
3. Reports (snapshot -> period -> filter -> aggregate -> view/CSV)
4. Backup (export/import, cloud backup and restore, reset)
5. Advice (transactions -> advisor -> tips)

DESIGN DECISION: LedgerService owns the session state (the single
top-level store). The reporting functions never see the service: every
report call hands them an explicit snapshot of the lists.

DESIGN DECISION: Every mutation saves the affected collection right away
and is audited. There is no debounced writer; callers that batch changes
can use the bulk operations.
"""

import json
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from cashbook.agents import AdvisorAgent, ReceiptScanAgent, expense_categories_hint
from cashbook.audit import AuditLogger, create_correlation_id
from cashbook.config import AppSettings, get_settings
from cashbook.models.audit import AuditEventType
from cashbook.models.ledger import (
    Account,
    AccountType,
    BackupSnapshot,
    BusinessProfile,
    CategorySet,
    FinancialAdvice,
    Invoice,
    ReceiptScan,
    ReportAnalysis,
    Transaction,
    TransactionType,
    ValidationResult,
)
from cashbook.models.report import (
    Aggregate,
    CustomRange,
    IncomeStatement,
    Period,
    PeriodRange,
    SortOrder,
    TransactionPage,
    TypeFilter,
    VisualReport,
)
from cashbook.reports import (
    aggregate,
    build_income_statement,
    build_visual_report,
    describe_period,
    filter_transactions,
    income_statement_csv,
    paginate,
    parse_day,
    resolve_range,
    sort_transactions,
    summarize,
    transactions_csv,
)
from cashbook.services.storage import (
    GoogleSheetsBackup,
    LedgerStorageInterface,
    LocalJSONStorage,
)
from cashbook.validation import ReceiptValidator


logger = structlog.get_logger(__name__)

APP_VERSION = "1.0.0"


class LedgerError(Exception):
    """A ledger operation was rejected."""
    pass


class AccountRemovalError(LedgerError):
    """The last remaining account cannot be removed."""
    pass


class BackupFormatError(LedgerError):
    """A backup file is not in the expected format."""
    pass


class SyncStatus(str, Enum):
    """How recent the last cloud backup is."""
    NEVER = "never"
    STALE = "stale"
    FRESH = "fresh"


def default_accounts() -> list[Account]:
    """The reference accounts every new ledger starts with."""
    return [
        Account(id="1", name="Cash", type=AccountType.CASH),
        Account(id="2", name="Bank Account", type=AccountType.BANK),
    ]


class LedgerService:
    """
    Session state plus every user-facing flow.

    Call load() once before anything else.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        scan_agent: Optional[ReceiptScanAgent] = None,
        advisor: Optional[AdvisorAgent] = None,
        backup: Optional[GoogleSheetsBackup] = None,
        validator: Optional[ReceiptValidator] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        # Gemini and Sheets clients need credentials, so they are created on first use
        self._scan_agent = scan_agent
        self._advisor = advisor
        self._backup = backup
        self._validator = validator or ReceiptValidator(self._settings)

        self._transactions: list[Transaction] = []
        self._accounts: list[Account] = default_accounts()
        self._categories = CategorySet()
        self._invoices: list[Invoice] = []
        self._profile = BusinessProfile()

    # -------------------------------------------------------------------------
    # State snapshots
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts)

    @property
    def categories(self) -> CategorySet:
        return self._categories

    @property
    def invoices(self) -> list[Invoice]:
        return list(self._invoices)

    @property
    def business_profile(self) -> BusinessProfile:
        return self._profile

    @property
    def scan_agent(self) -> ReceiptScanAgent:
        if self._scan_agent is None:
            self._scan_agent = ReceiptScanAgent()
        return self._scan_agent

    @property
    def advisor(self) -> AdvisorAgent:
        if self._advisor is None:
            self._advisor = AdvisorAgent(
                sample_size=self._settings.advice_sample_size,
                currency=self._settings.currency_code,
            )
        return self._advisor

    @property
    def backup(self) -> GoogleSheetsBackup:
        if self._backup is None:
            self._backup = GoogleSheetsBackup()
        return self._backup

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """
        Load every collection from storage.

        A fresh store is seeded with the default accounts and categories.
        Transactions without an account are assigned to the first account
        and the migrated list is saved back.
        """
        accounts = await self._storage.load_accounts()
        if not accounts:
            accounts = default_accounts()
            await self._storage.save_accounts(accounts)
        self._accounts = accounts

        transactions = await self._storage.load_transactions() or []
        self._transactions = self._assign_default_account(transactions)
        if self._transactions != transactions:
            await self._storage.save_transactions(self._transactions)
            logger.info("transactions_migrated", default_account=self._accounts[0].id)

        categories = await self._storage.load_categories()
        if categories is None:
            categories = CategorySet()
            await self._storage.save_categories(categories)
        self._categories = categories

        self._invoices = await self._storage.load_invoices() or []
        self._profile = await self._storage.load_business_profile() or BusinessProfile()

        logger.info(
            "ledger_loaded",
            transactions=len(self._transactions),
            accounts=len(self._accounts),
            invoices=len(self._invoices),
        )

    def _assign_default_account(self, transactions: list[Transaction]) -> list[Transaction]:
        default_id = self._accounts[0].id
        return [
            t if t.account_id else t.model_copy(update={"account_id": default_id})
            for t in transactions
        ]

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(
        self,
        type: TransactionType,
        amount: Union[Decimal, int, str],
        category: str,
        description: str = "",
        date: Optional[str] = None,
        merchant: Optional[str] = None,
        account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Record a new transaction (newest first).

        The date defaults to today and the account to the first account.

        Raises:
            pydantic.ValidationError: If the values are invalid (e.g. negative amount)
        """
        transaction = Transaction(
            type=type,
            amount=amount,
            category=category,
            description=description,
            date=date or datetime.now().date().isoformat(),
            merchant=merchant,
            account_id=account_id or self._accounts[0].id,
        )
        self._transactions = [transaction] + self._transactions
        await self._storage.save_transactions(self._transactions)

        await self._audit_logger.log_transaction_added(
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=str(transaction.amount),
            category=transaction.category,
            correlation_id=correlation_id,
        )
        return transaction

    async def delete_transaction(self, transaction_id: str) -> bool:
        """Delete one transaction. Returns False if it does not exist."""
        return await self.delete_transactions([transaction_id]) == 1

    async def delete_transactions(self, transaction_ids: Iterable[str]) -> int:
        """Delete several transactions. Returns how many were removed."""
        ids = set(transaction_ids)
        removed = [t.id for t in self._transactions if t.id in ids]
        if not removed:
            return 0

        self._transactions = [t for t in self._transactions if t.id not in ids]
        await self._storage.save_transactions(self._transactions)
        await self._audit_logger.log_transactions_deleted(removed)
        return len(removed)

    async def clear_transactions(self) -> int:
        """Delete every transaction. Accounts, categories and invoices stay."""
        count = len(self._transactions)
        if count == 0:
            return 0
        self._transactions = []
        await self._storage.save_transactions(self._transactions)
        await self._audit_logger.log_transactions_cleared(count)
        return count

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def _find_account(self, account_id: str) -> Account:
        for account in self._accounts:
            if account.id == account_id:
                return account
        raise LedgerError(f"Unknown account: {account_id}")

    async def add_account(
        self,
        name: str,
        type: AccountType = AccountType.CASH,
        initial_balance: Union[Decimal, int, str] = Decimal("0"),
    ) -> Account:
        """
        Create an account.

        Raises:
            LedgerError: If the name is blank or the initial balance negative
        """
        if not name or not name.strip():
            raise LedgerError("Account name cannot be empty")
        try:
            balance = Decimal(str(initial_balance)) if initial_balance != "" else Decimal("0")
        except ArithmeticError:
            raise LedgerError(f"Invalid initial balance: {initial_balance}")
        if not balance.is_finite() or balance < 0:
            raise LedgerError("Initial balance must be a non-negative number")

        account = Account(name=name, type=type, initial_balance=balance)
        self._accounts = self._accounts + [account]
        await self._storage.save_accounts(self._accounts)
        await self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_ADDED, account.id, account.name
        )
        return account

    async def rename_account(self, account_id: str, name: str) -> Account:
        """
        Rename an account.

        Raises:
            LedgerError: If the account is unknown or the name blank
        """
        if not name or not name.strip():
            raise LedgerError("Account name cannot be empty")
        current = self._find_account(account_id)
        renamed = current.model_copy(update={"name": name.strip()})
        self._accounts = [renamed if a.id == account_id else a for a in self._accounts]
        await self._storage.save_accounts(self._accounts)
        await self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_UPDATED, account_id, renamed.name
        )
        return renamed

    async def remove_account(self, account_id: str) -> None:
        """
        Remove an account.

        Transactions booked against it are kept; reports show them in the
        unassigned group.

        Raises:
            AccountRemovalError: If it is the last account
            LedgerError: If the account is unknown
        """
        account = self._find_account(account_id)
        if len(self._accounts) <= 1:
            raise AccountRemovalError("At least one account must remain")

        self._accounts = [a for a in self._accounts if a.id != account_id]
        await self._storage.save_accounts(self._accounts)
        await self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_REMOVED, account.id, account.name
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def add_category(self, type: TransactionType, name: str) -> CategorySet:
        """Add a category label. Blank and duplicate names are ignored."""
        updated = self._categories.add(type, name)
        if updated is not self._categories:
            self._categories = updated
            await self._storage.save_categories(updated)
            await self._audit_logger.log_category_changed(True, type.value, name.strip())
        return self._categories

    async def remove_category(self, type: TransactionType, name: str) -> CategorySet:
        """Remove a category label. Transactions keep their category string."""
        if not self._categories.contains(type, name):
            return self._categories
        self._categories = self._categories.remove(type, name)
        await self._storage.save_categories(self._categories)
        await self._audit_logger.log_category_changed(False, type.value, name)
        return self._categories

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    async def save_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert a new invoice (newest first) or replace one with the same id.

        Raises:
            LedgerError: If the client name is missing
        """
        if not invoice.client_name:
            raise LedgerError("Client name is required")

        if any(inv.id == invoice.id for inv in self._invoices):
            self._invoices = [invoice if inv.id == invoice.id else inv for inv in self._invoices]
        else:
            self._invoices = [invoice] + self._invoices

        await self._storage.save_invoices(self._invoices)
        await self._audit_logger.log_invoice_changed(invoice.id, total=str(invoice.total))
        return invoice

    async def delete_invoice(self, invoice_id: str) -> bool:
        remaining = [inv for inv in self._invoices if inv.id != invoice_id]
        if len(remaining) == len(self._invoices):
            return False
        self._invoices = remaining
        await self._storage.save_invoices(self._invoices)
        await self._audit_logger.log_invoice_changed(invoice_id, deleted=True)
        return True

    async def save_business_profile(self, profile: BusinessProfile) -> BusinessProfile:
        self._profile = profile
        await self._storage.save_business_profile(profile)
        return profile

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_backup(self) -> BackupSnapshot:
        """Snapshot of every collection."""
        return BackupSnapshot(
            transactions=self.transactions,
            invoices=self.invoices,
            accounts=self.accounts,
            expense_categories=list(self._categories.expense),
            income_categories=list(self._categories.income),
            app_version=APP_VERSION,
        )

    async def export_backup_json(self) -> str:
        """Backup file contents (camelCase keys, as written by earlier versions)."""
        snapshot = self.export_backup()
        await self._audit_logger.log_backup(
            AuditEventType.BACKUP_EXPORTED, len(snapshot.transactions), "file"
        )
        return snapshot.model_dump_json(by_alias=True, indent=2)

    def parse_backup(self, text: Union[str, bytes]) -> BackupSnapshot:
        """
        Parse backup file contents.

        Raises:
            BackupFormatError: If the file is not JSON or has no transaction list
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            raise BackupFormatError("Backup file is not valid JSON")
        if not isinstance(data, dict) or not isinstance(data.get("transactions"), list):
            raise BackupFormatError("Backup file has no transaction list")
        try:
            return BackupSnapshot.model_validate(data)
        except ValidationError as e:
            raise BackupFormatError(f"Backup file could not be read: {e.error_count()} invalid values")

    async def import_backup(
        self,
        backup: Union[BackupSnapshot, str, bytes],
        source: str = "file",
    ) -> BackupSnapshot:
        """
        Replace the ledger with a backup.

        Transactions are always replaced. Invoices, accounts and categories
        are only replaced when the backup contains them.
        """
        snapshot = backup if isinstance(backup, BackupSnapshot) else self.parse_backup(backup)

        if snapshot.accounts:
            self._accounts = list(snapshot.accounts)
            await self._storage.save_accounts(self._accounts)
        self._transactions = list(snapshot.transactions)
        await self._storage.save_transactions(self._transactions)

        if snapshot.invoices is not None:
            self._invoices = list(snapshot.invoices)
            await self._storage.save_invoices(self._invoices)

        if snapshot.expense_categories is not None or snapshot.income_categories is not None:
            self._categories = CategorySet(
                expense=snapshot.expense_categories
                if snapshot.expense_categories is not None else list(self._categories.expense),
                income=snapshot.income_categories
                if snapshot.income_categories is not None else list(self._categories.income),
            )
            await self._storage.save_categories(self._categories)

        await self._audit_logger.log_backup(
            AuditEventType.BACKUP_IMPORTED, len(snapshot.transactions), source
        )
        return snapshot

    async def reset(self) -> None:
        """Wipe local data and start again from the defaults."""
        await self._storage.clear()
        await self._audit_logger.log_data_reset()
        self._transactions = []
        self._invoices = []
        self._profile = BusinessProfile()
        await self.load()

    async def backup_to_cloud(self) -> datetime:
        """
        Upload a snapshot to Google Sheets and record the sync time.

        Raises:
            StorageError: If the upload fails (audited, then re-raised)
        """
        snapshot = self.export_backup()
        try:
            await self.backup.upload(snapshot)
        except Exception as e:
            await self._audit_logger.log_external_service_error("google_sheets", str(e))
            raise

        now = datetime.now()
        await self._storage.set_last_sync(now)
        await self._audit_logger.log_backup(
            AuditEventType.CLOUD_BACKUP_COMPLETED, len(snapshot.transactions), "google_sheets"
        )
        return now

    async def restore_from_cloud(self) -> BackupSnapshot:
        """
        Replace the ledger with the last cloud backup.

        Raises:
            NotFoundError: If no backup exists
            StorageError: If the download fails
        """
        try:
            snapshot = await self.backup.download()
        except Exception as e:
            await self._audit_logger.log_external_service_error("google_sheets", str(e))
            raise

        await self.import_backup(snapshot, source="google_sheets")
        await self._audit_logger.log_backup(
            AuditEventType.CLOUD_RESTORE_COMPLETED, len(snapshot.transactions), "google_sheets"
        )
        return snapshot

    async def sync_status(self, now: Optional[datetime] = None) -> SyncStatus:
        """NEVER, STALE (older than the configured days) or FRESH."""
        last = await self._storage.get_last_sync()
        if last is None:
            return SyncStatus.NEVER
        now = now or datetime.now()
        if now - last > timedelta(days=self._settings.backup_stale_days):
            return SyncStatus.STALE
        return SyncStatus.FRESH

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    async def scan_receipt(
        self,
        image_bytes: bytes,
        mime_type: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ReceiptScan, ValidationResult]:
        """
        Scan and validate a receipt. Nothing is recorded yet.

        Raises:
            LedgerError: If the image is too large or of an unsupported type
            ReceiptScanError: If the scan fails (audited, then re-raised)
        """
        correlation_id = correlation_id or create_correlation_id()

        if len(image_bytes) > self._settings.max_upload_size_bytes:
            raise LedgerError(
                f"Image is larger than {self._settings.max_upload_size_mb} MB"
            )
        image_format = mime_type.split("/")[-1].lower()
        if image_format not in self._settings.supported_formats_list:
            raise LedgerError(f"Unsupported image type: {mime_type}")

        categories = expense_categories_hint(self._categories.expense)
        try:
            scan = await self.scan_agent.scan(image_bytes, mime_type, categories)
        except Exception as e:
            await self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_receipt_scanned(
            scan_id=scan.scan_id,
            merchant=scan.merchant,
            amount=str(scan.amount) if scan.amount is not None else None,
            correlation_id=correlation_id,
        )

        result = self._validator.validate(
            scan,
            existing=self._transactions,
            categories=categories,
        )
        if not result.is_valid:
            await self._audit_logger.log_validation_failed(
                scan_id=scan.scan_id,
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            )
        return scan, result

    async def confirm_receipt(
        self,
        scan: ReceiptScan,
        account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
        reference: Optional[date] = None,
        **overrides,
    ) -> Transaction:
        """
        Record a scanned receipt as an expense.

        CRITICAL: Called only after the user reviewed the scan. Any field
        the user corrected is passed in `overrides` (merchant, date,
        amount, category, description).

        Raises:
            LedgerError: If there is still no amount
        """
        values = {
            "merchant": scan.merchant,
            "date": scan.date,
            "amount": scan.amount,
            "category": scan.category,
            "description": scan.description,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if values["amount"] is None:
            raise LedgerError("Cannot record a receipt without an amount")

        day = parse_day(values["date"]) or reference or datetime.now().date()
        return await self.add_transaction(
            type=TransactionType.EXPENSE,
            amount=values["amount"],
            category=values["category"] or "Other",
            description=values["description"] or values["merchant"] or "",
            date=day.isoformat(),
            merchant=values["merchant"],
            account_id=account_id,
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def resolve(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
    ) -> PeriodRange:
        return resolve_range(period, reference, custom_range)

    def dashboard(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
    ) -> Aggregate:
        """Totals, category distribution, account balances and chart series."""
        period_range = resolve_range(period, reference)
        subset = filter_transactions(self._transactions, period_range)
        return aggregate(
            subset,
            period_range,
            accounts=self._accounts,
            all_transactions=self._transactions,
        )

    def visual_report(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> VisualReport:
        period_range = resolve_range(period, reference, custom_range)
        subset = filter_transactions(self._transactions, period_range)
        return build_visual_report(
            subset, period_range, categories, limit=self._settings.top_expenses_limit
        )

    def income_statement(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> IncomeStatement:
        period_range = resolve_range(period, reference, custom_range)
        subset = filter_transactions(self._transactions, period_range)
        return build_income_statement(subset, period_range, categories)

    def income_statement_export(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> str:
        """The income statement as CSV text."""
        statement = self.income_statement(period, reference, custom_range, categories)
        return income_statement_csv(statement, describe_period(statement.range))

    def transactions_export(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
    ) -> str:
        """Raw transactions of a period as CSV text, in ledger order."""
        period_range = resolve_range(period, reference, custom_range)
        return transactions_csv(filter_transactions(self._transactions, period_range))

    def transaction_page(
        self,
        page: int = 1,
        period: Period = Period.ALL,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
        categories: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        type_filter: TypeFilter = TypeFilter.ALL,
        order: SortOrder = SortOrder.NEWEST,
        page_size: Optional[int] = None,
    ) -> TransactionPage:
        """One page of the filtered, sorted transaction list."""
        period_range = resolve_range(period, reference, custom_range)
        subset = filter_transactions(
            self._transactions,
            period_range,
            categories=categories,
            search=search,
            type_filter=type_filter,
        )
        return paginate(
            sort_transactions(subset, order),
            page_size=page_size or self._settings.page_size,
            page=page,
            summary=summarize(subset),
        )

    # -------------------------------------------------------------------------
    # Advice
    # -------------------------------------------------------------------------

    async def get_advice(self) -> FinancialAdvice:
        """
        Advice over the most recent transactions.

        Raises:
            AdvisorError: If the advisor fails (audited, then re-raised)
        """
        recent = sort_transactions(self._transactions, SortOrder.NEWEST)
        try:
            advice = await self.advisor.get_advice(recent)
        except Exception as e:
            await self._audit_logger.log_external_service_error("gemini", str(e))
            raise
        await self._audit_logger.log_advice_generated(
            "advice", min(len(recent), self._settings.advice_sample_size)
        )
        return advice

    async def analyze_report(
        self,
        period: Period = Period.THIS_MONTH,
        reference: Optional[date] = None,
        custom_range: Optional[CustomRange] = None,
    ) -> ReportAnalysis:
        """
        AI summary points for one report period.

        Raises:
            AdvisorError: If the advisor fails (audited, then re-raised)
        """
        period_range = resolve_range(period, reference, custom_range)
        subset = filter_transactions(self._transactions, period_range)
        try:
            analysis = await self.advisor.analyze_report(
                sort_transactions(subset, SortOrder.NEWEST),
                describe_period(period_range),
                totals=summarize(subset),
            )
        except Exception as e:
            await self._audit_logger.log_external_service_error("gemini", str(e))
            raise
        await self._audit_logger.log_advice_generated(
            "report_analysis", min(len(subset), self._settings.advice_sample_size)
        )
        return analysis


async def create_ledger_service(
    settings: Optional[AppSettings] = None,
) -> LedgerService:
    """
    Factory function: local JSON store plus an audit logger writing to it.

    The Gemini and Google Sheets clients are created lazily, so the
    ledger works without their credentials.
    """
    settings = settings or get_settings().app
    storage = LocalJSONStorage(settings.store_path)
    service = LedgerService(
        storage=storage,
        audit_logger=AuditLogger(storage),
        settings=settings,
    )
    await service.load()
    return service
