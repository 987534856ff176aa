"""
Configuration Management for Cashbook

Every setting comes from the environment (or a .env file) through
pydantic-settings, one class per concern with its own prefix.

Only the optional integrations (Gemini, Google Sheets backup) need
credentials; the ledger and the reports run with defaults alone.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets cloud backup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet that receives backups"
    )

    # Worksheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Worksheet holding one transaction per row"
    )
    accounts_sheet_name: str = Field(
        default="Accounts",
        description="Worksheet holding one account per row"
    )
    categories_sheet_name: str = Field(
        default="Categories",
        description="Worksheet holding one category label per row"
    )
    invoices_sheet_name: str = Field(
        default="Invoices",
        description="Worksheet holding one invoice per row"
    )
    meta_sheet_name: str = Field(
        default="Meta",
        description="Worksheet holding the backup metadata"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn about a missing credentials file; backups fail later, the ledger does not."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Cloud backup will fail until it exists."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (receipt scanning and advice)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Ledger, report and receipt-handling settings.

    All fields have defaults, so the ledger runs without any environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Local store
    data_dir: str = Field(
        default="data",
        description="Directory holding the local JSON store"
    )
    store_filename: str = Field(
        default="cashbook.json",
        description="File name of the local JSON store"
    )

    # Report presentation
    page_size: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Transactions per page in the transaction list"
    )
    top_expenses_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of largest expenses shown in the visual report"
    )
    currency_code: str = Field(
        default="IDR",
        description="Currency code used in AI prompts"
    )

    # Backup
    backup_stale_days: int = Field(
        default=3,
        ge=1,
        description="Days after which the last cloud backup counts as stale"
    )

    # AI prompts
    advice_sample_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Transactions included in advice and analysis prompts"
    )

    # Receipt upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp",
        description="Comma-separated list of supported image formats"
    )

    # Receipt validation thresholds
    max_receipt_amount: float = Field(
        default=1_000_000_000.0,
        description="Maximum plausible receipt amount (for sanity checking)"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        description="How many days in the future a receipt date can be"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Accepted image extensions, lower-cased."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def store_path(self) -> Path:
        """Full path of the local JSON store."""
        return Path(self.data_dir) / self.store_filename


class Settings(BaseSettings):
    """
    Root settings container.

    Entry point to every settings group.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Groups are built on access; a missing Gemini key must not break the ledger

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings container.

    Tests that change the environment call get_settings.cache_clear().
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Check which setting groups can be loaded.

    Returns {group: ok} plus a "<group>_error" message for every group
    that failed. Meant for a startup check; the ledger itself only
    needs the app group.
    """
    settings = get_settings()
    results = {}
    for group in ("gemini", "google_sheets", "app"):
        try:
            getattr(settings, group)
            results[group] = True
        except Exception as e:
            results[group] = False
            results[f"{group}_error"] = str(e)
    return results
