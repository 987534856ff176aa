"""Tests for settings loading."""

from pathlib import Path

import pytest

from cashbook.config import AppSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self):
        settings = AppSettings(_env_file=None)
        assert settings.page_size == 10
        assert settings.top_expenses_limit == 5
        assert settings.backup_stale_days == 3
        assert settings.store_path == Path("data") / "cashbook.json"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PAGE_SIZE", "25")
        monkeypatch.setenv("DATA_DIR", "/tmp/books")
        settings = AppSettings(_env_file=None)
        assert settings.page_size == 25
        assert settings.store_path == Path("/tmp/books/cashbook.json")

    def test_derived_values(self):
        settings = AppSettings(_env_file=None, supported_image_formats="JPG, png")
        assert settings.supported_formats_list == ["jpg", "png"]
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_invalid_page_size(self, monkeypatch):
        monkeypatch.setenv("PAGE_SIZE", "0")
        with pytest.raises(ValueError):
            AppSettings(_env_file=None)


def test_validate_all_settings_without_credentials(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
    results = validate_all_settings()
    assert results["app"] is True
    assert results["gemini"] is False
    assert "gemini_error" in results
