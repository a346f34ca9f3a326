"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from dompetbot.config import (
    AppSettings,
    GoogleSheetsSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test without a .env file or inherited credentials."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "GOOGLE_SHEETS_SPREADSHEET_ID",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_CLIENT_EMAIL",
        "GOOGLE_SHEETS_PRIVATE_KEY",
        "GEMINI_API_KEY",
        "TELEGRAM_BOT_TOKEN",
        "TIMEZONE",
        "SOURCE_TAG",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:

    def test_defaults(self):
        settings = AppSettings()
        assert settings.timezone == "Asia/Jakarta"
        assert settings.default_category == "Lainnya"
        assert settings.recent_transactions_limit == 5

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SOURCE_TAG", "WhatsApp Bot")
        assert AppSettings().source_tag == "WhatsApp Bot"

    def test_row_ceiling_bounds(self):
        with pytest.raises(ValidationError):
            AppSettings(max_ledger_rows=0)


class TestGoogleSheetsSettings:

    def test_requires_some_credentials(self):
        with pytest.raises(ValidationError, match="GOOGLE_SHEETS_CREDENTIALS_PATH"):
            GoogleSheetsSettings(spreadsheet_id="sheet-id")

    def test_inline_credentials_from_env(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-id")
        monkeypatch.setenv("GOOGLE_SHEETS_CLIENT_EMAIL", "bot@example.com")
        monkeypatch.setenv("GOOGLE_SHEETS_PRIVATE_KEY", "line1\\nline2")
        settings = GoogleSheetsSettings()
        assert settings.private_key == "line1\nline2"
        assert settings.worksheet_name == "Transactions"


class TestValidateAllSettings:

    def test_reports_missing_collaborators(self):
        status = validate_all_settings()
        assert status["app"] is True
        assert status["gemini"] is False
        assert status["telegram"] is False
        assert status["google_sheets"] is False
        assert "gemini_error" in status

    def test_reports_configured_collaborators(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
        status = validate_all_settings()
        assert status["gemini"] is True
        assert status["telegram"] is True
