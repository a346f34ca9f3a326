"""
Configuration Management for dompetbot

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so the external collaborators
(Google Sheets, Gemini, Telegram) are visible in one place and validated
before the bot starts taking messages.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets ledger storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet holding the ledger"
    )
    worksheet_name: str = Field(
        default="Transactions",
        description="Name of the worksheet that holds transaction rows"
    )

    # Either a service account file or the inline key pair
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to Google service account credentials JSON"
    )
    client_email: Optional[str] = Field(
        default=None,
        description="Service account e-mail (used with private_key)"
    )
    private_key: Optional[str] = Field(
        default=None,
        description="Service account private key, newlines may be escaped"
    )

    @field_validator('private_key')
    @classmethod
    def unescape_private_key(cls, v: Optional[str]) -> Optional[str]:
        """Keys pasted into .env files usually carry literal \\n sequences."""
        if v is None:
            return v
        return v.replace("\\n", "\n")

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the bot."
            )
        return v

    @model_validator(mode='after')
    def require_credentials(self) -> 'GoogleSheetsSettings':
        if not self.credentials_path and not (self.client_email and self.private_key):
            raise ValueError(
                "Set GOOGLE_SHEETS_CREDENTIALS_PATH or both "
                "GOOGLE_SHEETS_CLIENT_EMAIL and GOOGLE_SHEETS_PRIVATE_KEY"
            )
        return self

    @property
    def service_account_info(self) -> dict:
        """Inline credentials in the shape google-auth expects."""
        return {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        }


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (categorization and query interpretation)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=256,
        ge=16,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class TelegramSettings(BaseSettings):
    """Telegram channel configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    bot_token: str = Field(
        ...,
        description="Bot token issued by @BotFather"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    timezone: str = Field(
        default="Asia/Jakarta",
        description="Timezone used to stamp new transactions"
    )
    source_tag: str = Field(
        default="Telegram Bot",
        description="Provenance tag written to the source column"
    )
    default_category: str = Field(
        default="Lainnya",
        description="Category used when the oracle cannot decide"
    )

    # Ledger reads
    max_ledger_rows: int = Field(
        default=1000,
        ge=1,
        le=100000,
        description="Row-count ceiling for a full ledger read"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions a pocket balance reply lists"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def telegram(self) -> TelegramSettings:
        return TelegramSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing what is missing. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "gemini", "telegram", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
