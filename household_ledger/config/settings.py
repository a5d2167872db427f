"""
Configuration Management for Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Display conventions (date format, type labels, CSV headers) and the
store retry policy live in one place and are validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Defaults for ledger views."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    default_label: str = Field(
        default="household_ledger",
        min_length=1,
        description="Ledger label used in export filenames"
    )
    trend_window: int = Field(
        default=6,
        ge=1,
        le=120,
        description="Number of months in the trend series"
    )


class ExportSettings(BaseSettings):
    """CSV export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPORT_",
        extra="ignore"
    )

    date_format: str = Field(
        default="%d/%m/%Y",
        description="strftime format for the date column (day/month/year)"
    )
    income_label: str = Field(
        default="Income",
        description="Label written for income entries"
    )
    expense_label: str = Field(
        default="Expense",
        description="Label written for expense entries"
    )
    headers: str = Field(
        default="Date,Type,Category,Amount,Payment Method,Memo,Recorded By",
        description="Comma-separated header row, seven columns"
    )
    recorder_display_length: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Characters of the recorder id kept in the export"
    )
    all_token: str = Field(
        default="all",
        min_length=1,
        description="Filename token used when no month filter is active"
    )
    include_bom: bool = Field(
        default=True,
        description="Prefix the document with a UTF-8 byte-order mark"
    )

    @field_validator('headers')
    @classmethod
    def validate_headers(cls, v: str) -> str:
        """The exporter writes exactly seven columns."""
        if len(v.split(",")) != 7:
            raise ValueError("headers must name exactly 7 comma-separated columns")
        return v

    @property
    def headers_list(self) -> list[str]:
        """Get headers as a list."""
        return [h.strip() for h in self.headers.split(",")]


class StoreSettings(BaseSettings):
    """Retry policy for (re-)subscribing to the entry store."""

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        extra="ignore"
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Subscription attempts before giving up"
    )
    retry_multiplier: float = Field(
        default=1.0,
        ge=0.0,
        description="Exponential backoff multiplier (seconds)"
    )
    retry_min_wait: float = Field(
        default=2.0,
        ge=0.0,
        description="Minimum wait between attempts (seconds)"
    )
    retry_max_wait: float = Field(
        default=10.0,
        ge=0.0,
        description="Maximum wait between attempts (seconds)"
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Validation
    strict_categories: bool = Field(
        default=False,
        description="Reject categories outside the known sets instead of warning"
    )
    future_date_tolerance_days: int = Field(
        default=31,
        ge=0,
        description="How many days in the future an entry date can be"
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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

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

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failure.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "export", "store", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
