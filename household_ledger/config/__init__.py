"""Configuration package."""

from household_ledger.config.settings import (
    AppSettings,
    ExportSettings,
    LedgerSettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ExportSettings",
    "LedgerSettings",
    "Settings",
    "StoreSettings",
    "get_settings",
    "validate_all_settings",
]
