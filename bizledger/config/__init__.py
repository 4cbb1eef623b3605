"""Configuration package."""

from bizledger.config.settings import (
    AppSettings,
    LedgerDefaults,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LedgerDefaults",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
