"""
Configuration Management for bizledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which knobs exist and ensures the whole
configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Snapshot and audit-log file storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the snapshot and audit files"
    )
    snapshot_filename: str = Field(
        default="ledger.json",
        description="Name of the JSON snapshot file inside data_dir"
    )
    audit_filename: str = Field(
        default="audit.jsonl",
        description="Name of the JSON-lines audit file inside data_dir"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a snapshot write is attempted"
    )

    @field_validator('snapshot_filename', 'audit_filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Filenames must not escape data_dir."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a bare filename, got {v!r}")
        return v

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / self.snapshot_filename

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_filename


class LedgerDefaults(BaseSettings):
    """Values used to seed a ledger when no snapshot exists."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_DEFAULTS_",
        extra="ignore"
    )

    emergency_fund_percentage: float = Field(
        default=15.0,
        ge=0.0,
        le=100.0,
        description="Share of a positive operating result set aside"
    )
    reinvestment_percentage: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Share of a positive operating result reinvested"
    )
    partner_names: str = Field(
        default="Partner 1,Partner 2",
        description="Comma-separated names of the seed partners"
    )

    @property
    def partner_names_list(self) -> list[str]:
        """Get seed partner names as a list."""
        return [name.strip() for name in self.partner_names.split(",") if name.strip()]


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Integrity
    verify_invariants: bool = Field(
        default=False,
        description="Replay the transaction log after every mutation"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Sub-settings are loaded lazily so a bad value only fails where used

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def defaults(self) -> LedgerDefaults:
        return LedgerDefaults()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<setting_name>_error` entry for each failure.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "defaults", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
