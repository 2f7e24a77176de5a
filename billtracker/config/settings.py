"""
Configuration Management for Bill Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, analytics windows and validation thresholds can all be
changed without touching code, and are validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BILLTRACKER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".billtracker"),
        description="Directory holding the JSON documents"
    )
    bills_key: str = Field(
        default="monthly-bills-app-bills",
        min_length=1,
        description="Key under which bills are stored"
    )
    payments_key: str = Field(
        default="monthly-bills-app-payments",
        min_length=1,
        description="Key under which payment records are stored"
    )
    audit_key: str = Field(
        default="audit-log",
        min_length=1,
        description="Key for the append-only audit log"
    )
    capacity_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Maximum combined size of bills and payments"
    )

    @field_validator("bills_key", "payments_key", "audit_key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v


class AnalyticsSettings(BaseSettings):
    """Windows and limits used by the summary and analytics engine."""

    model_config = SettingsConfigDict(
        env_prefix="BILLTRACKER_ANALYTICS_",
        extra="ignore"
    )

    due_soon_days: int = Field(
        default=7,
        ge=0,
        le=90,
        description="A bill due within this many days counts as upcoming"
    )
    trend_months: int = Field(
        default=6,
        ge=2,
        le=24,
        description="Number of months in the trend series"
    )
    top_categories_limit: int = Field(
        default=5,
        ge=1,
        le=12,
        description="How many categories the top-categories view keeps"
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
    log_level: str = Field(
        default="INFO",
        description="Standard library logging level for structlog output"
    )

    # Import validation thresholds
    max_bill_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable bill amount (for sanity checking)"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a payment date can be"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
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

    # Sub-settings are built lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings()

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


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    '<name>_error' entry for each section that failed.
    Useful for startup checks.
    """
    results: dict[str, object] = {}
    settings = get_settings()

    for name in ("storage", "analytics", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
