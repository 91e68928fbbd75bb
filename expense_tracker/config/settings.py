"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every value has a default, so the tool runs with no environment at all;
environment variables and a local .env file only override.
"""

import codecs
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Backing file configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_file: Path = Field(
        default=Path("expenses.csv"),
        description="Path of the flat file holding all expenses"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the backing file"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed save is attempted before reporting"
    )
    save_retry_wait_seconds: float = Field(
        default=0.1,
        ge=0.0,
        le=5.0,
        description="Pause between save attempts"
    )

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Only accept codec names Python knows."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {v}")
        return v


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="WARNING",
        description="Minimum level written to the log"
    )
    renderer: Literal["json", "console"] = Field(
        default="json",
        description="Output format of log lines"
    )
    file: Optional[Path] = Field(
        default=None,
        description="Log file path; stderr when unset"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return v.upper()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown in front of amounts (display only)"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be"
    )
    max_expense_amount: float = Field(
        default=100000.0,
        gt=0,
        description="Amount above which an entry is flagged for confirmation"
    )

    recent_activity_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="How many audit events the recent activity view keeps"
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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

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

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
