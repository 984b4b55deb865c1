"""
Configuration Management for Carpool Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only thing that really varies between installs is where the ledger
document lives; the display thresholds are exposed so the UI can be tuned
without touching the engine.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistence gateway configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CARPOOL_STORAGE_",
        extra="ignore"
    )

    data_path: str = Field(
        default="data.json",
        description="Path of the JSON document holding cars, people, trips and adjustments"
    )

    @field_validator('data_path')
    @classmethod
    def validate_data_path(cls, v: str) -> str:
        """Reject an empty path; everything else is resolved lazily."""
        if not v.strip():
            raise ValueError("data_path must not be empty")
        return v.strip()


class LedgerSettings(BaseSettings):
    """Balance and listing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CARPOOL_LEDGER_",
        extra="ignore"
    )

    # Balances smaller than this (in absolute value) are hidden from listings
    balance_threshold: float = Field(
        default=0.5,
        ge=0.0,
        description="Smallest absolute balance shown in balance listings"
    )
    recent_adjustments_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="How many recent manual adjustments to list"
    )
    currency: str = Field(
        default="INR",
        min_length=3,
        max_length=3,
        description="ISO currency code used when formatting amounts"
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
        description="Enable debug mode"
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

    # Sub-settings are loaded lazily so a bad value only breaks its own section

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

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
    "<name>_error" entry for every section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
