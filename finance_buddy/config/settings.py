"""
Configuration Management for Finance Buddy

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger engine itself takes no configuration; only the storage layer,
logging and the frontend read these values.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger snapshot file configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_BUDDY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_file: str = Field(
        default="finance_data.txt",
        description="Path of the flat-file ledger snapshot"
    )
    save_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failing save is tried"
    )
    save_retry_wait_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Pause between save attempts"
    )
    load_on_startup: bool = Field(
        default=True,
        description="Restore the snapshot when the frontend starts"
    )
    save_on_exit: bool = Field(
        default=True,
        description="Write the snapshot when the operator ends the session"
    )

    @field_validator('data_file')
    @classmethod
    def validate_data_file(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("data_file cannot be empty")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_BUDDY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    currency_symbol: str = Field(
        default="",
        max_length=5,
        description="Prefix shown before amounts (display only)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level


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
    entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
