"""
Configuration Management for the Life Planner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Stores never read the environment themselves; they receive plain values
from whoever builds them (see lifeplanner.orchestrator).
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LIFEPLANNER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".lifeplanner"),
        description="Directory holding one JSON file per storage key"
    )
    key_prefix: str = Field(
        default="pln",
        min_length=1,
        description="Namespace prepended to every storage key"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is attempted"
    )
    audit_max_events: int = Field(
        default=500,
        ge=1,
        description="Newest audit events kept in the persisted audit log"
    )

    @field_validator('key_prefix')
    @classmethod
    def validate_key_prefix(cls, v: str) -> str:
        """Keys become file names, so keep the prefix path-safe."""
        if any(sep in v for sep in ("/", "\\", "..")):
            raise ValueError(f"Storage key prefix must not contain path separators: {v}")
        return v

    def key_for(self, domain: str) -> str:
        """Storage key of one domain store, e.g. 'pln-finance-storage'."""
        return f"{self.key_prefix}-{domain}-storage"

    @property
    def audit_key(self) -> str:
        return f"{self.key_prefix}-audit-log"


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
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Domain policies
    learning_session_progress_increment: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Percentage points added to a resource per finished session"
    )
    upcoming_bills_window_days: int = Field(
        default=30,
        ge=0,
        description="Default look-ahead for upcoming bills"
    )
    enforce_references: bool = Field(
        default=False,
        description="Reject tasks/sessions that point at missing goals/resources"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failing ones.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
