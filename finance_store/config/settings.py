"""
Configuration Management for Finance Store

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The database location and logging behaviour are the only knobs;
everything else is declared by the schema.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SQLITE_SCHEME = "sqlite:"


class DatabaseSettings(BaseSettings):
    """Embedded SQLite database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    connection_url: str = Field(
        default="sqlite:main.db",
        description="Connection identifier passed to the driver loader"
    )
    data_dir: Path = Field(
        default=Path("."),
        description="Directory that relative database paths resolve against"
    )
    foreign_keys: bool = Field(
        default=True,
        description="Enable SQLite foreign-key enforcement on load"
    )
    apply_migrations: bool = Field(
        default=True,
        description="Apply pending schema migrations when the database is loaded"
    )

    @field_validator('connection_url')
    @classmethod
    def validate_connection_url(cls, v: str) -> str:
        """Only sqlite: identifiers are understood by the driver."""
        if not v.startswith(SQLITE_SCHEME):
            raise ValueError(
                f"Unsupported connection identifier {v!r}; "
                f"expected '{SQLITE_SCHEME}<path>'"
            )
        if not v[len(SQLITE_SCHEME):]:
            raise ValueError("Connection identifier is missing a database path")
        return v


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

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Force DEBUG logging regardless of log_level"
    )

    log_level: str = Field(
        default="INFO",
        description="Package log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        """log_level, or DEBUG when debug_mode is on."""
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.database
        results["database"] = True
    except Exception as e:
        results["database"] = False
        results["database_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
