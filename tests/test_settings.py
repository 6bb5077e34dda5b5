"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from finance_store.config import (
    AppSettings,
    DatabaseSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDatabaseSettings:
    """Tests for database configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FINANCE_DB_CONNECTION_URL", raising=False)
        settings = DatabaseSettings()
        assert settings.connection_url == "sqlite:main.db"
        assert settings.data_dir == Path(".")
        assert settings.foreign_keys is True
        assert settings.apply_migrations is True

    def test_environment_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FINANCE_DB_CONNECTION_URL", "sqlite:other.db")
        monkeypatch.setenv("FINANCE_DB_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("FINANCE_DB_FOREIGN_KEYS", "false")

        settings = DatabaseSettings()

        assert settings.connection_url == "sqlite:other.db"
        assert settings.data_dir == tmp_path
        assert settings.foreign_keys is False

    def test_rejects_non_sqlite_identifier(self):
        with pytest.raises(ValueError, match="Unsupported connection identifier"):
            DatabaseSettings(connection_url="postgresql://localhost/finance")

    def test_rejects_missing_path(self):
        with pytest.raises(ValueError, match="missing a database path"):
            DatabaseSettings(connection_url="sqlite:")

    def test_memory_identifier_allowed(self):
        assert DatabaseSettings(connection_url="sqlite::memory:").connection_url == "sqlite::memory:"


class TestAppSettings:
    """Tests for application-level settings."""

    def test_log_level_normalized(self):
        assert AppSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")

    def test_debug_mode_forces_debug_level(self):
        settings = AppSettings(log_level="WARNING", debug_mode=True)
        assert settings.effective_log_level == "DEBUG"

    def test_effective_level_defaults_to_log_level(self):
        assert AppSettings(log_level="error", debug_mode=False).effective_log_level == "ERROR"


class TestSettingsContainer:
    """Tests for the cached root settings."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings_ok(self, monkeypatch):
        monkeypatch.delenv("FINANCE_DB_CONNECTION_URL", raising=False)
        results = validate_all_settings()
        assert results["database"] is True
        assert results["app"] is True

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("FINANCE_DB_CONNECTION_URL", "mysql://nope")
        results = validate_all_settings()
        assert results["database"] is False
        assert "Unsupported connection identifier" in results["database_error"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
