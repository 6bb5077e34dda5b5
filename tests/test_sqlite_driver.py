"""
Tests for the SQLite driver against real database files.
"""

import sqlite3
from pathlib import Path

import pytest

from finance_store.models.audit import AuditEventType
from finance_store.schema import MIGRATIONS, Migration
from finance_store.services.storage import (
    ConnectionClosedError,
    DriverError,
    SQLiteDriver,
    resolve_database_path,
)


class TestResolvePath:
    """Tests for connection identifier parsing."""

    def test_relative_path_uses_data_dir(self, tmp_path):
        assert resolve_database_path("sqlite:main.db", tmp_path) == str(tmp_path / "main.db")

    def test_absolute_path_kept(self, tmp_path):
        target = tmp_path / "abs.db"
        assert resolve_database_path(f"sqlite:{target}", Path("/elsewhere")) == str(target)

    def test_memory(self):
        assert resolve_database_path("sqlite::memory:", Path(".")) == ":memory:"

    def test_other_schemes_rejected(self):
        with pytest.raises(ValueError):
            resolve_database_path("postgres://localhost/db", Path("."))

    def test_missing_path_rejected(self):
        with pytest.raises(ValueError):
            resolve_database_path("sqlite:", Path("."))


class TestLoad:
    """Tests for opening and migrating."""

    def test_load_creates_file_and_schema(self, run, file_settings, tmp_path):
        async def scenario():
            driver = await SQLiteDriver.load("sqlite:finance.db", settings=file_settings)
            try:
                return await driver.select(
                    "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name", []
                )
            finally:
                await driver.close()

        rows = run(scenario())

        assert (tmp_path / "finance.db").exists()
        names = {row["name"] for row in rows}
        assert {"account", "category", "transaction", "budget", "goal", "_migrations"} <= names

    def test_nested_data_dir_created(self, run, tmp_path):
        from finance_store.config import DatabaseSettings

        settings = DatabaseSettings(connection_url="sqlite:data/app.db", data_dir=tmp_path / "nested")

        async def scenario():
            driver = await SQLiteDriver.load(settings.connection_url, settings=settings)
            await driver.close()

        run(scenario())
        assert (tmp_path / "nested" / "data" / "app.db").exists()

    def test_migrations_applied_once(self, run, file_settings):
        """Test that reloading the same file does not re-run migrations."""
        async def scenario():
            first = await SQLiteDriver.load("sqlite:finance.db", settings=file_settings)
            await first.close()

            second = await SQLiteDriver.load("sqlite:finance.db", settings=file_settings)
            try:
                applied_again = await second.migrate(MIGRATIONS)
                rows = await second.select('SELECT version, description FROM "_migrations"', [])
                return applied_again, rows
            finally:
                await second.close()

        applied_again, rows = run(scenario())

        assert applied_again == []
        assert rows == [{"version": 1, "description": "initial_schema"}]

    def test_failed_migration_rolls_back(self, run, file_settings):
        broken = MIGRATIONS + [
            Migration(version=2, description="broken", sql="CREATE TABLE half (id INTEGER);\nCREATE TABLE ("),
        ]

        async def scenario():
            with pytest.raises(DriverError):
                await SQLiteDriver.load("sqlite:finance.db", settings=file_settings, migrations=broken)

            driver = await SQLiteDriver.load("sqlite:finance.db", settings=file_settings)
            try:
                versions = await driver.select('SELECT version FROM "_migrations"', [])
                half = await driver.select(
                    "SELECT name FROM sqlite_master WHERE name = 'half'", []
                )
                return versions, half
            finally:
                await driver.close()

        versions, half = run(scenario())

        assert versions == [{"version": 1}]
        assert half == []

    def test_migrations_can_be_skipped(self, run, tmp_path):
        from finance_store.config import DatabaseSettings

        settings = DatabaseSettings(
            connection_url="sqlite:bare.db", data_dir=tmp_path, apply_migrations=False,
        )

        async def scenario():
            driver = await SQLiteDriver.load(settings.connection_url, settings=settings)
            try:
                return await driver.select("SELECT name FROM sqlite_master", [])
            finally:
                await driver.close()

        assert run(scenario()) == []

    def test_lifecycle_events_logged(self, run, memory_settings, audit_logger):
        async def scenario():
            driver = await SQLiteDriver.load(
                "sqlite::memory:", settings=memory_settings, audit_logger=audit_logger,
            )
            await driver.close()

        run(scenario())

        types = [e.event_type for e in audit_logger.events]
        assert types == [
            AuditEventType.DATABASE_OPENED,
            AuditEventType.MIGRATION_APPLIED,
            AuditEventType.DATABASE_CLOSED,
        ]


class TestPrimitives:
    """Tests for select and execute."""

    def test_select_returns_column_keyed_rows(self, run, memory_settings):
        async def scenario():
            driver = await SQLiteDriver.load("sqlite::memory:", settings=memory_settings)
            try:
                await driver.execute(
                    "INSERT INTO category (name, type) VALUES (?, ?)", ["Salary", "Income"]
                )
                return await driver.select("SELECT id, name, type FROM category", [])
            finally:
                await driver.close()

        rows = run(scenario())

        assert rows == [{"id": 1, "name": "Salary", "type": "Income"}]
        assert list(rows[0].keys()) == ["id", "name", "type"]

    def test_execute_reports_rowcount_and_rowid(self, run, memory_settings):
        async def scenario():
            driver = await SQLiteDriver.load("sqlite::memory:", settings=memory_settings)
            try:
                first = await driver.execute(
                    "INSERT INTO goal (name, target_amount, target_date) VALUES (?, ?, ?)",
                    ["House", 50000.0, "2030-01-01"],
                )
                second = await driver.execute(
                    "INSERT INTO goal (name, target_amount, target_date) VALUES (?, ?, ?)",
                    ["Car", 15000.0, "2027-01-01"],
                )
                update = await driver.execute("UPDATE goal SET current_amount = ?", [100.0])
                return first, second, update
            finally:
                await driver.close()

        first, second, update = run(scenario())

        assert first.last_insert_id == 1
        assert second.last_insert_id == 2
        assert update.rows_affected == 2

    def test_foreign_key_violation(self, run, memory_settings):
        """Test that a transaction for a missing account is rejected."""
        async def scenario():
            driver = await SQLiteDriver.load("sqlite::memory:", settings=memory_settings)
            try:
                await driver.execute(
                    "INSERT INTO category (name, type) VALUES (?, ?)", ["Food", "Expense"]
                )
                await driver.execute(
                    'INSERT INTO "transaction" (amount, account_id, category_id) VALUES (?, ?, ?)',
                    [-12.0, 999, 1],
                )
            finally:
                await driver.close()

        with pytest.raises(DriverError) as excinfo:
            run(scenario())

        assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)
        assert "FOREIGN KEY" in str(excinfo.value)

    def test_syntax_error_is_driver_error(self, run, memory_settings):
        async def scenario():
            driver = await SQLiteDriver.load("sqlite::memory:", settings=memory_settings)
            try:
                await driver.select("SELEC nonsense", [])
            finally:
                await driver.close()

        with pytest.raises(DriverError):
            run(scenario())

    def test_closed_driver_refuses_work(self, run, memory_settings):
        async def scenario():
            driver = await SQLiteDriver.load("sqlite::memory:", settings=memory_settings)
            await driver.close()
            await driver.close()  # idempotent
            assert driver.is_closed
            await driver.select("SELECT 1", [])

        with pytest.raises(ConnectionClosedError):
            run(scenario())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
