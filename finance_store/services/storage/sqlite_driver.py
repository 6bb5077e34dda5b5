"""
SQLite Driver Implementation

DESIGN DECISION: The embedded database is reached through the standard
library sqlite3 module, run on one worker thread owned by the driver.
That worker is the only serialization there is:
- No transactions are opened implicitly (autocommit)
- No locking beyond sqlite3's own
- Overlapping callers simply queue on the worker

Loading a database also prepares it: foreign keys are switched on
and pending schema migrations are applied.
"""

import asyncio
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar

from finance_store.audit import AuditLogger
from finance_store.config import DatabaseSettings, get_settings
from finance_store.config.settings import SQLITE_SCHEME
from finance_store.schema.migrations import (
    MIGRATIONS,
    MIGRATIONS_TABLE,
    Migration,
    bookkeeping_sql,
    pending_migrations,
)
from finance_store.services.storage.interface import (
    ConnectionClosedError,
    DriverError,
    ExecuteResult,
    SQLDriverInterface,
)


T = TypeVar("T")

MEMORY_PATH = ":memory:"


def resolve_database_path(connection_identifier: str, data_dir: Path) -> str:
    """
    Turn a connection identifier into something sqlite3.connect accepts.

    "sqlite:main.db"      -> <data_dir>/main.db
    "sqlite:/abs/x.db"    -> /abs/x.db
    "sqlite::memory:"     -> :memory:
    """
    if not connection_identifier.startswith(SQLITE_SCHEME):
        raise ValueError(
            f"Unsupported connection identifier: {connection_identifier!r}"
        )

    target = connection_identifier[len(SQLITE_SCHEME):]
    if not target:
        raise ValueError("Connection identifier is missing a database path")
    if target == MEMORY_PATH:
        return MEMORY_PATH

    path = Path(target)
    if not path.is_absolute():
        path = Path(data_dir) / path
    return str(path)


def _dict_row(cursor: sqlite3.Cursor, row: tuple) -> dict[str, Any]:
    return {column[0]: value for column, value in zip(cursor.description, row)}


def _escape_literal(value: str) -> str:
    return value.replace("'", "''")


class SQLiteDriver(SQLDriverInterface):
    """
    sqlite3-backed implementation of the driver interface.

    Use SQLiteDriver.load(...) rather than the constructor; loading is
    what opens the file and brings the schema up to date.
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        executor: ThreadPoolExecutor,
        connection_identifier: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._conn: Optional[sqlite3.Connection] = connection
        self._executor = executor
        self._identifier = connection_identifier
        self._audit_logger = audit_logger

    @property
    def connection_identifier(self) -> str:
        return self._identifier

    @property
    def is_closed(self) -> bool:
        return self._conn is None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    async def load(
        cls,
        connection_identifier: str,
        settings: Optional[DatabaseSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        migrations: Optional[list[Migration]] = None,
    ) -> "SQLiteDriver":
        """
        Open the database named by `connection_identifier`.

        Args:
            connection_identifier: e.g. "sqlite:main.db" or "sqlite::memory:"
            settings: Database settings (defaults to the cached app settings)
            audit_logger: Where lifecycle events are logged
            migrations: Migration list to apply (defaults to MIGRATIONS)

        Raises:
            DriverError: If the file cannot be opened or a migration fails
        """
        settings = settings or get_settings().database
        path = resolve_database_path(connection_identifier, settings.data_dir)

        executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="finance-store-sqlite",
        )
        loop = asyncio.get_running_loop()

        def _open() -> sqlite3.Connection:
            if path != MEMORY_PATH:
                Path(path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                path,
                check_same_thread=False,
                isolation_level=None,
            )
            if settings.foreign_keys:
                conn.execute("PRAGMA foreign_keys = ON;")
            conn.row_factory = _dict_row
            return conn

        try:
            conn = await loop.run_in_executor(executor, _open)
        except (sqlite3.Error, OSError) as e:
            executor.shutdown(wait=False)
            raise DriverError(f"Failed to open {connection_identifier}: {e}") from e

        driver = cls(conn, executor, connection_identifier, audit_logger)

        if audit_logger:
            audit_logger.log_database_opened(connection_identifier)

        if settings.apply_migrations:
            try:
                await driver.migrate(MIGRATIONS if migrations is None else migrations)
            except DriverError:
                await driver.close()
                raise

        return driver

    async def migrate(self, migrations: list[Migration]) -> list[int]:
        """
        Apply every migration whose version is not yet recorded.

        Each migration runs in its own transaction together with its
        bookkeeping row. Returns the versions applied by this call.
        """
        def _apply() -> list[int]:
            conn = self._require_connection()
            conn.executescript(bookkeeping_sql())
            applied = {
                row["version"]
                for row in conn.execute(f'SELECT version FROM "{MIGRATIONS_TABLE}"')
            }

            done = []
            for migration in pending_migrations(applied, migrations):
                script = (
                    "BEGIN;\n"
                    f"{migration.sql}\n"
                    f'INSERT INTO "{MIGRATIONS_TABLE}" (version, description) '
                    f"VALUES ({migration.version}, "
                    f"'{_escape_literal(migration.description)}');\n"
                    "COMMIT;"
                )
                try:
                    conn.executescript(script)
                except sqlite3.Error:
                    if conn.in_transaction:
                        conn.rollback()
                    raise
                done.append(migration.version)
            return done

        applied_now = await self._run(_apply)

        if self._audit_logger:
            by_version = {m.version: m for m in migrations}
            for version in applied_now:
                self._audit_logger.log_migration_applied(
                    self._identifier, version, by_version[version].description
                )

        return applied_now

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    async def select(self, sql: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        def _select() -> list[dict[str, Any]]:
            conn = self._require_connection()
            return conn.execute(sql, tuple(params)).fetchall()

        return await self._run(_select)

    async def execute(self, sql: str, params: Sequence[Any]) -> ExecuteResult:
        def _execute() -> ExecuteResult:
            conn = self._require_connection()
            cursor = conn.execute(sql, tuple(params))
            return ExecuteResult(
                rows_affected=max(cursor.rowcount, 0),
                last_insert_id=cursor.lastrowid,
            )

        return await self._run(_execute)

    async def close(self) -> None:
        """Close the connection and stop the worker. Idempotent."""
        if self._conn is None:
            return

        conn, self._conn = self._conn, None
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, conn.close)
        self._executor.shutdown(wait=True)

        if self._audit_logger:
            self._audit_logger.log_database_closed(self._identifier)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ConnectionClosedError(f"{self._identifier} is closed")
        return self._conn

    async def _run(self, fn: Callable[[], T]) -> T:
        """Run `fn` on the worker thread, translating sqlite3 errors."""
        if self._conn is None:
            raise ConnectionClosedError(f"{self._identifier} is closed")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, fn)
        except sqlite3.Error as e:
            raise DriverError(str(e)) from e
