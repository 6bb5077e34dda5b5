"""
Shared fixtures.

Async code is driven with a fresh event loop per call through the
`run` fixture; everything a scenario needs should happen inside one
coroutine so handles never cross loops.
"""

import asyncio
from typing import Any, Optional

import pytest

from finance_store.audit import AuditLogger
from finance_store.config import DatabaseSettings
from finance_store.models.audit import AuditEvent
from finance_store.services.storage import ExecuteResult, SQLDriverInterface


def run_async(coro):
    """Run async function in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
        asyncio.set_event_loop(None)


class RecordingAuditLogger(AuditLogger):
    """Keeps every event instead of only writing log lines."""

    def __init__(self):
        super().__init__()
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> None:
        self.events.append(event)
        super().log(event)


class FakeDriver(SQLDriverInterface):
    """In-memory stand-in for a driver: canned rows, recorded calls."""

    def __init__(
        self,
        rows: Optional[list[dict[str, Any]]] = None,
        error: Optional[Exception] = None,
        rows_affected: int = 0,
    ):
        self.rows = rows or []
        self.error = error
        self.rows_affected = rows_affected
        self.selects: list[tuple[str, list]] = []
        self.executes: list[tuple[str, list]] = []
        self.closed = False

    async def select(self, sql, params):
        self.selects.append((sql, list(params)))
        if self.error:
            raise self.error
        return [dict(row) for row in self.rows]

    async def execute(self, sql, params):
        self.executes.append((sql, list(params)))
        if self.error:
            raise self.error
        return ExecuteResult(rows_affected=self.rows_affected, last_insert_id=42)

    async def close(self):
        self.closed = True


class CountingLoader:
    """Driver loader that counts how often it is awaited."""

    def __init__(self, driver: SQLDriverInterface):
        self.driver = driver
        self.calls: list[str] = []

    async def __call__(self, connection_identifier: str) -> SQLDriverInterface:
        self.calls.append(connection_identifier)
        # Yield so concurrent first callers really overlap
        await asyncio.sleep(0)
        return self.driver


@pytest.fixture
def run():
    return run_async


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()


@pytest.fixture
def memory_settings():
    return DatabaseSettings(connection_url="sqlite::memory:")


@pytest.fixture
def file_settings(tmp_path):
    return DatabaseSettings(connection_url="sqlite:finance.db", data_dir=tmp_path)
