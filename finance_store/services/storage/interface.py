"""
Abstract Driver Interface

DESIGN DECISION: The proxy only knows three operations - load, select
and execute. This allows us to:
1. Swap the embedded SQLite driver for a host-provided bridge
2. Use fake drivers for testing
3. Keep the proxy independent of any concrete database client

The interface is intentionally small - we're not building a database
client. Just the primitives a SQL proxy needs.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from pydantic import BaseModel


class ExecuteResult(BaseModel):
    """What a write statement reports back from the driver."""
    rows_affected: int = 0
    last_insert_id: Optional[int] = None


class SQLDriverInterface(ABC):
    """
    Abstract interface for SQL drivers.

    Implementations are created through an async `load` classmethod
    taking a connection identifier, e.g. ``await SQLiteDriver.load("sqlite:main.db")``.
    """

    @abstractmethod
    async def select(self, sql: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        """
        Run a row-returning statement.

        Args:
            sql: Complete SQL text with `?` placeholders
            params: Positional bind parameters

        Returns:
            One mapping per row, column name to value, in select order

        Raises:
            DriverError: If the database rejects the statement
        """
        pass

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any]) -> ExecuteResult:
        """
        Run a side-effecting statement.

        Args:
            sql: Complete SQL text with `?` placeholders
            params: Positional bind parameters

        Returns:
            Affected row count and last inserted rowid

        Raises:
            DriverError: If the database rejects the statement
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DriverError(StorageError):
    """
    The driver could not run a statement.

    Constraint violations, syntax errors and missing tables all land
    here; the original driver exception is chained as __cause__.
    """
    pass


class ConnectionClosedError(StorageError):
    """The connection handle was released by its owner."""
    pass
