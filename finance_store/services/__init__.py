"""Services package."""

from finance_store.services.storage import (
    ConnectionClosedError,
    DriverError,
    ExecuteResult,
    SQLDriverInterface,
    SQLiteDriver,
    StorageError,
)

__all__ = [
    # Storage services
    "ConnectionClosedError",
    "DriverError",
    "ExecuteResult",
    "SQLDriverInterface",
    "SQLiteDriver",
    "StorageError",
]
