"""
Storage Services Package

Provides the abstract driver interface and the embedded SQLite driver.
"""

from finance_store.services.storage.interface import (
    ConnectionClosedError,
    DriverError,
    ExecuteResult,
    SQLDriverInterface,
    StorageError,
)
from finance_store.services.storage.sqlite_driver import (
    SQLiteDriver,
    resolve_database_path,
)

__all__ = [
    # Interfaces
    "ExecuteResult",
    "SQLDriverInterface",
    # Exceptions
    "ConnectionClosedError",
    "DriverError",
    "StorageError",
    # SQLite implementation
    "SQLiteDriver",
    "resolve_database_path",
]
