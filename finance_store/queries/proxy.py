"""
Query Proxy

DESIGN DECISION: The proxy is a pass-through.
The ORM layer compiles statements to SQL + positional params.
This proxy sends them to the driver and reshapes what comes back.
It never rewrites SQL, never retries and never translates errors.

Routing:
- Read  (SELECT ...) -> driver.select, rows flattened to value arrays
- Write (anything else) -> driver.execute, no rows returned

The driver handle is loaded at most once per proxy and owned by it.
"""

import asyncio
import re
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from finance_store.audit import AuditLogger
from finance_store.models.query import ProxyResult, ResultMethod, StatementKind
from finance_store.services.storage import ConnectionClosedError, SQLDriverInterface


DriverLoader = Callable[[str], Awaitable[SQLDriverInterface]]

_SELECT_RE = re.compile(r"^\s*SELECT\b", re.IGNORECASE)


def is_select_query(sql: str) -> bool:
    """
    True if the statement starts with the SELECT keyword.

    Leading whitespace is allowed and case is ignored; "selection_table"
    does not match because SELECT must end at a word boundary.
    """
    return _SELECT_RE.match(sql) is not None


def classify_statement(sql: str) -> StatementKind:
    return StatementKind.READ if is_select_query(sql) else StatementKind.WRITE


class HandleState(str, Enum):
    """Lifecycle of the driver handle owned by a proxy."""
    UNOPENED = "unopened"
    OPENED = "opened"
    CLOSED = "closed"


class QueryProxy:
    """
    Routes compiled SQL to a driver exposing select/execute primitives.

    GUARANTEES:
    - The loader is awaited at most once, even with concurrent first callers
    - Write statements never report rows back
    - Driver errors are logged, then re-raised as the same object
    """

    def __init__(
        self,
        loader: DriverLoader,
        connection_identifier: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._loader = loader
        self._identifier = connection_identifier
        self._audit_logger = audit_logger or AuditLogger()
        self._driver: Optional[SQLDriverInterface] = None
        self._load_lock = asyncio.Lock()
        self._state = HandleState.UNOPENED

    @property
    def connection_identifier(self) -> str:
        return self._identifier

    @property
    def state(self) -> HandleState:
        return self._state

    async def open(self) -> SQLDriverInterface:
        """
        Load the driver handle if it has not been loaded yet.

        Call this at startup to make initialization explicit; otherwise
        the first statement does it. Returns the cached handle.
        """
        if self._state == HandleState.CLOSED:
            raise ConnectionClosedError(f"{self._identifier} is closed")
        if self._driver is not None:
            return self._driver

        async with self._load_lock:
            # Another caller may have finished loading while we waited
            if self._driver is None:
                if self._state == HandleState.CLOSED:
                    raise ConnectionClosedError(f"{self._identifier} is closed")
                self._driver = await self._loader(self._identifier)
                self._state = HandleState.OPENED
        return self._driver

    async def close(self) -> None:
        """
        Release the handle. Only the owner of the proxy should call this.

        A closed proxy refuses further statements; it is never reopened.
        """
        async with self._load_lock:
            driver, self._driver = self._driver, None
            self._state = HandleState.CLOSED
        if driver is not None:
            await driver.close()

    async def __call__(
        self,
        sql: str,
        params: Sequence[Any],
        method: Union[ResultMethod, str],
        kind: Optional[StatementKind] = None,
    ) -> ProxyResult:
        """
        Run one statement and shape the result.

        Args:
            sql: Complete SQL text
            params: Positional bind parameters
            method: "all" for every row, "first" for the first row or None
            kind: Statement kind from the compiler; inferred from sql if None

        Raises:
            ValueError: If method is not "all" or "first"
            Whatever the driver raised, unchanged
        """
        method = ResultMethod(method)
        if kind is None:
            kind = classify_statement(sql)

        driver = await self.open()
        params = list(params)

        try:
            if kind == StatementKind.READ:
                records = await driver.select(sql, params)
                rows = [list(record.values()) for record in records]
            else:
                await driver.execute(sql, params)
                rows = []
        except Exception as e:
            self._audit_logger.log_sql_error(
                sql=sql,
                param_count=len(params),
                error=e,
                connection=self._identifier,
            )
            raise

        self._audit_logger.log_statement(
            sql=sql,
            param_count=len(params),
            kind=kind.value,
            row_count=len(rows),
            connection=self._identifier,
        )

        if method == ResultMethod.ALL:
            return ProxyResult(rows=rows)
        return ProxyResult(rows=rows[0] if rows else None)
