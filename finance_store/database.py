"""
Finance Database

This module ties the schema, the statement compiler and the query proxy
together into the object application code talks to.

Flow:
1. Caller builds a SQLAlchemy statement against finance_store.schema
2. compile_statement -> SQL + positional params + kind + column keys
3. QueryProxy routes it to the driver
4. Rows come back as value arrays and are decoded BY COLUMN NAME into
   typed records, using the column keys from step 2

DESIGN DECISION: The connection is owned by a FinanceDatabase instance
and handed to nothing else. Opening it is an explicit startup step
(`await db.open()` or `async with`), though the first statement will
open it too.
"""

from functools import partial
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.sql.base import Executable

from finance_store.audit import AuditLogger, configure_logging
from finance_store.config import Settings, get_settings
from finance_store.models.query import (
    CompiledStatement,
    ResultColumn,
    ResultMethod,
)
from finance_store.queries import QueryProxy, compile_statement
from finance_store.services.storage import SQLiteDriver


R = TypeVar("R", bound=BaseModel)


def decode_row(
    row: list[Any],
    columns: list[ResultColumn],
    record: Optional[type[R]] = None,
    table: Optional[str] = None,
) -> Any:
    """
    Map one value array back to names.

    Args:
        row: Values in select order
        columns: Column keys from compilation, same order
        record: Model to validate into; a plain dict is returned if None
        table: Only use columns belonging to this table
    """
    if not columns:
        return list(row)

    if len(row) != len(columns):
        raise ValueError(
            f"Row has {len(row)} values but the statement selected {len(columns)} columns"
        )

    data = {
        column.key: value
        for column, value in zip(columns, row)
        if table is None or column.table == table
    }
    if record is None:
        return data
    return record.model_validate(data)


class FinanceDatabase:
    """
    Runs SQLAlchemy statements against the finance database.

    Reads come back as typed records (or dicts); writes return nothing.
    """

    def __init__(self, proxy: QueryProxy):
        self._proxy = proxy

    @property
    def proxy(self) -> QueryProxy:
        return self._proxy

    async def open(self) -> None:
        """Load the database handle now instead of on first use."""
        await self._proxy.open()

    async def close(self) -> None:
        await self._proxy.close()

    async def __aenter__(self) -> "FinanceDatabase":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def compile(self, statement: Executable) -> CompiledStatement:
        return compile_statement(statement)

    async def _run(self, compiled: CompiledStatement, method: ResultMethod) -> Any:
        result = await self._proxy(
            compiled.sql,
            compiled.params,
            method,
            kind=compiled.kind,
        )
        return result.rows

    async def fetch_all(
        self,
        statement: Executable,
        record: Optional[type[R]] = None,
    ) -> list[Any]:
        """Every row of a read statement, decoded."""
        compiled = self.compile(statement)
        rows = await self._run(compiled, ResultMethod.ALL)
        return [decode_row(row, compiled.columns, record) for row in rows]

    async def fetch_first(
        self,
        statement: Executable,
        record: Optional[type[R]] = None,
    ) -> Optional[Any]:
        """The first row of a read statement, decoded, or None."""
        compiled = self.compile(statement)
        row = await self._run(compiled, ResultMethod.FIRST)
        if row is None:
            return None
        return decode_row(row, compiled.columns, record)

    async def fetch_joined(
        self,
        statement: Executable,
        records: Mapping[str, type[BaseModel]],
    ) -> list[dict[str, Optional[BaseModel]]]:
        """
        Decode joined rows into one record per table.

        `records` maps table name to model, e.g.
        {"transaction": TransactionRecord, "account": AccountRecord}.
        A table whose columns are all NULL (the missing side of an
        outer join) decodes to None.
        """
        compiled = self.compile(statement)
        rows = await self._run(compiled, ResultMethod.ALL)

        decoded = []
        for row in rows:
            item = {}
            for table, record in records.items():
                data = decode_row(row, compiled.columns, table=table)
                if not data or all(value is None for value in data.values()):
                    item[table] = None
                else:
                    item[table] = record.model_validate(data)
            decoded.append(item)
        return decoded

    async def execute(self, statement: Executable) -> None:
        """Run a write statement. Nothing is reported back."""
        compiled = self.compile(statement)
        await self._run(compiled, ResultMethod.ALL)


def create_database(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> FinanceDatabase:
    """
    Factory function to wire a FinanceDatabase from settings.

    Nothing is opened here; call `await db.open()` at startup.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    db_settings = settings.database

    configure_logging(app_settings.effective_log_level, app_settings.log_json)
    audit_logger = audit_logger or AuditLogger()

    loader = partial(
        SQLiteDriver.load,
        settings=db_settings,
        audit_logger=audit_logger,
    )
    proxy = QueryProxy(
        loader=loader,
        connection_identifier=db_settings.connection_url,
        audit_logger=audit_logger,
    )
    return FinanceDatabase(proxy)
