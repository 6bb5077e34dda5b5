"""
Statement Compiler

Turns SQLAlchemy statements into what the proxy expects: SQL text with
`?` placeholders, a flat positional parameter list, a statement kind
and the (table, key) of every selected column.
"""

from enum import Enum
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.base import Executable
from sqlalchemy.sql.compiler import SQLCompiler
from sqlalchemy.sql.elements import BindParameter, TextClause

from finance_store.models.query import CompiledStatement, ResultColumn, StatementKind
from finance_store.queries.proxy import classify_statement


# qmark is the sqlite3 default; spelled out so the placeholders never drift
DIALECT = sqlite.dialect(paramstyle="qmark")


def _find_bind(compiled: SQLCompiler, name: str) -> Optional[BindParameter]:
    """
    Look up the bind parameter behind a positional name.

    Expanded IN-list members are named after their expanding parent
    ("created_at_1" -> "created_at_1_1", "created_at_1_2", ...), so
    numeric suffixes are stripped until the parent is found.
    """
    bind = compiled.binds.get(name)
    if bind is not None:
        return bind

    while "_" in name:
        name, _, suffix = name.rpartition("_")
        if not suffix.isdigit():
            return None
        bind = compiled.binds.get(name)
        if bind is not None:
            return bind if bind.expanding else None
    return None


def _bind_value(compiled: SQLCompiler, name: str, value: Any) -> Any:
    """Apply the column type's bind processor (JSON encoding, datetime text)."""
    if isinstance(value, Enum):
        value = value.value

    bind = _find_bind(compiled, name)
    if bind is None:
        return value

    processor = bind.type.dialect_impl(DIALECT).bind_processor(DIALECT)
    if processor is None:
        return value
    return processor(value)


def _result_columns(statement: Executable) -> list[ResultColumn]:
    selected = getattr(statement, "selected_columns", None)
    if selected is None:
        return []

    columns = []
    for index, column in enumerate(selected):
        table = getattr(column, "table", None)
        key = getattr(column, "key", None) or f"column_{index}"
        columns.append(
            ResultColumn(
                table=table.name if isinstance(table, sa.Table) else None,
                key=key,
            )
        )
    return columns


def statement_kind(statement: Executable, sql: str) -> StatementKind:
    """
    READ for SELECT-like statements, WRITE for everything else.

    Raw text() statements carry no type information, so their SQL is
    inspected instead.
    """
    if isinstance(statement, TextClause):
        return classify_statement(sql)
    if getattr(statement, "is_select", False):
        return StatementKind.READ
    return StatementKind.WRITE


def compile_statement(statement: Executable) -> CompiledStatement:
    """
    Compile a statement for the SQLite proxy.

    IN-lists are expanded at compile time, so the SQL is complete.
    """
    compiled = statement.compile(
        dialect=DIALECT,
        compile_kwargs={"render_postcompile": True},
    )
    sql = str(compiled)

    values = compiled.construct_params(escape_names=False)
    names = compiled.positiontup or []
    params = [_bind_value(compiled, name, values[name]) for name in names]

    return CompiledStatement(
        sql=sql,
        params=params,
        kind=statement_kind(statement, sql),
        columns=_result_columns(statement),
    )
