"""
Query Models for Finance Store

The shapes that cross the ORM <-> proxy boundary.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class StatementKind(str, Enum):
    """
    Whether a statement returns rows.

    Set by the compiler when it knows; the proxy falls back to
    inspecting the SQL text otherwise.
    """
    READ = "read"
    WRITE = "write"


class ResultMethod(str, Enum):
    """Result shape requested by the caller."""
    ALL = "all"
    FIRST = "first"


class ResultColumn(BaseModel):
    """A selected column: the table it came from (if any) and its key."""
    table: Optional[str] = None
    key: str


class CompiledStatement(BaseModel):
    """
    A statement ready for the driver.

    params are positional, in the order of the `?` placeholders in sql.
    """
    sql: str
    params: list[Any] = Field(default_factory=list)
    kind: StatementKind
    columns: list[ResultColumn] = Field(default_factory=list)


class ProxyResult(BaseModel):
    """
    What the proxy hands back to the ORM.

    rows is a list of value arrays for method "all", a single value
    array (or None) for method "first".
    """
    rows: Optional[list[Any]] = None
