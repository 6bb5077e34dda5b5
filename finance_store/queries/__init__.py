"""Query proxy and statement compilation package."""

from finance_store.queries.proxy import (
    DriverLoader,
    HandleState,
    QueryProxy,
    classify_statement,
    is_select_query,
)
from finance_store.queries.compiler import compile_statement, statement_kind

__all__ = [
    "DriverLoader",
    "HandleState",
    "QueryProxy",
    "classify_statement",
    "compile_statement",
    "is_select_query",
    "statement_kind",
]
