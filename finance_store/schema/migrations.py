"""
Schema Migrations

An ordered list of DDL scripts that the driver applies when a database
is loaded. Applied versions are recorded in a bookkeeping table so each
version runs at most once per database file.
"""

from enum import Enum

from pydantic import BaseModel, Field
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable

from finance_store.schema.tables import metadata


MIGRATIONS_TABLE = "_migrations"


class MigrationKind(str, Enum):
    UP = "up"


class Migration(BaseModel):
    """A single versioned DDL script."""
    version: int = Field(..., ge=1)
    description: str
    sql: str
    kind: MigrationKind = MigrationKind.UP


def create_schema_sql() -> str:
    """
    Render CREATE TABLE statements for every table, parents first.

    Each statement ends with `;` so the result runs as one script.
    """
    dialect = sqlite.dialect()
    statements = [
        str(CreateTable(table).compile(dialect=dialect)).strip() + ";"
        for table in metadata.sorted_tables
    ]
    return "\n\n".join(statements) + "\n"


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="initial_schema",
        sql=create_schema_sql(),
    ),
]


def bookkeeping_sql() -> str:
    return (
        f'CREATE TABLE IF NOT EXISTS "{MIGRATIONS_TABLE}" ('
        "version INTEGER PRIMARY KEY, "
        "description TEXT NOT NULL, "
        "applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP"
        ");"
    )


def pending_migrations(
    applied_versions: set[int],
    migrations: list[Migration] = MIGRATIONS,
) -> list[Migration]:
    """Migrations not yet applied, in version order."""
    return sorted(
        (m for m in migrations if m.version not in applied_versions),
        key=lambda m: m.version,
    )
