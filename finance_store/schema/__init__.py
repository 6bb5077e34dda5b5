"""
Schema Package

Declarative table definitions, named relations and the migrations
rendered from them.
"""

from finance_store.schema.tables import (
    account_table,
    budget_table,
    category_table,
    goal_table,
    metadata,
    transaction_table,
)
from finance_store.schema.relations import (
    RELATIONS,
    Relation,
    RelationKind,
    get_relation,
    relation_join,
)
from finance_store.schema.migrations import (
    MIGRATIONS,
    MIGRATIONS_TABLE,
    Migration,
    MigrationKind,
    create_schema_sql,
    pending_migrations,
)

__all__ = [
    # Tables
    "account_table",
    "budget_table",
    "category_table",
    "goal_table",
    "metadata",
    "transaction_table",
    # Relations
    "RELATIONS",
    "Relation",
    "RelationKind",
    "get_relation",
    "relation_join",
    # Migrations
    "MIGRATIONS",
    "MIGRATIONS_TABLE",
    "Migration",
    "MigrationKind",
    "create_schema_sql",
    "pending_migrations",
]
