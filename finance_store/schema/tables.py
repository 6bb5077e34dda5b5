"""
Table Definitions

The five finance tables, declared with SQLAlchemy Core.

DESIGN DECISION: These declarations are the single source of truth for
the physical layout. Migrations are rendered from them and the query
layer builds statements against them. There is no behaviour here:
enumerated values and foreign keys become CHECK and REFERENCES clauses
that the database enforces.
"""

from enum import Enum

import sqlalchemy as sa

from finance_store.models.records import (
    AccountStatus,
    AccountType,
    BudgetPeriod,
    CategoryType,
)


metadata = sa.MetaData()


def _one_of(table: str, column: str, choices: type[Enum]) -> sa.CheckConstraint:
    """CHECK constraint limiting a text column to an enum's values."""
    values = ", ".join(f"'{member.value}'" for member in choices)
    return sa.CheckConstraint(
        f"{column} IN ({values})",
        name=f"ck_{table}_{column}",
    )


def _timestamp(name: str) -> sa.Column:
    # Defaults to insertion time; nothing refreshes updated_at on UPDATE.
    return sa.Column(
        name,
        sa.DateTime,
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


# Checking, savings, credit cards, cash, mortgages.
account_table = sa.Table(
    "account",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("type", sa.Text, nullable=False),
    sa.Column("color", sa.Text),  # e.g. "#FF0000"
    sa.Column("currency", sa.Text),  # e.g. "USD"
    sa.Column("icon", sa.Text),
    sa.Column("description", sa.Text),
    sa.Column("initial_balance", sa.Float, nullable=False, server_default=sa.text("0.0")),
    sa.Column("current_balance", sa.Float, nullable=False, server_default=sa.text("0.0")),
    sa.Column(
        "status",
        sa.Text,
        nullable=False,
        server_default=AccountStatus.ACTIVE.value,
    ),
    _timestamp("created_at"),
    _timestamp("updated_at"),
    _one_of("account", "type", AccountType),
    _one_of("account", "status", AccountStatus),
    sqlite_autoincrement=True,
)

category_table = sa.Table(
    "category",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("type", sa.Text, nullable=False),
    _one_of("category", "type", CategoryType),
    sqlite_autoincrement=True,
)

transaction_table = sa.Table(
    "transaction",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("amount", sa.Float, nullable=False),
    # ISO 8601 text
    sa.Column(
        "date",
        sa.Text,
        nullable=False,
        server_default=sa.text("(datetime('now','localtime'))"),
    ),
    sa.Column("description", sa.Text),
    sa.Column("payee", sa.Text),
    sa.Column("account_id", sa.Integer, sa.ForeignKey("account.id"), nullable=False),
    sa.Column("category_id", sa.Integer, sa.ForeignKey("category.id"), nullable=False),
    sa.Column("transaction_type", sa.Text),  # upcoming, subscription, repetitive
    sa.Column("notes", sa.Text),
    sa.Column("attachments", sa.JSON(none_as_null=True)),
    sqlite_autoincrement=True,
)

budget_table = sa.Table(
    "budget",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("amount", sa.Float, nullable=False),
    sa.Column("period_type", sa.Text, nullable=False),
    sa.Column("start_date", sa.Text, nullable=False),
    sa.Column("end_date", sa.Text),
    # NULL means the budget covers overall spending
    sa.Column("category_id", sa.Integer, sa.ForeignKey("category.id"), nullable=True),
    _timestamp("created_at"),
    _timestamp("updated_at"),
    _one_of("budget", "period_type", BudgetPeriod),
    sqlite_autoincrement=True,
)

goal_table = sa.Table(
    "goal",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("target_amount", sa.Float, nullable=False),
    sa.Column("current_amount", sa.Float, nullable=False, server_default=sa.text("0.0")),
    sa.Column("target_date", sa.Text, nullable=False),
    sa.Column("description", sa.Text),
    _timestamp("created_at"),
    _timestamp("updated_at"),
    sqlite_autoincrement=True,
)
