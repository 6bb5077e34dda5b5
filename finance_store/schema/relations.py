"""
Table Relations

Named links between tables, so the query layer can build joins
without restating the foreign-key pairs at every call site.
"""

from dataclasses import dataclass
from enum import Enum

import sqlalchemy as sa

from finance_store.schema.tables import (
    account_table,
    budget_table,
    category_table,
    transaction_table,
)


class RelationKind(str, Enum):
    ONE = "one"
    MANY = "many"


@dataclass(frozen=True)
class Relation:
    """
    A named relation from `source` to `target`.

    `fields` are columns of the source, `references` the matching
    columns of the target, pairwise.
    """
    name: str
    kind: RelationKind
    source: sa.Table
    target: sa.Table
    fields: tuple[sa.Column, ...]
    references: tuple[sa.Column, ...]

    @property
    def onclause(self) -> sa.ColumnElement[bool]:
        return sa.and_(
            *(field == ref for field, ref in zip(self.fields, self.references))
        )


def _one(name, source, target, fields, references) -> Relation:
    return Relation(name, RelationKind.ONE, source, target, tuple(fields), tuple(references))


def _many(name, source, target, fields, references) -> Relation:
    return Relation(name, RelationKind.MANY, source, target, tuple(fields), tuple(references))


RELATIONS: dict[str, dict[str, Relation]] = {
    "account": {
        # An account has many transactions
        "transactions": _many(
            "transactions", account_table, transaction_table,
            [account_table.c.id], [transaction_table.c.account_id],
        ),
    },
    "category": {
        "transactions": _many(
            "transactions", category_table, transaction_table,
            [category_table.c.id], [transaction_table.c.category_id],
        ),
        "budgets": _many(
            "budgets", category_table, budget_table,
            [category_table.c.id], [budget_table.c.category_id],
        ),
    },
    "transaction": {
        "account": _one(
            "account", transaction_table, account_table,
            [transaction_table.c.account_id], [account_table.c.id],
        ),
        "category": _one(
            "category", transaction_table, category_table,
            [transaction_table.c.category_id], [category_table.c.id],
        ),
    },
    "budget": {
        # Optional: a budget without a category has no match
        "category": _one(
            "category", budget_table, category_table,
            [budget_table.c.category_id], [category_table.c.id],
        ),
    },
    "goal": {},
}


def get_relation(table: sa.Table, name: str) -> Relation:
    """
    Look up a relation by source table and name.

    Raises:
        KeyError: If the table has no relation with that name
    """
    try:
        return RELATIONS[table.name][name]
    except KeyError:
        raise KeyError(f"Table {table.name!r} has no relation {name!r}") from None


def relation_join(table: sa.Table, name: str, *, outer: bool = False) -> sa.Join:
    """
    Join `table` to the target of one of its relations.

    Budgets point at a nullable category, so pass outer=True to keep
    budgets that cover overall spending.
    """
    relation = get_relation(table, name)
    return sa.join(table, relation.target, relation.onclause, isouter=outer)
