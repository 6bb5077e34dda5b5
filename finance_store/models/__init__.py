"""
Data Models Package

Typed records for every table, the shapes exchanged between the ORM
layer and the query proxy, and the audit events the proxy emits.
"""

from finance_store.models.records import (
    AccountRecord,
    AccountStatus,
    AccountType,
    BudgetPeriod,
    BudgetRecord,
    CategoryRecord,
    CategoryType,
    GoalRecord,
    TransactionRecord,
)
from finance_store.models.query import (
    CompiledStatement,
    ProxyResult,
    ResultColumn,
    ResultMethod,
    StatementKind,
)
from finance_store.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "AccountRecord",
    "AccountStatus",
    "AccountType",
    "BudgetPeriod",
    "BudgetRecord",
    "CategoryRecord",
    "CategoryType",
    "GoalRecord",
    "TransactionRecord",
    # Query models
    "CompiledStatement",
    "ProxyResult",
    "ResultColumn",
    "ResultMethod",
    "StatementKind",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
