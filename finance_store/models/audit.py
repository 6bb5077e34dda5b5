"""
Audit Models for Finance Store

Database activity that is worth a log line: the handle being opened,
migrations being applied, statements running and statements failing.

DESIGN DECISION: Bind parameter VALUES are never logged, only their
count. Parameters carry amounts, payees and notes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of database events we audit."""
    # Connection lifecycle
    DATABASE_OPENED = "database_opened"
    DATABASE_CLOSED = "database_closed"
    MIGRATION_APPLIED = "migration_applied"

    # Statements
    STATEMENT_EXECUTED = "statement_executed"
    STATEMENT_FAILED = "statement_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every connection lifecycle step and every statement creates one.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which database this is about
    connection: Optional[str] = Field(
        default=None,
        description="Connection identifier (e.g. 'sqlite:main.db')"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "connection": self.connection,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


def _sql_preview(sql: str, limit: int = 200) -> str:
    flat = " ".join(sql.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3] + "..."


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.database_opened("sqlite:main.db")
        event = AuditEventBuilder.statement_failed(sql, params, error)
    """

    @staticmethod
    def database_opened(connection: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATABASE_OPENED,
            connection=connection,
            description=f"Database opened: {connection}",
        )

    @staticmethod
    def database_closed(connection: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATABASE_CLOSED,
            connection=connection,
            description=f"Database closed: {connection}",
        )

    @staticmethod
    def migration_applied(
        connection: str,
        version: int,
        description: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_APPLIED,
            connection=connection,
            description=f"Migration {version} applied: {description}",
            details={
                "version": version,
                "migration": description,
            },
        )

    @staticmethod
    def statement_executed(
        sql: str,
        param_count: int,
        kind: str,
        row_count: int,
        connection: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_EXECUTED,
            severity=AuditSeverity.DEBUG,
            connection=connection,
            description=f"{kind.capitalize()} statement returned {row_count} rows",
            details={
                "sql": _sql_preview(sql),
                "param_count": param_count,
                "kind": kind,
                "row_count": row_count,
            },
        )

    @staticmethod
    def statement_failed(
        sql: str,
        param_count: int,
        error: BaseException,
        connection: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_FAILED,
            severity=AuditSeverity.ERROR,
            connection=connection,
            description="SQL Error",
            details={
                "sql": _sql_preview(sql),
                "param_count": param_count,
            },
            error_type=type(error).__name__,
            error_message=str(error),
        )
