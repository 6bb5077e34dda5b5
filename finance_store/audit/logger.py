"""
Audit Logger

DESIGN DECISION: Database activity goes through one logging collaborator.
The proxy and the driver never call structlog directly; they hand an
AuditEvent to this logger. This provides:
1. One place that decides what gets logged and at what level
2. A seam for tests to capture events
3. No parameter values in logs (only counts)

Logging must never mask the error being logged: if writing the log
line fails, the failure is swallowed and the original error still
propagates from the caller.
"""

import logging
import sys
from typing import Optional

import structlog

from finance_store.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


LOGGER_NAME = "finance_store"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is at emit time."""

    def __init__(self):
        super().__init__()
        self.setFormatter(logging.Formatter("%(message)s"))

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


_handler = _StderrHandler()


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Only the package logger is touched: it gets its own stderr handler
    and stops propagating, so the root logger and its handlers stay
    with the host application.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    if _handler not in package_logger.handlers:
        package_logger.addHandler(_handler)
    package_logger.propagate = False
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service for database activity.

    Everything is logged locally through structlog. Statement-level
    events are DEBUG, so they only show up when debug logging is on.
    """

    def __init__(self, logger_name: str = LOGGER_NAME):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()
        name = event.event_type.value

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error(name, **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning(name, **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug(name, **log_dict)
            else:
                self._logger.info(name, **log_dict)
        except Exception:
            # Never let logging replace the error being reported
            pass

    def log_database_opened(self, connection: str) -> None:
        """Log the driver handle being loaded."""
        self.log(AuditEventBuilder.database_opened(connection))

    def log_database_closed(self, connection: str) -> None:
        """Log the driver handle being released by its owner."""
        self.log(AuditEventBuilder.database_closed(connection))

    def log_migration_applied(
        self,
        connection: str,
        version: int,
        description: str,
    ) -> None:
        """Log a schema migration."""
        self.log(
            AuditEventBuilder.migration_applied(
                connection=connection,
                version=version,
                description=description,
            )
        )

    def log_statement(
        self,
        sql: str,
        param_count: int,
        kind: str,
        row_count: int,
        connection: Optional[str] = None,
    ) -> None:
        """Log a statement that completed."""
        self.log(
            AuditEventBuilder.statement_executed(
                sql=sql,
                param_count=param_count,
                kind=kind,
                row_count=row_count,
                connection=connection,
            )
        )

    def log_sql_error(
        self,
        sql: str,
        param_count: int,
        error: BaseException,
        connection: Optional[str] = None,
    ) -> None:
        """Log a statement the driver rejected."""
        self.log(
            AuditEventBuilder.statement_failed(
                sql=sql,
                param_count=param_count,
                error=error,
                connection=connection,
            )
        )
