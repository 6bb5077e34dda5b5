"""Audit logging package."""

from finance_store.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
