"""
Finance Store - Source Package

Personal-finance schema (accounts, categories, transactions, budgets,
goals) and the query proxy that routes ORM-compiled SQL to an embedded
SQLite database.

DESIGN PRINCIPLES:
1. The schema is the single source of truth for the physical layout
2. The database enforces constraints, application code does not
3. Driver failures are logged, then re-raised unchanged
4. The connection handle is owned, never global
"""

__version__ = "1.0.0"
__author__ = "Finance Store Team"
