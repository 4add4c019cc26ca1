"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the expense ingest models used by ``expense_ingest``.
"""

from .expenses import Base, Expense, ImportJobRow

__all__ = [
    "Base",
    "Expense",
    "ImportJobRow",
]
