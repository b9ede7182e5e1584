# backend/database/models/__init__.py
"""SQLAlchemy models for all database tables."""

from .ledger import (
    DEFAULT_CATEGORY,
    EmailProcessingLog,
    LedgerEntry,
    ReconciliationHistory,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "LedgerEntry",
    "EmailProcessingLog",
    "ReconciliationHistory",
]
