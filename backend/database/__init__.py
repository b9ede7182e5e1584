"""
Database Layer - Public API

This module provides the public interface for all database operations.
It imports and re-exports functions from domain-specific modules.

Usage:
    from database import get_ledger_entry, save_reconciliation
    # or
    from database import ledger as db_ledger

Organization:
    - base.py: Engine, session factory and schema creation
    - ledger.py: Ledger entry CRUD and statistics
    - email_log.py: Email processing audit log
    - reconciliation.py: Reconciliation history
    - models/: SQLAlchemy models
"""

# Core connection utilities (always available)
from .base import (
    DATABASE_URL,
    Base,
    check_connection,
    engine,
    get_session,
    init_db,
)

# Email processing log
from .email_log import (
    get_email_log_entry,
    get_email_processing_log,
    get_email_processing_stats,
    record_email_processing,
)

# Ledger operations
from .ledger import (
    clear_ledger,
    create_ledger_entry,
    delete_ledger_entry,
    get_category_summary,
    get_entries_for_reconciliation,
    get_ledger_entries,
    get_ledger_entry,
    get_ledger_summary,
    get_monthly_summary,
    update_ledger_entry,
)

# Reconciliation history
from .reconciliation import (
    get_reconciliation_history,
    save_reconciliation,
)

__all__ = [
    # Core
    "DATABASE_URL",
    "Base",
    "engine",
    "get_session",
    "init_db",
    "check_connection",
    # Ledger
    "get_ledger_entries",
    "get_ledger_entry",
    "get_entries_for_reconciliation",
    "create_ledger_entry",
    "update_ledger_entry",
    "delete_ledger_entry",
    "clear_ledger",
    "get_ledger_summary",
    "get_category_summary",
    "get_monthly_summary",
    # Email log
    "get_email_log_entry",
    "record_email_processing",
    "get_email_processing_log",
    "get_email_processing_stats",
    # Reconciliation
    "save_reconciliation",
    "get_reconciliation_history",
]
