"""
Services Package - Business Logic Layer

This package contains service modules that encapsulate business logic,
separating it from HTTP routing concerns.

Services can be called from:
- Flask routes (HTTP requests)
- Tests

Available services:
- ledger_service: Ledger browsing, editing and statistics
- email_service: Mailbox receipt ingestion orchestration
- reconciliation_service: Bank statement parsing, comparison and history
"""

from . import email_service, ledger_service, reconciliation_service

__all__ = [
    "ledger_service",
    "email_service",
    "reconciliation_service",
]
