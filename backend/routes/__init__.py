"""Routes package for API endpoints."""

from routes.email import email_bp
from routes.health import health_bp
from routes.ledger import ledger_bp
from routes.reconciliation import reconciliation_bp

__all__ = [
    "ledger_bp",
    "email_bp",
    "reconciliation_bp",
    "health_bp",
]
