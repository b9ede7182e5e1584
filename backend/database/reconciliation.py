"""
Reconciliation History - Database Operations

Append-only storage of reconciliation summaries.
"""

from sqlalchemy.exc import SQLAlchemyError

from errors import PersistenceError

from .base import get_session
from .models.ledger import ReconciliationHistory


def save_reconciliation(summary: dict) -> int:
    """
    Persist a reconciliation summary.

    Args:
        summary: Dict with total_matches, total_ledger_only, total_bank_only,
                 total_matched_amount, total_ledger_amount, total_bank_amount

    Returns:
        New record id

    Raises:
        PersistenceError: If the insert fails
    """
    try:
        with get_session() as session:
            record = ReconciliationHistory(
                total_matches=int(summary.get("total_matches", 0)),
                total_ledger_only=int(summary.get("total_ledger_only", 0)),
                total_bank_only=int(summary.get("total_bank_only", 0)),
                total_matched_amount=float(summary.get("total_matched_amount", 0)),
                total_ledger_amount=float(summary.get("total_ledger_amount", 0)),
                total_bank_amount=float(summary.get("total_bank_amount", 0)),
            )
            session.add(record)
            session.commit()
            return record.id
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to save reconciliation: {e}") from e


def get_reconciliation_history(limit: int = 50) -> list:
    """Get saved reconciliation summaries, newest first."""
    with get_session() as session:
        records = (
            session.query(ReconciliationHistory)
            .order_by(
                ReconciliationHistory.created_at.desc(),
                ReconciliationHistory.id.desc(),
            )
            .limit(limit)
            .all()
        )
        return [record.to_dict() for record in records]
