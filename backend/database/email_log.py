"""
Email Processing Log - Database Operations

Audit trail of processed receipt emails, keyed by the mail source's message
identifier.
"""

from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from errors import PersistenceError

from .base import get_session
from .models.ledger import EmailProcessingLog

LOG_STATUSES = ("processed", "error")


def get_email_log_entry(email_id: str) -> dict | None:
    """Get the processing log row for an email, if any."""
    with get_session() as session:
        entry = (
            session.query(EmailProcessingLog)
            .filter(EmailProcessingLog.email_id == str(email_id))
            .first()
        )
        return entry.to_dict() if entry else None


def record_email_processing(
    email_id: str, status: str, error_message: str = None
) -> dict:
    """
    Insert or update the processing log row for an email.

    error_message is stored only for the 'error' status.

    Raises:
        ValueError: If status is not a known log status
        PersistenceError: If the write fails
    """
    if status not in LOG_STATUSES:
        raise ValueError(f"Invalid processing status: {status}")

    try:
        with get_session() as session:
            entry = (
                session.query(EmailProcessingLog)
                .filter(EmailProcessingLog.email_id == str(email_id))
                .first()
            )
            if entry is None:
                entry = EmailProcessingLog(email_id=str(email_id))
                session.add(entry)

            entry.status = status
            entry.processed_at = datetime.now(UTC)
            entry.error_message = error_message if status == "error" else None

            session.commit()
            session.refresh(entry)
            return entry.to_dict()
    except SQLAlchemyError as e:
        raise PersistenceError(
            f"Failed to record processing status for email {email_id}: {e}"
        ) from e


def get_email_processing_log(limit: int = 50) -> list:
    """Get the most recent processing log rows."""
    with get_session() as session:
        entries = (
            session.query(EmailProcessingLog)
            .order_by(EmailProcessingLog.processed_at.desc(), EmailProcessingLog.id.desc())
            .limit(limit)
            .all()
        )
        return [entry.to_dict() for entry in entries]


def get_email_processing_stats() -> list:
    """Get row counts grouped by status."""
    with get_session() as session:
        rows = (
            session.query(
                EmailProcessingLog.status,
                func.count(EmailProcessingLog.id).label("count"),
            )
            .group_by(EmailProcessingLog.status)
            .all()
        )
        return [{"status": row.status, "count": row.count} for row in rows]
