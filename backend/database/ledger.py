"""
Ledger - Database Operations

Handles ledger entry CRUD, aggregate statistics, and the full date-ordered
scan used by reconciliation.
"""

import math

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from errors import PersistenceError

from .base import get_session
from .models.ledger import DEFAULT_CATEGORY, EmailProcessingLog, LedgerEntry

UPDATABLE_FIELDS = ("merchant_name", "amount", "date", "category", "description")

# ============================================================================
# LEDGER RETRIEVAL
# ============================================================================


def get_ledger_entries(
    page: int = 1, limit: int = 50, search: str = "", category: str = ""
) -> dict:
    """
    Get a page of ledger entries, newest first.

    Args:
        page: 1-based page number
        limit: Page size
        search: Substring matched against merchant, description and subject
        category: Exact category filter

    Returns:
        Dict with ledger list and pagination metadata
    """
    with get_session() as session:
        query = session.query(LedgerEntry)

        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    LedgerEntry.merchant_name.like(term),
                    LedgerEntry.description.like(term),
                    LedgerEntry.email_subject.like(term),
                )
            )

        if category:
            query = query.filter(LedgerEntry.category == category)

        total = query.count()
        entries = (
            query.order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
            .all()
        )

        return {
            "ledger": [entry.to_dict() for entry in entries],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }


def get_ledger_entry(entry_id: int) -> dict | None:
    """Get a single ledger entry by id."""
    with get_session() as session:
        entry = session.get(LedgerEntry, entry_id)
        return entry.to_dict() if entry else None


def get_entries_for_reconciliation() -> list:
    """
    Get every ledger entry ordered by purchase date (newest first).

    The order is significant: the reconciliation matcher claims the first
    eligible entry it meets.
    """
    with get_session() as session:
        entries = (
            session.query(LedgerEntry)
            .order_by(LedgerEntry.date.desc(), LedgerEntry.id.asc())
            .all()
        )
        return [entry.to_dict() for entry in entries]


# ============================================================================
# LEDGER WRITES
# ============================================================================


def create_ledger_entry(
    merchant_name: str,
    amount: float,
    date: str,
    category: str = DEFAULT_CATEGORY,
    description: str = "",
    email_id: str = None,
    email_subject: str = None,
    email_date: str = None,
    receipt_text: str = "",
) -> dict:
    """
    Insert one ledger entry as its own unit of work.

    Returns:
        The created entry as a dict

    Raises:
        PersistenceError: If the insert fails
    """
    try:
        with get_session() as session:
            entry = LedgerEntry(
                email_id=email_id,
                email_subject=email_subject,
                email_date=email_date,
                merchant_name=merchant_name,
                amount=amount,
                date=date,
                category=category or DEFAULT_CATEGORY,
                description=description,
                receipt_text=receipt_text or "",
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return entry.to_dict()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to insert ledger entry: {e}") from e


def update_ledger_entry(entry_id: int, fields: dict) -> dict | None:
    """
    Update the editable fields of a ledger entry.

    Args:
        entry_id: Ledger entry id
        fields: Mapping restricted to UPDATABLE_FIELDS

    Returns:
        Updated entry dict, or None if the entry does not exist

    Raises:
        PersistenceError: If the update fails
    """
    try:
        with get_session() as session:
            entry = session.get(LedgerEntry, entry_id)
            if not entry:
                return None

            for name in UPDATABLE_FIELDS:
                if name in fields:
                    setattr(entry, name, fields[name])
            entry.updated_at = func.now()

            session.commit()
            session.refresh(entry)
            return entry.to_dict()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to update ledger entry {entry_id}: {e}") from e


def delete_ledger_entry(entry_id: int) -> bool:
    """Delete a ledger entry. Returns False if it does not exist."""
    try:
        with get_session() as session:
            entry = session.get(LedgerEntry, entry_id)
            if not entry:
                return False
            session.delete(entry)
            session.commit()
            return True
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to delete ledger entry {entry_id}: {e}") from e


def clear_ledger() -> dict:
    """Delete every ledger entry and every email processing log row."""
    try:
        with get_session() as session:
            ledger_deleted = session.query(LedgerEntry).delete()
            logs_deleted = session.query(EmailProcessingLog).delete()
            session.commit()
            return {"ledger_deleted": ledger_deleted, "logs_deleted": logs_deleted}
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to clear ledger: {e}") from e


# ============================================================================
# STATISTICS
# ============================================================================


def get_ledger_summary() -> dict:
    """Get entry count, amount total, and distinct category/merchant counts."""
    with get_session() as session:
        result = session.query(
            func.count(LedgerEntry.id).label("total_entries"),
            func.sum(LedgerEntry.amount).label("total_amount"),
            func.count(func.distinct(LedgerEntry.category)).label("unique_categories"),
            func.count(func.distinct(LedgerEntry.merchant_name)).label(
                "unique_merchants"
            ),
        ).one()

        return {
            "total_entries": result.total_entries or 0,
            "total_amount": round(float(result.total_amount or 0), 2),
            "unique_categories": result.unique_categories or 0,
            "unique_merchants": result.unique_merchants or 0,
        }


def get_category_summary() -> list:
    """Get count and amount per category, largest total first."""
    with get_session() as session:
        total = func.sum(LedgerEntry.amount).label("total_amount")
        rows = (
            session.query(
                LedgerEntry.category,
                func.count(LedgerEntry.id).label("count"),
                total,
            )
            .group_by(LedgerEntry.category)
            .order_by(total.desc())
            .all()
        )

        return [
            {
                "category": row.category,
                "count": row.count,
                "total_amount": round(float(row.total_amount or 0), 2),
            }
            for row in rows
        ]


def get_monthly_summary(limit: int = 12) -> list:
    """
    Get count and amount per purchase month (YYYY-MM), newest first.

    Dates are stored as ISO strings, so the month is the first seven
    characters; this works on every supported backend.
    """
    with get_session() as session:
        month = func.substr(LedgerEntry.date, 1, 7).label("month")
        rows = (
            session.query(
                month,
                func.count(LedgerEntry.id).label("count"),
                func.sum(LedgerEntry.amount).label("total_amount"),
            )
            .filter(LedgerEntry.date.isnot(None))
            .group_by(month)
            .order_by(month.desc())
            .limit(limit)
            .all()
        )

        return [
            {
                "month": row.month,
                "count": row.count,
                "total_amount": round(float(row.total_amount or 0), 2),
            }
            for row in rows
        ]
