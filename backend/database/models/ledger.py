"""
Ledger models for receipts, email provenance and reconciliation snapshots.

Maps to:
- ledger table
- email_processing_log table
- reconciliation_history table
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from database.base import Base

DEFAULT_CATEGORY = "Retail"


def _isoformat(value):
    return value.isoformat() if value is not None else None


class LedgerEntry(Base):
    """A recorded purchase, from receipt ingestion or manual entry."""

    __tablename__ = "ledger"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email_id = Column(String(255), nullable=True)
    email_subject = Column(Text, nullable=True)
    email_date = Column(String(40), nullable=True)
    merchant_name = Column(String(255), nullable=True)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    date = Column(String(10), nullable=True)  # ISO YYYY-MM-DD
    category = Column(String(50), nullable=True, default=DEFAULT_CATEGORY)
    description = Column(Text, nullable=True)
    receipt_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_ledger_amount_non_negative"),
        Index("idx_ledger_date", "date"),
        Index("idx_ledger_category", "category"),
        Index("idx_ledger_email_id", "email_id"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email_id": self.email_id,
            "email_subject": self.email_subject,
            "email_date": self.email_date,
            "merchant_name": self.merchant_name,
            "amount": float(self.amount) if self.amount is not None else 0.0,
            "date": self.date,
            "category": self.category,
            "description": self.description,
            "receipt_text": self.receipt_text,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<LedgerEntry(id={self.id}, merchant={self.merchant_name}, amount={self.amount})>"


class EmailProcessingLog(Base):
    """One row per processed email; audit trail keyed by email id."""

    __tablename__ = "email_processing_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email_id = Column(String(255), nullable=False, unique=True)
    processed_at = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('processed', 'error')",
            name="ck_email_log_status",
        ),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email_id": self.email_id,
            "processed_at": _isoformat(self.processed_at),
            "status": self.status,
            "error_message": self.error_message,
        }

    def __repr__(self) -> str:
        return f"<EmailProcessingLog(email_id={self.email_id}, status={self.status})>"


class ReconciliationHistory(Base):
    """Saved summary of one reconciliation run (immutable)."""

    __tablename__ = "reconciliation_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_matches = Column(Integer, nullable=False, default=0, server_default="0")
    total_ledger_only = Column(Integer, nullable=False, default=0, server_default="0")
    total_bank_only = Column(Integer, nullable=False, default=0, server_default="0")
    total_matched_amount = Column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0, server_default="0"
    )
    total_ledger_amount = Column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0, server_default="0"
    )
    total_bank_amount = Column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0, server_default="0"
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": _isoformat(self.created_at),
            "total_matches": self.total_matches,
            "total_ledger_only": self.total_ledger_only,
            "total_bank_only": self.total_bank_only,
            "total_matched_amount": float(self.total_matched_amount or 0),
            "total_ledger_amount": float(self.total_ledger_amount or 0),
            "total_bank_amount": float(self.total_bank_amount or 0),
        }

    def __repr__(self) -> str:
        return f"<ReconciliationHistory(id={self.id}, matches={self.total_matches})>"
