"""Create ledger, email_processing_log and reconciliation_history tables

Revision ID: 3a9d5c1e7b20
Revises:
Create Date: 2026-10-18 10:12:41.508213

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3a9d5c1e7b20"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the ledger tables."""
    op.create_table(
        "ledger",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email_id", sa.String(length=255), nullable=True),
        sa.Column("email_subject", sa.Text(), nullable=True),
        sa.Column("email_date", sa.String(length=40), nullable=True),
        sa.Column("merchant_name", sa.String(length=255), nullable=True),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("receipt_text", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.CheckConstraint("amount >= 0", name="ck_ledger_amount_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_ledger_date", "ledger", ["date"])
    op.create_index("idx_ledger_category", "ledger", ["category"])
    op.create_index("idx_ledger_email_id", "ledger", ["email_id"])

    op.create_table(
        "email_processing_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email_id", sa.String(length=255), nullable=False),
        sa.Column(
            "processed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.CheckConstraint(
            "status IN ('processed', 'error')", name="ck_email_log_status"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email_id"),
    )

    op.create_table(
        "reconciliation_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("total_matches", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "total_ledger_only", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("total_bank_only", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "total_matched_amount",
            sa.Numeric(precision=10, scale=2),
            server_default="0",
            nullable=False,
        ),
        sa.Column(
            "total_ledger_amount",
            sa.Numeric(precision=10, scale=2),
            server_default="0",
            nullable=False,
        ),
        sa.Column(
            "total_bank_amount",
            sa.Numeric(precision=10, scale=2),
            server_default="0",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the ledger tables."""
    op.drop_table("reconciliation_history")
    op.drop_table("email_processing_log")
    op.drop_index("idx_ledger_email_id", table_name="ledger")
    op.drop_index("idx_ledger_category", table_name="ledger")
    op.drop_index("idx_ledger_date", table_name="ledger")
    op.drop_table("ledger")
