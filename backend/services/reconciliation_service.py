"""
Reconciliation Service - Business Logic

Orchestrates bank statement reconciliation:
- Statement upload validation and CSV parsing
- Comparison of bank transactions against the ledger
- Reconciliation history recording

Separates business logic from HTTP routing concerns.
"""

from database import ledger as db_ledger
from database import reconciliation as db_reconciliation
from errors import ParseError, ValidationError
from receipts.reconciliation_matcher import compare_transactions
from receipts.statement_parser import parse_statement

CSV_MIMETYPE = "text/csv"
SUMMARY_FIELDS = (
    "total_matches",
    "total_ledger_only",
    "total_bank_only",
    "total_matched_amount",
    "total_ledger_amount",
    "total_bank_amount",
)


def get_overview() -> dict:
    """Get ledger statistics and the five most recent reconciliations."""
    return {
        "ledger_stats": db_ledger.get_ledger_summary(),
        "recent_reconciliations": db_reconciliation.get_reconciliation_history(limit=5),
    }


def is_csv_upload(filename: str, mimetype: str) -> bool:
    """Accept text/csv uploads or any file named *.csv."""
    return mimetype == CSV_MIMETYPE or (filename or "").endswith(".csv")


def parse_uploaded_statement(upload) -> dict:
    """
    Parse an uploaded statement file.

    Args:
        upload: werkzeug FileStorage from the 'statement' form field, or None

    Returns:
        Dict with message and transactions

    Raises:
        ValidationError: If no file was sent, it is not CSV or not UTF-8
    """
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")

    if not is_csv_upload(upload.filename, upload.mimetype):
        raise ValidationError("Only CSV files are allowed")

    try:
        transactions = parse_statement(upload.read())
    except ParseError as e:
        raise ValidationError(str(e)) from e

    return {
        "message": f"Parsed {len(transactions)} transactions from bank statement",
        "transactions": transactions,
    }


def compare(data: dict) -> dict:
    """
    Compare bank transactions against every ledger entry.

    Args:
        data: Request body with bank_transactions list

    Raises:
        ValidationError: If bank_transactions is missing or malformed
    """
    bank_transactions = data.get("bank_transactions") if isinstance(data, dict) else None
    if not isinstance(bank_transactions, list):
        raise ValidationError("Bank transactions array is required")

    return compare_transactions(
        bank_transactions, db_ledger.get_entries_for_reconciliation()
    )


def get_history(limit: int = 50) -> list:
    return db_reconciliation.get_reconciliation_history(limit=limit)


def save(data: dict) -> dict:
    """
    Record a reconciliation summary.

    Raises:
        ValidationError: If the summary is missing or has non-numeric totals
    """
    summary = data.get("summary") if isinstance(data, dict) else None
    if not isinstance(summary, dict):
        raise ValidationError("summary is required")

    for name in SUMMARY_FIELDS:
        value = summary.get(name, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"summary.{name} must be a number")

    record_id = db_reconciliation.save_reconciliation(summary)
    return {"message": "Reconciliation saved successfully", "id": record_id}
