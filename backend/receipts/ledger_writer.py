"""
Ledger Writer

Persists extracted receipts as ledger entries and keeps the email processing
log in step. Every receipt insert is its own unit of work; a failed insert is
recorded against its email and does not affect the other receipts.
"""

from datetime import date

from sqlalchemy.exc import SQLAlchemyError

import database
from database.models import DEFAULT_CATEGORY
from errors import PersistenceError
from receipts.logging_config import get_logger
from receipts.text_extractor import FALLBACK_DESCRIPTION, UNKNOWN_MERCHANT

logger = get_logger(__name__)


def is_saveable_receipt(receipt: dict) -> bool:
    """A receipt is saved only with a merchant, a positive amount and no invalid flag."""
    merchant = receipt.get("merchant_name") or ""
    try:
        amount = float(receipt.get("amount") or 0)
    except (TypeError, ValueError):
        return False
    return bool(merchant.strip()) and amount > 0 and receipt.get("is_valid") is not False


def save_to_ledger(email_data: dict) -> list:
    """
    Save every receipt extracted from one email.

    Re-processing an email that is already in the processing log is allowed
    and inserts new ledger rows; the existing log row is updated.

    Args:
        email_data: Output of ingestion.extract_message_receipts

    Returns:
        One result per receipt: {status, ledger_id, error, receipt} where
        status is 'saved', 'skipped' or 'error'. A saved result carries an
        error only when its processing log write failed.
    """
    email_id = email_data["email_id"]
    receipts = email_data.get("receipt_data") or []
    results = []

    try:
        already_logged = database.get_email_log_entry(email_id)
    except SQLAlchemyError as e:
        logger.warning(
            f"Could not read processing log, skipping duplicate check: {e}",
            extra={"email_id": email_id},
        )
        already_logged = None

    if already_logged:
        logger.warning(
            "Email already processed; re-processing may duplicate ledger rows",
            extra={"email_id": email_id},
        )

    for receipt in receipts:
        context = {"email_id": email_id, "attachment": receipt.get("filename")}
        summary = {key: value for key, value in receipt.items() if key != "raw_text"}

        if not is_saveable_receipt(receipt):
            logger.info(
                f"Skipping invalid receipt: merchant={receipt.get('merchant_name')!r} "
                f"amount={receipt.get('amount')} is_valid={receipt.get('is_valid')}",
                extra=context,
            )
            results.append(
                {"status": "skipped", "ledger_id": None, "error": None, "receipt": summary}
            )
            continue

        try:
            entry = database.create_ledger_entry(
                merchant_name=receipt.get("merchant_name") or UNKNOWN_MERCHANT,
                amount=float(receipt["amount"]),
                date=receipt.get("date") or date.today().isoformat(),
                category=receipt.get("category") or DEFAULT_CATEGORY,
                description=receipt.get("description") or FALLBACK_DESCRIPTION,
                email_id=email_id,
                email_subject=email_data.get("subject"),
                email_date=email_data.get("date"),
                receipt_text=receipt.get("raw_text") or "",
            )
        except PersistenceError as e:
            logger.error(f"Failed to save receipt: {e}", extra=context)
            try:
                database.record_email_processing(email_id, "error", str(e))
            except PersistenceError as log_error:
                logger.error(f"Failed to record processing error: {log_error}", extra=context)
            results.append(
                {"status": "error", "ledger_id": None, "error": str(e), "receipt": summary}
            )
            continue

        logger.info(f"Saved ledger entry {entry['id']}", extra=context)

        # The row is committed; a log failure is reported without undoing it
        log_error = None
        try:
            database.record_email_processing(email_id, "processed")
        except PersistenceError as e:
            logger.error(f"Failed to record processing status: {e}", extra=context)
            log_error = str(e)

        results.append(
            {
                "status": "saved",
                "ledger_id": entry["id"],
                "error": log_error,
                "receipt": summary,
            }
        )

    return results
