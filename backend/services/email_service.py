"""
Email Service - Business Logic

Orchestrates receipt ingestion from an IMAP mailbox:
- Credential validation
- Mailbox processing and ledger saving
- Connection testing
- Processing log and statistics

Separates business logic from HTTP routing concerns.
"""

import logging

from config import load_app_config
from database import email_log as db_email_log
from errors import ValidationError
from receipts import ingestion, ledger_writer
from receipts.mail_client import ImapMailbox

logger = logging.getLogger(__name__)

CREDENTIAL_FIELDS = ("user", "password", "host", "port")
LOG_STATUSES = ("processed", "error")


def parse_credentials(data: dict) -> dict:
    """
    Validate the IMAP connection parameters of a request body.

    Raises:
        ValidationError: If any parameter is missing or the port is not a number
    """
    data = data if isinstance(data, dict) else {}
    missing = [name for name in CREDENTIAL_FIELDS if not data.get(name)]
    if missing:
        raise ValidationError(
            f"Missing email configuration parameters: {', '.join(missing)}"
        )

    try:
        port = int(data["port"])
    except (TypeError, ValueError) as e:
        raise ValidationError("port must be a number") from e
    if port <= 0:
        raise ValidationError("port must be greater than 0")

    return {
        "user": str(data["user"]),
        "password": str(data["password"]),
        "host": str(data["host"]),
        "port": port,
    }


def process_emails(data: dict, mailbox_factory=None) -> dict:
    """
    Ingest every receipt email in the mailbox and save valid receipts.

    Args:
        data: Request body with user, password, host, port
        mailbox_factory: Scoped mailbox session factory (default: ImapMailbox)

    Returns:
        Dict with message, emails, failures, results and counts

    Raises:
        ValidationError: If credentials are incomplete
        MailConnectionError: If the mailbox cannot be opened
    """
    credentials = parse_credentials(data)
    batch = ingestion.process_mailbox(
        **credentials, mailbox_factory=mailbox_factory or ImapMailbox
    )

    results = []
    for email_data in batch["emails"]:
        if not email_data["receipt_data"]:
            logger.info(f"No receipt data found for email {email_data['email_id']}")
            continue
        for result in ledger_writer.save_to_ledger(email_data):
            results.append({"email_id": email_data["email_id"], **result})

    counts = {
        "succeeded": sum(1 for result in results if result["status"] == "saved"),
        "failed": sum(1 for result in results if result["status"] == "error")
        + len(batch["failures"]),
        "skipped": sum(1 for result in results if result["status"] == "skipped"),
    }

    # Attachment bytes and raw text stay server-side
    emails = [
        {
            **email_data,
            "receipt_data": [
                {key: value for key, value in receipt.items() if key != "raw_text"}
                for receipt in email_data["receipt_data"]
            ],
        }
        for email_data in batch["emails"]
    ]

    logger.info(
        f"Processed {len(emails)} emails: {counts['succeeded']} saved, "
        f"{counts['failed']} failed, {counts['skipped']} skipped"
    )

    return {
        "message": f"Processed {len(emails)} emails",
        "emails": emails,
        "failures": batch["failures"],
        "results": results,
        "counts": counts,
    }


def test_connection(data: dict, mailbox_factory=None) -> dict:
    """
    Open and close a mailbox session to verify the credentials.

    Raises:
        ValidationError: If credentials are incomplete
        MailConnectionError: If the connection fails
    """
    credentials = parse_credentials(data)
    config = load_app_config()

    mailbox_factory = mailbox_factory or ImapMailbox

    with mailbox_factory(**credentials, mailbox=config.email_mailbox):
        pass

    return {"success": True, "message": "Email connection successful"}


def get_processing_log(limit: int = 50) -> list:
    """Get the most recent email processing log rows."""
    return db_email_log.get_email_processing_log(limit=limit)


def get_processing_stats() -> dict:
    """Get processing counts by status, with zero rows when nothing was processed."""
    summary = db_email_log.get_email_processing_stats()
    if not summary:
        summary = [{"status": status, "count": 0} for status in LOG_STATUSES]

    return {
        "summary": summary,
        "total": sum(row["count"] for row in summary),
    }


def get_default_config() -> dict:
    """Get the default IMAP host and port."""
    config = load_app_config()
    return {"host": config.email_host, "port": config.email_port}
