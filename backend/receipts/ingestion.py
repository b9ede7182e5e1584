"""
Receipt Ingestion Orchestrator

Walks a mailbox, keeps the messages that carry PDF attachments and turns each
attachment into structured receipt data.

Flow:
    1. Open a scoped IMAP session and list every message id
    2. Fetch raw messages sequentially over that one session
    3. Fan out: parse each message and extract its PDF receipts in a thread pool
    4. Fan in: reassemble per-message results in fetch order

A failure on one message is logged and reported in ``failures``; it never
aborts the batch. Messages without PDF attachments produce no output at all.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed

from config import load_app_config
from errors import MailConnectionError
from receipts.logging_config import get_logger
from receipts.mail_client import ImapMailbox, parse_message
from receipts.pdf_text import parse_receipt

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def select_pdf_attachments(attachments: list) -> list:
    """Keep attachments whose content type is exactly application/pdf."""
    return [
        attachment
        for attachment in attachments
        if attachment.get("content_type") == PDF_CONTENT_TYPE
    ]


def extract_message_receipts(message: dict, receipt_parser=parse_receipt) -> dict | None:
    """
    Run PDF-to-text and the text extractor over a message's PDF attachments.

    Args:
        message: Parsed message (see mail_client.parse_message)
        receipt_parser: Callable turning attachment bytes into a parse result

    Returns:
        Email data dict with receipt_data per successfully decoded attachment,
        or None when the message has no PDF attachments
    """
    email_id = message["email_id"]
    pdfs = select_pdf_attachments(message.get("attachments", []))

    if not pdfs:
        logger.debug("No PDF attachments, skipping message", extra={"email_id": email_id})
        return None

    receipt_data = []
    attachment_errors = []

    for attachment in pdfs:
        filename = attachment.get("filename") or "attachment.pdf"
        context = {"email_id": email_id, "attachment": filename}

        result = receipt_parser(attachment.get("content") or b"")
        if not result["success"]:
            logger.warning(f"Could not read receipt: {result['error']}", extra=context)
            attachment_errors.append({"filename": filename, "error": result["error"]})
            continue

        receipt_data.append(
            {"filename": filename, **result["data"], "raw_text": result["raw_text"]}
        )
        logger.info(
            f"Extracted receipt: {result['data']['merchant_name']} "
            f"${result['data']['amount']:.2f}",
            extra=context,
        )

    return {
        "email_id": email_id,
        "subject": message.get("subject", ""),
        "date": message.get("date", ""),
        "sender": message.get("sender", ""),
        "attachments": [attachment.get("filename") for attachment in pdfs],
        "receipt_data": receipt_data,
        "attachment_errors": attachment_errors,
    }


def _parse_and_extract(message_id: str, raw: bytes) -> dict | None:
    return extract_message_receipts(parse_message(message_id, raw))


def fetch_raw_messages(mailbox) -> tuple[list, list]:
    """
    Fetch every message's raw bytes over one session, in mailbox order.

    Returns:
        (fetched, failures) where fetched is a list of (message_id, raw) and
        failures holds {email_id, error} for messages that could not be fetched
    """
    fetched = []
    failures = []

    for message_id in mailbox.list_message_ids():
        try:
            fetched.append((message_id, mailbox.fetch_raw(message_id)))
        except MailConnectionError as e:
            logger.error(f"Fetch failed: {e}", extra={"email_id": message_id})
            failures.append({"email_id": message_id, "error": str(e)})

    return fetched, failures


def parse_messages(fetched: list, workers: int = 4) -> tuple[list, list]:
    """
    Parse fetched messages concurrently and reassemble them in fetch order.

    Args:
        fetched: List of (message_id, raw) tuples
        workers: Thread pool size

    Returns:
        (emails, failures); emails holds only messages with PDF attachments
    """
    if not fetched:
        return [], []

    outcomes = [None] * len(fetched)
    failures_by_index = {}

    with ThreadPoolExecutor(max_workers=min(workers, len(fetched))) as executor:
        future_to_index = {
            executor.submit(_parse_and_extract, message_id, raw): index
            for index, (message_id, raw) in enumerate(fetched)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            message_id = fetched[index][0]
            try:
                outcomes[index] = future.result()
            except Exception as e:
                # Failure isolation: one bad message never aborts the batch
                logger.error(f"Message parsing failed: {e}", extra={"email_id": message_id})
                failures_by_index[index] = {"email_id": message_id, "error": str(e)}

    emails = [outcome for outcome in outcomes if outcome is not None]
    failures = [failures_by_index[index] for index in sorted(failures_by_index)]
    return emails, failures


def process_mailbox(
    user: str,
    password: str,
    host: str,
    port: int,
    mailbox_name: str = None,
    workers: int = None,
    mailbox_factory=ImapMailbox,
) -> dict:
    """
    Ingest receipts from every message in a mailbox.

    Args:
        user: IMAP login
        password: IMAP password
        host: IMAP server host
        port: IMAP server port
        mailbox_name: Mailbox to scan (defaults to EMAIL_MAILBOX)
        workers: Parsing thread pool size (defaults to INGESTION_WORKERS)
        mailbox_factory: Callable returning a scoped mailbox session

    Returns:
        Dict with emails (messages with PDF attachments, in fetch order),
        failures and total_messages

    Raises:
        MailConnectionError: If the session cannot be opened or listed
    """
    config = load_app_config()
    mailbox_name = mailbox_name or config.email_mailbox
    workers = workers or config.ingestion_workers

    with mailbox_factory(user, password, host, port, mailbox_name) as mailbox:
        fetched, fetch_failures = fetch_raw_messages(mailbox)

    logger.info(f"Fetched {len(fetched)} messages from {host} ({mailbox_name})")

    emails, parse_failures = parse_messages(fetched, workers=workers)
    failures = fetch_failures + parse_failures

    logger.info(
        f"Ingestion finished: {len(emails)} emails with PDF attachments, "
        f"{len(failures)} failures"
    )
    if not emails:
        logger.warning("No PDF attachments found in mailbox")

    return {
        "emails": emails,
        "failures": failures,
        "total_messages": len(fetched) + len(fetch_failures),
    }
