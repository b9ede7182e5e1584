"""
IMAP Mail Source

Scoped IMAP session used by receipt ingestion. The session is a context
manager: it connects and selects the mailbox on entry and logs out on exit,
so a connection never outlives the ingestion call that opened it.

    with ImapMailbox(user, password, host, port) as mailbox:
        for message_id in mailbox.list_message_ids():
            raw = mailbox.fetch_raw(message_id)
            message = parse_message(message_id, raw)

The mailbox is opened read-only and bodies are fetched with BODY.PEEK so
ingestion never changes \\Seen flags.
"""

import imaplib
from datetime import UTC
from email import message_from_bytes, policy
from email.utils import parsedate_to_datetime

from errors import MailConnectionError
from receipts.logging_config import get_logger

logger = get_logger(__name__)


def _format_email_date(value) -> str:
    if not value:
        return ""
    try:
        parsed = parsedate_to_datetime(str(value))
    except (TypeError, ValueError):
        return ""
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.isoformat()


def parse_message(message_id: str, raw: bytes) -> dict:
    """
    Parse a raw RFC 822 message into headers and attachments.

    Args:
        message_id: Mail source identifier (IMAP UID)
        raw: Full message bytes

    Returns:
        Dict with email_id, subject, date (ISO, UTC), sender and attachments
        (filename, content_type, content) for every attached part
    """
    message = message_from_bytes(raw, policy=policy.default)

    attachments = []
    for part in message.walk():
        if part.is_multipart():
            continue
        # Unnamed inline text parts are the message body; every other leaf
        # part, including a nameless inline PDF, is an attachment
        if (
            part.get_content_maintype() == "text"
            and part.get_content_disposition() != "attachment"
            and not part.get_filename()
        ):
            continue
        attachments.append(
            {
                "filename": part.get_filename() or "attachment",
                "content_type": part.get_content_type(),
                "content": part.get_payload(decode=True) or b"",
            }
        )

    return {
        "email_id": str(message_id),
        "subject": str(message["subject"] or ""),
        "date": _format_email_date(message["date"]),
        "sender": str(message["from"] or ""),
        "attachments": attachments,
    }


class ImapMailbox:
    """Read-only IMAP session over TLS, scoped with a ``with`` block."""

    def __init__(
        self,
        user: str,
        password: str,
        host: str,
        port: int = 993,
        mailbox: str = "INBOX",
    ):
        self.user = user
        self.password = password
        self.host = host
        self.port = int(port)
        self.mailbox = mailbox
        self._imap = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def connect(self):
        """
        Open the TLS connection, log in and select the mailbox.

        Raises:
            MailConnectionError: If any step fails
        """
        try:
            self._imap = imaplib.IMAP4_SSL(self.host, self.port)
            self._imap.login(self.user, self.password)
            typ, data = self._imap.select(self.mailbox, readonly=True)
        except (imaplib.IMAP4.error, OSError) as e:
            self.close()
            raise MailConnectionError(
                f"Could not connect to {self.host}:{self.port}: {e}"
            ) from e

        if typ != "OK":
            self.close()
            raise MailConnectionError(f"Could not open mailbox {self.mailbox}: {data}")

        logger.info(f"Connected to {self.host}:{self.port} ({self.mailbox})")

    def close(self):
        """Log out and drop the connection; safe to call more than once."""
        if self._imap is None:
            return
        try:
            self._imap.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.warning(f"IMAP logout failed: {e}")
        finally:
            self._imap = None

    def _require_connection(self):
        if self._imap is None:
            raise MailConnectionError("Mailbox is not connected")
        return self._imap

    def list_message_ids(self) -> list[str]:
        """List every message UID in the selected mailbox."""
        imap = self._require_connection()
        try:
            typ, data = imap.uid("SEARCH", None, "ALL")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailConnectionError(f"Message search failed: {e}") from e

        if typ != "OK":
            raise MailConnectionError(f"Message search failed: {data}")

        if not data or not data[0]:
            return []
        return [uid.decode() for uid in data[0].split()]

    def fetch_raw(self, message_id: str) -> bytes:
        """
        Fetch the full raw bytes of one message.

        Raises:
            MailConnectionError: If the fetch fails or returns no body
        """
        imap = self._require_connection()
        try:
            typ, data = imap.uid("FETCH", str(message_id), "(BODY.PEEK[])")
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailConnectionError(f"Fetch failed for UID {message_id}: {e}") from e

        if typ != "OK":
            raise MailConnectionError(f"Fetch failed for UID {message_id}: {data}")

        for item in data or []:
            if isinstance(item, tuple) and len(item) >= 2:
                return item[1]

        raise MailConnectionError(f"No message body returned for UID {message_id}")

    def fetch_message(self, message_id: str) -> dict:
        """Fetch and parse one message (headers, body, attachments)."""
        return parse_message(message_id, self.fetch_raw(message_id))
