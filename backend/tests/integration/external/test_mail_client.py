"""Integration tests for the IMAP mail source.

imaplib.IMAP4_SSL is replaced with a MagicMock; message parsing runs on real
RFC 822 bytes built with the email package.
"""

import imaplib
from email.message import EmailMessage
from unittest.mock import MagicMock, patch

import pytest

from errors import MailConnectionError
from receipts.mail_client import ImapMailbox, parse_message

# ============================================================================
# MESSAGE PARSING
# ============================================================================


def test_parse_message_headers_and_attachments(email_builder):
    raw = email_builder(
        attachments=[
            ("receipt.pdf", "application/pdf", b"%PDF-1.4 data"),
            ("logo.png", "image/png", b"\x89PNG"),
        ]
    )

    message = parse_message("42", raw)

    assert message["email_id"] == "42"
    assert message["subject"] == "Here is the Receipt"
    assert message["date"] == "2025-10-14T13:30:00+00:00"
    assert message["sender"] == "receipts@example.com"
    assert [a["filename"] for a in message["attachments"]] == ["receipt.pdf", "logo.png"]
    assert message["attachments"][0]["content_type"] == "application/pdf"
    assert message["attachments"][0]["content"] == b"%PDF-1.4 data"


def test_parse_message_without_attachments(email_builder):
    message = parse_message("7", email_builder(attachments=[]))

    assert message["attachments"] == []


def test_parse_message_nameless_inline_pdf():
    message = EmailMessage()
    message["Subject"] = "Your receipt"
    message.set_content("Receipt below.")
    message.add_alternative("<p>Receipt below.</p>", subtype="html")
    message.add_attachment(
        b"WALMART $15.98", maintype="application", subtype="pdf", disposition="inline"
    )

    parsed = parse_message("9", message.as_bytes())

    assert parsed["attachments"] == [
        {
            "filename": "attachment",
            "content_type": "application/pdf",
            "content": b"WALMART $15.98",
        }
    ]


def test_parse_message_without_date(email_builder):
    message = parse_message("8", email_builder(date=""))

    assert message["date"] == ""


# ============================================================================
# SESSION LIFECYCLE
# ============================================================================


@patch("receipts.mail_client.imaplib.IMAP4_SSL")
def test_session_connects_and_logs_out(mock_imap_cls):
    imap = mock_imap_cls.return_value
    imap.select.return_value = ("OK", [b"3"])

    with ImapMailbox("me", "secret", "imap.example.com", 993) as mailbox:
        assert mailbox is not None

    mock_imap_cls.assert_called_once_with("imap.example.com", 993)
    imap.login.assert_called_once_with("me", "secret")
    imap.select.assert_called_once_with("INBOX", readonly=True)
    imap.logout.assert_called_once()


@patch("receipts.mail_client.imaplib.IMAP4_SSL")
def test_session_logs_out_when_body_raises(mock_imap_cls):
    imap = mock_imap_cls.return_value
    imap.select.return_value = ("OK", [b"0"])

    with pytest.raises(RuntimeError):
        with ImapMailbox("me", "secret", "imap.example.com", 993):
            raise RuntimeError("boom")

    imap.logout.assert_called_once()


@patch("receipts.mail_client.imaplib.IMAP4_SSL")
def test_login_failure_raises_mail_connection_error(mock_imap_cls):
    imap = mock_imap_cls.return_value
    imap.login.side_effect = imaplib.IMAP4.error("AUTHENTICATIONFAILED")

    with pytest.raises(MailConnectionError, match="AUTHENTICATIONFAILED"):
        with ImapMailbox("me", "wrong", "imap.example.com", 993):
            pass

    imap.logout.assert_called_once()


@patch("receipts.mail_client.imaplib.IMAP4_SSL")
def test_network_failure_raises_mail_connection_error(mock_imap_cls):
    mock_imap_cls.side_effect = OSError("Connection refused")

    with pytest.raises(MailConnectionError, match="Connection refused"):
        ImapMailbox("me", "secret", "imap.example.com", 993).connect()


@patch("receipts.mail_client.imaplib.IMAP4_SSL")
def test_select_failure_raises(mock_imap_cls):
    mock_imap_cls.return_value.select.return_value = ("NO", [b"Mailbox doesn't exist"])

    with pytest.raises(MailConnectionError, match="Could not open mailbox"):
        ImapMailbox("me", "secret", "imap.example.com", 993, "Receipts").connect()


# ============================================================================
# LISTING AND FETCHING
# ============================================================================


def _connected_mailbox():
    mailbox = ImapMailbox("me", "secret", "imap.example.com", 993)
    mailbox._imap = MagicMock()
    return mailbox


def test_list_message_ids():
    mailbox = _connected_mailbox()
    mailbox._imap.uid.return_value = ("OK", [b"101 102 103"])

    assert mailbox.list_message_ids() == ["101", "102", "103"]
    mailbox._imap.uid.assert_called_once_with("SEARCH", None, "ALL")


def test_list_message_ids_empty_mailbox():
    mailbox = _connected_mailbox()
    mailbox._imap.uid.return_value = ("OK", [b""])

    assert mailbox.list_message_ids() == []


def test_fetch_raw_uses_peek():
    mailbox = _connected_mailbox()
    mailbox._imap.uid.return_value = ("OK", [(b"1 (UID 101 BODY[] {5}", b"hello"), b")"])

    assert mailbox.fetch_raw("101") == b"hello"
    mailbox._imap.uid.assert_called_once_with("FETCH", "101", "(BODY.PEEK[])")


def test_fetch_message_parses_body(email_builder):
    mailbox = _connected_mailbox()
    raw = email_builder(attachments=[("receipt.pdf", "application/pdf", b"%PDF-1.4")])
    mailbox._imap.uid.return_value = ("OK", [(b"1 (UID 101 BODY[] {5}", raw), b")"])

    message = mailbox.fetch_message("101")

    assert message["email_id"] == "101"
    assert [a["filename"] for a in message["attachments"]] == ["receipt.pdf"]


def test_fetch_raw_without_body_raises():
    mailbox = _connected_mailbox()
    mailbox._imap.uid.return_value = ("OK", [None])

    with pytest.raises(MailConnectionError, match="No message body"):
        mailbox.fetch_raw("101")


def test_fetch_raw_socket_error_raises():
    mailbox = _connected_mailbox()
    mailbox._imap.uid.side_effect = OSError("reset by peer")

    with pytest.raises(MailConnectionError):
        mailbox.fetch_raw("101")


def test_operations_require_connection():
    with pytest.raises(MailConnectionError, match="not connected"):
        ImapMailbox("me", "secret", "imap.example.com").list_message_ids()
