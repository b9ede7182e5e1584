"""Core test fixtures.

Provides reusable fixtures for the Flask test client, database cleanup,
external collaborator doubles and test data loading.

CRITICAL: All tests use a separate TEST database to prevent data loss.

The environment is configured BEFORE any application module is imported:
TESTING=true forces TEST_DATABASE_URL, which points at a throwaway SQLite
file, so tests NEVER touch the production database.
"""

import os
import tempfile
from email.message import EmailMessage
from pathlib import Path

import pytest
from flask import Flask
from sqlalchemy import text

# CRITICAL: Set test mode BEFORE importing database modules
_TEST_DIR = tempfile.mkdtemp(prefix="receipt_ledger_tests_")
os.environ["TESTING"] = "true"
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{Path(_TEST_DIR) / 'test.db'}"
os.environ["LOG_DIR"] = str(Path(_TEST_DIR) / "logs")
os.environ["RATE_LIMIT_ENABLED"] = "false"

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Tables emptied between tests
TABLES = ["ledger", "email_processing_log", "reconciliation_history"]


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def database_schema():
    """Create the schema in the test database once per session."""
    import database
    from config import DEFAULT_DATABASE_URL

    # SAFETY CHECK: Verify we're operating on the test database
    if database.DATABASE_URL == DEFAULT_DATABASE_URL:
        raise RuntimeError(
            "CRITICAL SAFETY VIOLATION: tests are pointed at the production database"
        )

    database.init_db()
    yield database.engine
    database.engine.dispose()


@pytest.fixture
def db_session(database_schema):
    """Fresh database session on the TEST database for each test."""
    from database.base import SessionLocal

    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clean_db(db_session):
    """Empty every table before the test runs.

    Returns:
        Session: Clean database session
    """
    for table in TABLES:
        db_session.execute(text(f"DELETE FROM {table}"))
    db_session.commit()

    return db_session


# ============================================================================
# FLASK TEST CLIENT FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def app(database_schema) -> Flask:
    """Flask app with test configuration.

    Returns:
        Flask: Configured Flask application instance
    """
    # Import app from app module (relative to backend directory)
    from app import app as flask_app

    flask_app.config["TESTING"] = True

    return flask_app


@pytest.fixture
def client(app: Flask):
    """Flask test client for making HTTP requests.

    Example:
        def test_health_endpoint(client):
            response = client.get('/api/health')
            assert response.status_code == 200
    """
    return app.test_client()


# ============================================================================
# EXTERNAL COLLABORATOR DOUBLES
# ============================================================================


class FakeMailbox:
    """In-memory stand-in for receipts.mail_client.ImapMailbox.

    Messages are raw RFC 822 bytes keyed by UID; UIDs listed in
    ``broken`` fail on fetch.
    """

    instances = []

    def __init__(self, messages, broken=(), connect_error=None):
        self.messages = dict(messages)
        self.broken = set(broken)
        self.connect_error = connect_error
        self.opened = False
        self.closed = False
        self.args = None

    def __call__(self, user, password, host, port, mailbox="INBOX"):
        self.args = (user, password, host, port, mailbox)
        return self

    def __enter__(self):
        if self.connect_error:
            raise self.connect_error
        self.opened = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    def list_message_ids(self):
        return list(self.messages)

    def fetch_raw(self, message_id):
        from errors import MailConnectionError

        if message_id in self.broken:
            raise MailConnectionError(f"Fetch failed for UID {message_id}")
        return self.messages[message_id]


@pytest.fixture
def fake_mailbox():
    """Factory building FakeMailbox instances usable as mailbox_factory."""
    return FakeMailbox


# ============================================================================
# TEST DATA HELPERS
# ============================================================================


def load_fixture(fixture_path: str) -> str:
    """Load a text fixture from the fixtures directory.

    Args:
        fixture_path: Relative path (e.g., 'receipts/walmart_receipt.txt')
    """
    file_path = FIXTURES_DIR / fixture_path

    if not file_path.exists():
        raise FileNotFoundError(f"Fixture file not found: {file_path}")

    return file_path.read_text(encoding="utf-8")


def build_email(
    subject="Here is the Receipt",
    attachments=(),
    date="Tue, 14 Oct 2025 09:30:00 -0400",
    sender="receipts@example.com",
) -> bytes:
    """Build raw email bytes with (filename, content_type, content) attachments."""
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = "me@example.com"
    if date:
        message["Date"] = date
    message.set_content("Receipt attached.")

    for filename, content_type, content in attachments:
        maintype, subtype = content_type.split("/", 1)
        message.add_attachment(
            content, maintype=maintype, subtype=subtype, filename=filename
        )

    return message.as_bytes()


@pytest.fixture
def walmart_receipt_text():
    """Text of a real Walmart receipt (WAL*MART header, $15.98 total)."""
    return load_fixture("receipts/walmart_receipt.txt")


@pytest.fixture
def bank_statement_csv():
    """CSV bank statement bytes with mixed signs and unusable rows."""
    return load_fixture("statements/bank_statement.csv").encode("utf-8")


@pytest.fixture
def email_builder():
    """Expose build_email to tests."""
    return build_email
