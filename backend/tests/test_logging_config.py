"""Tests for the ingestion logging configuration."""

import logging

from receipts.logging_config import StructuredFormatter, get_logger


def test_formatter_fills_missing_context():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

    output = StructuredFormatter("%(email_id)s|%(attachment)s|%(message)s").format(record)

    assert output == "None|None|hello"


def test_get_logger_writes_rotating_files(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))

    logger = get_logger("tests.ingestion_logging")
    logger.info("Parsed attachment", extra={"email_id": "101", "attachment": "receipt.pdf"})
    logger.error("Attachment failed", extra={"email_id": "102"})
    for handler in logger.handlers:
        handler.flush()

    all_logs = (tmp_path / "ingestion.log").read_text(encoding="utf-8")
    errors = (tmp_path / "ingestion_errors.log").read_text(encoding="utf-8")
    assert "[email:101 attachment:receipt.pdf] Parsed attachment" in all_logs
    assert "Attachment failed" in errors
    assert "Parsed attachment" not in errors

    # Handlers are attached once per logger
    assert get_logger("tests.ingestion_logging") is logger
    assert len(logger.handlers) == 3

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
