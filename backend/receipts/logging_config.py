"""Centralized logging configuration for the receipt ingestion workflow.

This module provides structured logging with context fields for mailbox
ingestion. Logs are written to both console and rotating files.

Usage:
    from receipts.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Parsing attachment", extra={'email_id': uid, 'attachment': name})
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from config import load_app_config


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds context fields to log records.

    Supports the following context fields via extra={} parameter:
    - email_id: Mail source message identifier
    - attachment: Attachment filename being processed
    """

    def format(self, record):
        """Format log record with context fields."""
        record.email_id = getattr(record, "email_id", None)
        record.attachment = getattr(record, "attachment", None)

        return super().format(record)


def get_log_dir() -> str:
    """Directory for ingestion log files (LOG_DIR)."""
    return load_app_config().log_dir


def get_logger(name: str) -> logging.Logger:
    """Get configured logger for ingestion operations.

    Creates a logger with:
    - Console handler (INFO level)
    - Rotating file handler for all logs (DEBUG level)
    - Separate error file handler (ERROR level)

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logging.Logger instance
    """
    logger = logging.getLogger(name)

    # Skip if already configured (prevents duplicate handlers)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    log_dir = get_log_dir()
    os.makedirs(log_dir, exist_ok=True)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(
        StructuredFormatter("[%(levelname)s] [email:%(email_id)s] %(message)s")
    )
    logger.addHandler(console)

    file_format = (
        "[%(asctime)s] [%(levelname)s] [%(name)s] "
        "[email:%(email_id)s attachment:%(attachment)s] %(message)s"
    )

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "ingestion.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB per file
        backupCount=30,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(StructuredFormatter(file_format))
    logger.addHandler(file_handler)

    error_handler = RotatingFileHandler(
        os.path.join(log_dir, "ingestion_errors.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=30,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(StructuredFormatter(file_format))
    logger.addHandler(error_handler)

    return logger
