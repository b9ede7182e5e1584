"""
Email Routes - Flask Blueprint

Handles receipt email ingestion endpoints:
- Mailbox processing (IMAP -> PDF receipts -> ledger)
- Connection testing
- Processing log, statistics and default configuration

Routes are thin controllers that delegate to email_service for business logic.
"""

import logging

from flask import Blueprint, jsonify, request

from errors import MailConnectionError, ValidationError
from services import email_service

logger = logging.getLogger(__name__)

email_bp = Blueprint("email", __name__, url_prefix="/api/email")


# ============================================================================
# Ingestion
# ============================================================================


@email_bp.route("/process", methods=["POST"])
def process_emails():
    """
    Process every receipt email in the mailbox and save valid receipts.

    Request body:
        user, password, host, port: IMAP connection parameters (all required)

    Returns:
        Dict with message, emails, failures, results and counts
    """
    try:
        result = email_service.process_emails(request.get_json(silent=True) or {})
        return jsonify(result)

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except MailConnectionError as e:
        logger.error(f"Mailbox unavailable: {e}")
        return jsonify({"error": "Failed to connect to mailbox", "message": str(e)}), 502
    except Exception as e:
        logger.exception("Error processing emails")
        return jsonify({"error": "Failed to process emails", "message": str(e)}), 500


@email_bp.route("/test-connection", methods=["POST"])
def test_connection():
    """
    Verify IMAP credentials by opening and closing a session.

    Returns:
        {success, message}
    """
    try:
        return jsonify(email_service.test_connection(request.get_json(silent=True) or {}))

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except MailConnectionError as e:
        logger.warning(f"Email connection test failed: {e}")
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Email connection failed",
                    "message": str(e),
                }
            ),
            502,
        )
    except Exception:
        logger.exception("Error testing email connection")
        return jsonify({"success": False, "error": "Email connection failed"}), 500


# ============================================================================
# Processing Log
# ============================================================================


@email_bp.route("/log", methods=["GET"])
def get_log():
    """Get the 50 most recent processing log rows."""
    try:
        return jsonify(email_service.get_processing_log(limit=50))

    except Exception:
        logger.exception("Error fetching email logs")
        return jsonify({"error": "Failed to fetch logs"}), 500


@email_bp.route("/stats", methods=["GET"])
def get_stats():
    """Get processing counts by status."""
    try:
        return jsonify(email_service.get_processing_stats())

    except Exception:
        logger.exception("Error fetching email stats")
        return jsonify({"error": "Failed to fetch stats"}), 500


@email_bp.route("/config", methods=["GET"])
def get_config():
    """Get the default IMAP host and port."""
    return jsonify(email_service.get_default_config())
