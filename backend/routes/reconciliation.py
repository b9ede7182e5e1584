"""
Reconciliation Routes - Flask Blueprint

Handles bank statement reconciliation endpoints:
- Overview (ledger statistics and recent reconciliations)
- CSV statement upload
- Comparison against the ledger
- Reconciliation history

Routes are thin controllers that delegate to reconciliation_service.
"""

import logging

from flask import Blueprint, jsonify, request

from errors import ValidationError
from services import reconciliation_service

logger = logging.getLogger(__name__)

reconciliation_bp = Blueprint(
    "reconciliation", __name__, url_prefix="/api/reconciliation"
)


@reconciliation_bp.route("", methods=["GET"])
def get_overview():
    """
    Get reconciliation overview.

    Returns:
        Dict with ledger_stats and the 5 most recent reconciliations
    """
    try:
        return jsonify(reconciliation_service.get_overview())

    except Exception as e:
        logger.exception("Error fetching reconciliation data")
        return (
            jsonify(
                {"error": "Failed to fetch reconciliation data", "message": str(e)}
            ),
            500,
        )


@reconciliation_bp.route("/upload-statement", methods=["POST"])
def upload_statement():
    """
    Parse an uploaded CSV bank statement.

    Form data:
        statement (file): CSV file, at most MAX_UPLOAD_MB

    Returns:
        Dict with message and parsed transactions
    """
    # Form parsing raises 413 for oversize bodies
    upload = request.files.get("statement")

    try:
        result = reconciliation_service.parse_uploaded_statement(upload)
        return jsonify(result)

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        logger.exception("Error parsing CSV")
        return jsonify({"error": "Failed to parse CSV file"}), 500


@reconciliation_bp.route("/compare", methods=["POST"])
def compare():
    """
    Compare bank transactions with the ledger.

    Request body:
        bank_transactions (list): Transactions with amount and description

    Returns:
        Dict with matches, ledger_only, bank_only and summary
    """
    try:
        return jsonify(reconciliation_service.compare(request.get_json(silent=True) or {}))

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        logger.exception("Error comparing transactions")
        return jsonify({"error": "Failed to compare transactions"}), 500


@reconciliation_bp.route("/history", methods=["GET"])
def get_history():
    """Get up to 50 saved reconciliations, newest first."""
    try:
        return jsonify(reconciliation_service.get_history(limit=50))

    except Exception:
        logger.exception("Error fetching reconciliation history")
        return jsonify({"error": "Failed to fetch reconciliation history"}), 500


@reconciliation_bp.route("/save", methods=["POST"])
def save():
    """
    Save a reconciliation summary.

    Request body:
        summary (dict): Summary returned by /compare

    Returns:
        Dict with message and the new record id
    """
    try:
        return jsonify(reconciliation_service.save(request.get_json(silent=True) or {}))

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        logger.exception("Error saving reconciliation")
        return jsonify({"error": "Failed to save reconciliation"}), 500
