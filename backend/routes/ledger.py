"""
Ledger Routes - Flask Blueprint

Handles all ledger endpoints:
- Paginated listing with search and category filter
- Single entry retrieval, creation, update and deletion
- Bulk clear of ledger and email processing log
- Summary statistics

Routes are thin controllers that delegate to ledger_service for business logic.
"""

import logging

from flask import Blueprint, jsonify, request

from errors import NotFoundError, ValidationError
from services import ledger_service

logger = logging.getLogger(__name__)

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/ledger")


# ============================================================================
# Ledger Retrieval
# ============================================================================


@ledger_bp.route("", methods=["GET"])
def list_ledger():
    """
    Get a page of ledger entries, newest first.

    Query params:
        page (int): Page number (default: 1)
        limit (int): Items per page (default: 50, max 500)
        search (str): Substring of merchant, description or email subject
        category (str): Exact category

    Returns:
        Dict with ledger list and pagination
    """
    try:
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", ledger_service.DEFAULT_PAGE_SIZE, type=int)

        result = ledger_service.list_entries(
            page=page,
            limit=limit,
            search=request.args.get("search", ""),
            category=request.args.get("category", ""),
        )
        return jsonify(result)

    except Exception:
        logger.exception("Error fetching ledger")
        return jsonify({"error": "Failed to fetch ledger entries"}), 500


@ledger_bp.route("/<int:entry_id>", methods=["GET"])
def get_ledger_entry(entry_id):
    """Get a single ledger entry."""
    try:
        return jsonify(ledger_service.get_entry(entry_id))

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        logger.exception(f"Error fetching ledger entry {entry_id}")
        return jsonify({"error": "Failed to fetch ledger entry"}), 500


# ============================================================================
# Ledger Writes
# ============================================================================


@ledger_bp.route("", methods=["POST"])
def create_ledger_entry():
    """
    Create a manual ledger entry.

    Request body:
        merchant_name (str): Required
        amount (number): Required, zero or greater
        date (str): YYYY-MM-DD (default: today)
        category (str): Default 'Retail'
        description (str): Optional

    Returns:
        201 with the created entry
    """
    try:
        entry = ledger_service.create_entry(request.get_json(silent=True) or {})
        return jsonify(entry), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        logger.exception("Error creating ledger entry")
        return jsonify({"error": "Failed to create ledger entry"}), 500


@ledger_bp.route("/<int:entry_id>", methods=["PUT"])
def update_ledger_entry(entry_id):
    """
    Update a ledger entry.

    Request body:
        merchant_name, amount, date, category, description (all optional)

    Returns:
        Updated entry
    """
    try:
        entry = ledger_service.update_entry(
            entry_id, request.get_json(silent=True) or {}
        )
        return jsonify(entry)

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        logger.exception(f"Error updating ledger entry {entry_id}")
        return jsonify({"error": "Failed to update ledger entry"}), 500


@ledger_bp.route("/<int:entry_id>", methods=["DELETE"])
def delete_ledger_entry(entry_id):
    """Delete a ledger entry."""
    try:
        return jsonify(ledger_service.delete_entry(entry_id))

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        logger.exception(f"Error deleting ledger entry {entry_id}")
        return jsonify({"error": "Failed to delete ledger entry"}), 500


@ledger_bp.route("/clear/all", methods=["DELETE"])
def clear_ledger():
    """Delete all ledger entries and email processing log rows."""
    try:
        return jsonify(ledger_service.clear_all())

    except Exception:
        logger.exception("Error clearing ledger")
        return jsonify({"error": "Failed to clear ledger entries"}), 500


# ============================================================================
# Statistics
# ============================================================================


@ledger_bp.route("/stats/summary", methods=["GET"])
def ledger_stats():
    """
    Get ledger statistics.

    Returns:
        Dict with summary, categories (by total, desc) and monthly (last 12)
    """
    try:
        return jsonify(ledger_service.get_stats())

    except Exception:
        logger.exception("Error fetching ledger stats")
        return jsonify({"error": "Failed to fetch ledger statistics"}), 500
