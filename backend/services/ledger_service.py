"""
Ledger Service - Business Logic

Orchestrates ledger operations including:
- Paginated, filtered listing
- Manual entry creation and editing with input validation
- Deletion and bulk clearing
- Summary statistics by category and month

Separates business logic from HTTP routing concerns.
"""

from datetime import date

from database import ledger as db_ledger
from database.models import DEFAULT_CATEGORY
from errors import NotFoundError, ValidationError

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

# ============================================================================
# Validation Helpers
# ============================================================================


def parse_amount(value) -> float:
    """
    Validate a ledger amount.

    Raises:
        ValidationError: If the amount is missing, not numeric or negative
    """
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError("amount is required and must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("amount is required and must be a number") from e
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValidationError("amount must be a finite number")
    if amount < 0:
        raise ValidationError("amount must be zero or greater")
    return round(amount, 2)


def parse_date(value) -> str:
    """Validate an ISO YYYY-MM-DD date string."""
    try:
        return date.fromisoformat(str(value)).isoformat()
    except ValueError as e:
        raise ValidationError(f"date must be YYYY-MM-DD, got {value!r}") from e


def clamp_page(page, limit) -> tuple[int, int]:
    page = max(1, page or 1)
    limit = max(1, min(MAX_PAGE_SIZE, limit or DEFAULT_PAGE_SIZE))
    return page, limit


# ============================================================================
# Ledger Retrieval
# ============================================================================


def list_entries(
    page: int = 1, limit: int = DEFAULT_PAGE_SIZE, search: str = "", category: str = ""
) -> dict:
    """Get a page of ledger entries with pagination metadata."""
    page, limit = clamp_page(page, limit)
    return db_ledger.get_ledger_entries(
        page=page, limit=limit, search=search or "", category=category or ""
    )


def get_entry(entry_id: int) -> dict:
    """
    Get one ledger entry.

    Raises:
        NotFoundError: If the entry does not exist
    """
    entry = db_ledger.get_ledger_entry(entry_id)
    if not entry:
        raise NotFoundError("Ledger entry not found")
    return entry


# ============================================================================
# Ledger Writes
# ============================================================================


def create_entry(data: dict) -> dict:
    """
    Create a manual ledger entry.

    Args:
        data: Request body with merchant_name, amount and optional date,
              category, description and email provenance fields

    Returns:
        Created entry dict

    Raises:
        ValidationError: If merchant_name or amount is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    merchant_name = str(data.get("merchant_name") or "").strip()
    if not merchant_name:
        raise ValidationError("merchant_name is required")

    amount = parse_amount(data.get("amount"))
    entry_date = parse_date(data["date"]) if data.get("date") else date.today().isoformat()

    return db_ledger.create_ledger_entry(
        merchant_name=merchant_name,
        amount=amount,
        date=entry_date,
        category=data.get("category") or DEFAULT_CATEGORY,
        description=data.get("description") or "",
        email_id=data.get("email_id"),
        email_subject=data.get("email_subject"),
        email_date=data.get("email_date"),
        receipt_text=data.get("receipt_text") or "",
    )


def update_entry(entry_id: int, data: dict) -> dict:
    """
    Edit a ledger entry's merchant, amount, date, category or description.

    Raises:
        ValidationError: If a supplied field is invalid
        NotFoundError: If the entry does not exist
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    fields = {
        name: data[name] for name in db_ledger.UPDATABLE_FIELDS if name in data
    }

    if "merchant_name" in fields:
        fields["merchant_name"] = str(fields["merchant_name"] or "").strip()
        if not fields["merchant_name"]:
            raise ValidationError("merchant_name cannot be empty")
    if "amount" in fields:
        fields["amount"] = parse_amount(fields["amount"])
    if "date" in fields:
        fields["date"] = parse_date(fields["date"])

    updated = db_ledger.update_ledger_entry(entry_id, fields)
    if not updated:
        raise NotFoundError("Ledger entry not found")
    return updated


def delete_entry(entry_id: int) -> dict:
    """
    Delete a ledger entry.

    Raises:
        NotFoundError: If the entry does not exist
    """
    if not db_ledger.delete_ledger_entry(entry_id):
        raise NotFoundError("Ledger entry not found")
    return {"message": "Ledger entry deleted successfully"}


def clear_all() -> dict:
    """Remove every ledger entry and email processing log row."""
    counts = db_ledger.clear_ledger()
    return {
        "message": "All ledger entries and email logs cleared successfully",
        **counts,
    }


# ============================================================================
# Statistics
# ============================================================================


def get_stats() -> dict:
    """Get overall, per-category and per-month ledger statistics."""
    return {
        "summary": db_ledger.get_ledger_summary(),
        "categories": db_ledger.get_category_summary(),
        "monthly": db_ledger.get_monthly_summary(limit=12),
    }
