"""
Receipt Text Extractor

Turns raw receipt text (from a PDF attachment or a plain-text fallback) into a
best-effort structured receipt:

    {merchant_name, amount, date, category, description, is_valid}

Extraction never raises. Empty input yields is_valid=False with empty fields;
anything else yields is_valid=True even when nothing useful was found.
Whether a receipt is worth saving is decided later by the ledger writer.

Each heuristic cascade is an ordered rule list evaluated top to bottom,
first match wins:
- Merchant: Walmart variants -> Amazon variants -> "Order Summary"
- Amount: largest $D.DD under 10,000, else a number on/after a TOTAL line
- Date: YYYY-MM-DD -> MM/DD/YYYY -> MM-DD-YYYY -> M/D/YY(YY), else today
- Category: merchant rules, then keyword rules, else Retail
"""

import re
from datetime import date

from receipts.logging_config import get_logger

logger = get_logger(__name__)

MERCHANT_LINE_WINDOW = 15
MAX_RECEIPT_AMOUNT = 10000
EARLIEST_RECEIPT_DATE = date(2000, 1, 1)

UNKNOWN_MERCHANT = "Unknown Merchant"
DEFAULT_CATEGORY = "Retail"
FALLBACK_DESCRIPTION = "Receipt processing"

WALMART = "WALMART"
AMAZON = "Amazon"
ONLINE_STORE = "Online Store"

WALMART_KEYWORDS = (
    "wal*mart",
    "wal-mart",
    "walmart",
    "walmart.com",
    "walmart store",
    "walmart supercenter",
)
AMAZON_KEYWORDS = ("amazon", "amazon.com", "amazon order", "amazon receipt")
AMAZON_CONTEXT_KEYWORDS = ("amazon", "amazon.com", "amazon order")

CURRENCY_AMOUNT_RE = re.compile(r"\$(\d+\.\d{2})")
BARE_AMOUNT_RE = re.compile(r"(\d+\.\d{2})")


def _contains_any(*keywords):
    return lambda value: any(keyword in value for keyword in keywords)


def _order_summary_merchant(text_lower: str) -> str:
    if any(keyword in text_lower for keyword in AMAZON_CONTEXT_KEYWORDS):
        return AMAZON
    return ONLINE_STORE


# ============================================================================
# RULE TABLES
# ============================================================================

# (rule name, predicate on the lowercased line, merchant or resolver(text_lower))
LINE_MERCHANT_RULES = [
    ("walmart", _contains_any(*WALMART_KEYWORDS), WALMART),
    ("amazon", _contains_any(*AMAZON_KEYWORDS), AMAZON),
    ("order_summary", _contains_any("order summary"), _order_summary_merchant),
]

# Applied to the whole lowercased text when the line window found nothing
FULL_TEXT_MERCHANT_RULES = [
    ("walmart", _contains_any("walmart", "wal*mart", "wal-mart"), WALMART),
    ("amazon", _contains_any("amazon"), AMAZON),
]

# (pattern name, regex, capture group order)
DATE_PATTERNS = [
    ("YYYY-MM-DD", re.compile(r"(\d{4})-(\d{2})-(\d{2})"), ("year", "month", "day")),
    ("MM/DD/YYYY", re.compile(r"(\d{2})/(\d{2})/(\d{4})"), ("month", "day", "year")),
    ("MM-DD-YYYY", re.compile(r"(\d{2})-(\d{2})-(\d{4})"), ("month", "day", "year")),
    (
        "M/D/YY",
        re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4})"),
        ("month", "day", "year"),
    ),
]

# (predicate(merchant, text_lower), category)
CATEGORY_RULES = [
    (lambda merchant, text_lower: merchant == WALMART, "Groceries"),
    (lambda merchant, text_lower: merchant == AMAZON, "Online Shopping"),
    (
        lambda merchant, text_lower: _contains_any("gas", "fuel", "shell")(text_lower),
        "Transportation",
    ),
    (
        lambda merchant, text_lower: _contains_any("restaurant", "food", "dining")(
            text_lower
        ),
        "Dining",
    ),
]


# ============================================================================
# FIELD DETECTORS
# ============================================================================


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def detect_merchant(lines: list[str], text: str) -> str:
    """
    Identify the merchant from the first lines, then from the full text.

    Args:
        lines: Trimmed non-empty lines of the receipt
        text: Full receipt text

    Returns:
        Merchant name, or "Unknown Merchant"
    """
    text_lower = text.lower()

    for index, line in enumerate(lines[:MERCHANT_LINE_WINDOW]):
        line_lower = line.lower()
        for rule_name, predicate, result in LINE_MERCHANT_RULES:
            if predicate(line_lower):
                merchant = result(text_lower) if callable(result) else result
                logger.debug(
                    f"Merchant '{merchant}' matched rule '{rule_name}' on line {index}"
                )
                return merchant

    for rule_name, predicate, merchant in FULL_TEXT_MERCHANT_RULES:
        if predicate(text_lower):
            logger.debug(f"Merchant '{merchant}' matched full-text rule '{rule_name}'")
            return merchant

    return UNKNOWN_MERCHANT


def _in_amount_range(amount: float) -> bool:
    return 0 < amount < MAX_RECEIPT_AMOUNT


def detect_amount(lines: list[str], text: str) -> float:
    """
    Pick the receipt total.

    The largest $D.DD figure wins, since receipts list line items before the
    total. Without currency-formatted figures, a bare D.DD on a TOTAL line
    (or the line after it) is used.

    Returns:
        Amount in currency units, 0 when nothing qualifies
    """
    amounts = [
        value
        for value in (float(match) for match in CURRENCY_AMOUNT_RE.findall(text))
        if _in_amount_range(value)
    ]
    if amounts:
        return max(amounts)

    for index, line in enumerate(lines):
        if "TOTAL" not in line.upper():
            continue

        candidates = [line]
        if index + 1 < len(lines):
            candidates.append(lines[index + 1])

        for candidate in candidates:
            match = BARE_AMOUNT_RE.search(candidate)
            if match and _in_amount_range(float(match.group(1))):
                return float(match.group(1))

    return 0.0


def _expand_year(year_text: str) -> int:
    year = int(year_text)
    if len(year_text) == 2:
        return 2000 + year if year < 50 else 1900 + year
    return year


def detect_date(text: str, today: date | None = None) -> str:
    """
    Find the purchase date as an ISO string.

    Patterns are tried in DATE_PATTERNS order; the first occurrence of a
    pattern is accepted when it is a real date after 2000-01-01 and not in
    the future.

    Args:
        text: Full receipt text
        today: Reference date (defaults to the current date)

    Returns:
        YYYY-MM-DD string; today's date when no pattern validates
    """
    today = today or date.today()

    for pattern_name, pattern, order in DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        parts = dict(zip(order, match.groups()))
        try:
            candidate = date(
                _expand_year(parts["year"]), int(parts["month"]), int(parts["day"])
            )
        except ValueError:
            continue

        if EARLIEST_RECEIPT_DATE < candidate <= today:
            logger.debug(f"Date {candidate.isoformat()} matched pattern {pattern_name}")
            return candidate.isoformat()

    return today.isoformat()


def assign_category(merchant: str, text: str) -> str:
    """Assign a category from CATEGORY_RULES, defaulting to Retail."""
    text_lower = text.lower()
    for predicate, category in CATEGORY_RULES:
        if predicate(merchant, text_lower):
            return category
    return DEFAULT_CATEGORY


def build_description(merchant: str, amount: float) -> str:
    if merchant and amount > 0:
        return f"Purchase from {merchant} for ${amount:.2f}"
    return FALLBACK_DESCRIPTION


# ============================================================================
# PUBLIC API
# ============================================================================


def empty_receipt() -> dict:
    """Structured result for input with no content."""
    return {
        "merchant_name": "",
        "amount": 0.0,
        "date": "",
        "category": "",
        "description": "",
        "is_valid": False,
    }


def extract_receipt_data(text: str, today: date | None = None) -> dict:
    """
    Extract structured purchase data from receipt text.

    Args:
        text: Raw receipt text, possibly empty
        today: Reference date for date validation and the date fallback

    Returns:
        Dict with merchant_name, amount, date, category, description, is_valid
    """
    if not text or not text.strip():
        logger.debug("Empty receipt text, nothing to extract")
        return empty_receipt()

    lines = split_lines(text)
    if not lines:
        return empty_receipt()

    merchant = detect_merchant(lines, text)
    amount = detect_amount(lines, text)
    receipt_date = detect_date(text, today=today)
    category = assign_category(merchant, text)

    result = {
        "merchant_name": merchant,
        "amount": amount,
        "date": receipt_date,
        "category": category,
        "description": build_description(merchant, amount),
        "is_valid": True,
    }

    logger.debug(
        f"Extracted receipt: merchant={merchant} amount={amount:.2f} "
        f"date={receipt_date} category={category}"
    )
    return result
