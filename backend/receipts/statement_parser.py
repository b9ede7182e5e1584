"""
Bank Statement CSV Parser

Parses a bank statement export into bank transactions:

    {date, description, amount, original_row}

The format is deliberately simple: the first line holds the headers, every
other non-blank line is split positionally on commas, and double quotes are
removed from headers and values. Quoted fields containing commas are not
supported.

Column names differ between banks, so each field resolves through an ordered
alias list; the first alias with a non-empty value wins. Rows whose amount is
zero or not numeric are dropped and the sign of the amount is discarded.
"""

import logging
import re

from errors import ParseError

logger = logging.getLogger(__name__)

AMOUNT_ALIASES = ("amount", "Amount", "AMOUNT", "Transaction Amount")
DATE_ALIASES = ("date", "Date", "DATE", "Transaction Date")
DESCRIPTION_ALIASES = (
    "description",
    "Description",
    "DESC",
    "Transaction Description",
)

# Leading numeric prefix, as read by a lenient float parser ("12.50 USD" -> 12.5)
LEADING_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _clean(value: str) -> str:
    return value.strip().replace('"', "")


def resolve_field(row: dict, aliases: tuple, default: str = "") -> str:
    """Return the first non-empty value among the alias columns."""
    for alias in aliases:
        value = row.get(alias)
        if value:
            return value
    return default


def parse_amount(value: str) -> float | None:
    """
    Read the leading number of a value.

    Returns:
        The parsed number, or None when the value does not start with one
    """
    match = LEADING_NUMBER_RE.match(value.strip())
    if not match:
        return None
    return float(match.group(0))


def parse_statement(content: bytes) -> list:
    """
    Parse CSV bank statement bytes into bank transactions.

    Args:
        content: Uploaded file content

    Returns:
        List of transactions in file order

    Raises:
        ParseError: If the content is not UTF-8 text
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"Statement is not valid UTF-8 text: {e}") from e

    lines = text.split("\n")
    headers = [_clean(header) for header in lines[0].split(",")]

    transactions = []
    dropped = 0

    for line in lines[1:]:
        if not line.strip():
            continue

        values = [_clean(value) for value in line.split(",")]
        row = {
            header: values[index] if index < len(values) else ""
            for index, header in enumerate(headers)
        }

        amount = parse_amount(resolve_field(row, AMOUNT_ALIASES, "0"))
        if amount is None or amount == 0:
            dropped += 1
            continue

        transactions.append(
            {
                "date": resolve_field(row, DATE_ALIASES),
                "description": resolve_field(row, DESCRIPTION_ALIASES).strip(),
                "amount": abs(amount),
                "original_row": row,
            }
        )

    logger.info(
        f"Parsed {len(transactions)} transactions from statement ({dropped} rows dropped)"
    )
    return transactions
