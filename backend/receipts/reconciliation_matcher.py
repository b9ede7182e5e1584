"""
Reconciliation Matcher

Matches bank statement transactions against ledger entries.

Algorithm (greedy first-fit):
    - Bank transactions are visited in input order
    - For each one, ledger entries are scanned in the order given (the ledger
      store returns them by purchase date, newest first)
    - The first unclaimed entry whose amount is within 0.01 and whose
      merchant name matches the transaction description is claimed
    - Claimed entries and transactions are tracked in index sets, so the
      inputs are never mutated

Everything left over ends up in ledger_only or bank_only; each input item
lands in exactly one of matches, ledger_only and bank_only.
"""

import logging
import re
from decimal import Decimal, InvalidOperation

from errors import ValidationError

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")
PREFIX_LENGTH = 5
MATCH_CONFIDENCE = "high"

LEDGER_ONLY_REASON = "No matching bank transaction found"
BANK_ONLY_REASON = "No matching ledger entry found"

NON_ALPHANUMERIC_RE = re.compile(r"[^a-z0-9]")


def normalize_text(value) -> str:
    """Lowercase and strip everything that is not a-z or 0-9."""
    return NON_ALPHANUMERIC_RE.sub("", str(value or "").lower())


def to_decimal(value) -> Decimal:
    """
    Convert an amount to Decimal via its string form.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Amount must be numeric, got {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Amount must be numeric, got {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Amount must be numeric, got {value!r}")
    return amount


def amounts_match(first, second, tolerance: Decimal = AMOUNT_TOLERANCE) -> bool:
    """True when the amounts differ by at most the tolerance."""
    return abs(to_decimal(first) - to_decimal(second)) <= tolerance


def descriptions_match(first, second) -> bool:
    """
    Fuzzy description comparison on normalized text.

    Matches when the texts are equal, one contains the other, or both are
    longer than five characters and one contains the other's first five.
    """
    norm_first = normalize_text(first)
    norm_second = normalize_text(second)

    if norm_first == norm_second:
        return True
    if norm_second in norm_first or norm_first in norm_second:
        return True
    if len(norm_first) > PREFIX_LENGTH and len(norm_second) > PREFIX_LENGTH:
        return (
            norm_second[:PREFIX_LENGTH] in norm_first
            or norm_first[:PREFIX_LENGTH] in norm_second
        )
    return False


def validate_bank_transactions(bank_transactions) -> list:
    """
    Check the compare payload before any matching happens.

    Raises:
        ValidationError: If the payload is not a list of transaction objects
                         with numeric amounts
    """
    if not isinstance(bank_transactions, list):
        raise ValidationError("Bank transactions array is required")

    for index, transaction in enumerate(bank_transactions):
        if not isinstance(transaction, dict):
            raise ValidationError(f"Bank transaction {index} must be an object")
        try:
            to_decimal(transaction.get("amount"))
        except ValidationError as e:
            raise ValidationError(f"Bank transaction {index}: {e}") from e

    return bank_transactions


def _total(amounts) -> float:
    return float(sum((to_decimal(amount) for amount in amounts), Decimal("0")).quantize(
        Decimal("0.01")
    ))


def compare_transactions(bank_transactions: list, ledger_entries: list) -> dict:
    """
    Partition bank transactions and ledger entries into matches and leftovers.

    Args:
        bank_transactions: Transactions with amount and description
        ledger_entries: Ledger entry dicts with amount and merchant_name,
                        in store order (purchase date, newest first)

    Returns:
        Dict with matches, ledger_only, bank_only and summary

    Raises:
        ValidationError: If bank_transactions is malformed
    """
    validate_bank_transactions(bank_transactions)

    matches = []
    claimed_ledger = set()
    claimed_bank = set()

    for bank_index, bank_tx in enumerate(bank_transactions):
        for ledger_index, ledger_entry in enumerate(ledger_entries):
            if ledger_index in claimed_ledger:
                continue

            if amounts_match(bank_tx["amount"], ledger_entry["amount"]) and descriptions_match(
                bank_tx.get("description"), ledger_entry.get("merchant_name")
            ):
                claimed_ledger.add(ledger_index)
                claimed_bank.add(bank_index)
                matches.append(
                    {
                        "bank_transaction": bank_tx,
                        "ledger_entry": ledger_entry,
                        "match_confidence": MATCH_CONFIDENCE,
                    }
                )
                break

    ledger_only = [
        {"ledger_entry": entry, "reason": LEDGER_ONLY_REASON}
        for index, entry in enumerate(ledger_entries)
        if index not in claimed_ledger
    ]
    bank_only = [
        {"bank_transaction": tx, "reason": BANK_ONLY_REASON}
        for index, tx in enumerate(bank_transactions)
        if index not in claimed_bank
    ]

    summary = {
        "total_matches": len(matches),
        "total_ledger_only": len(ledger_only),
        "total_bank_only": len(bank_only),
        "total_matched_amount": _total(m["bank_transaction"]["amount"] for m in matches),
        "total_ledger_amount": _total(item["ledger_entry"]["amount"] for item in ledger_only),
        "total_bank_amount": _total(item["bank_transaction"]["amount"] for item in bank_only),
    }

    logger.info(
        f"Reconciliation: {summary['total_matches']} matches, "
        f"{summary['total_ledger_only']} ledger only, {summary['total_bank_only']} bank only"
    )

    return {
        "matches": matches,
        "ledger_only": ledger_only,
        "bank_only": bank_only,
        "summary": summary,
    }
