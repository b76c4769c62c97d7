"""Layer 4: transaction validation and confidence scoring.

Each assembled :class:`~statement_parser.models.Transaction` is checked
against six independent factors. The score is the literal sum of the weights
of the factors that hold, so it is always an integer in ``[0, 100]``.
"""

from __future__ import annotations

import re
from datetime import date

from .models import ConfidenceFactors, ParsedTransaction, Transaction

# factor name -> (weight, issue text or None)
CONFIDENCE_WEIGHTS: dict[str, tuple[int, str | None]] = {
    "has_valid_date": (30, "Invalid or missing date"),
    "has_amount": (25, "No transaction amount found"),
    "has_description": (15, "Missing or invalid description"),
    "has_balance": (10, None),
    "amount_format_valid": (10, "Amount format is invalid"),
    "date_in_reasonable_range": (10, "Date is outside reasonable range"),
}

# Order in which issues are reported.
_ISSUE_ORDER = (
    "has_valid_date",
    "has_amount",
    "has_description",
    "date_in_reasonable_range",
    "amount_format_valid",
)

REASONABLE_RANGE_YEARS = 5

_ISO_RX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ALPHA_RX = re.compile(r"[A-Za-z]")


def _parse_iso(value: str) -> date | None:
    if not value or not _ISO_RX.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _years_before(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return d.replace(year=d.year - years, day=28)


def is_date_reasonable(value: date, *, today: date) -> bool:
    """Not after ``today`` and not more than five years before it."""

    return _years_before(today, REASONABLE_RANGE_YEARS) <= value <= today


def calculate_confidence_factors(
    transaction: Transaction, *, today: date | None = None
) -> ConfidenceFactors:
    today = today or date.today()
    parsed_date = _parse_iso(transaction.date)

    amounts = [a for a in (transaction.debit_amount, transaction.credit_amount) if a is not None]
    description = transaction.description or ""

    return ConfidenceFactors(
        has_valid_date=parsed_date is not None,
        has_amount=any(a != 0 for a in amounts),
        has_description=len(description) >= 3 and bool(_ALPHA_RX.search(description)),
        has_balance=transaction.balance is not None and transaction.balance >= 0,
        amount_format_valid=all(a >= 0 for a in amounts),
        date_in_reasonable_range=(
            parsed_date is not None and is_date_reasonable(parsed_date, today=today)
        ),
    )


def calculate_confidence_score(factors: ConfidenceFactors) -> int:
    return sum(CONFIDENCE_WEIGHTS[name][0] for name, held in factors.as_mapping().items() if held)


def validate_transaction(
    transaction: Transaction, *, today: date | None = None
) -> ParsedTransaction:
    """Score ``transaction`` and list the human-readable issues found.

    Example
    -------
    A complete, recent transaction with a balance scores ``100`` with no
    issues; dropping the balance costs 10 points but adds no issue.
    """

    factors = calculate_confidence_factors(transaction, today=today)
    held = factors.as_mapping()
    issues = tuple(
        CONFIDENCE_WEIGHTS[name][1] for name in _ISSUE_ORDER if not held[name]
    )
    return ParsedTransaction(
        transaction=transaction,
        confidence=calculate_confidence_score(factors),
        factors=factors,
        issues=issues,
    )


def is_valid_transaction(
    parsed: ParsedTransaction, min_confidence: int = 60, *, strict: bool = False
) -> bool:
    """Return whether ``parsed`` is acceptable.

    A valid date and an amount are required regardless of score. With
    ``strict`` any issue at all rejects the transaction.
    """

    if parsed.confidence < min_confidence:
        return False
    if not (parsed.factors.has_valid_date and parsed.factors.has_amount):
        return False
    if strict and parsed.issues:
        return False
    return True


__all__ = [
    "CONFIDENCE_WEIGHTS",
    "REASONABLE_RANGE_YEARS",
    "calculate_confidence_factors",
    "calculate_confidence_score",
    "is_date_reasonable",
    "is_valid_transaction",
    "validate_transaction",
]
