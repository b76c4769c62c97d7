"""Layer 3d: balance extraction.

Fallback used when amount classification found no balance: the last
amount-shaped token on the line is taken as the running balance, unless that
token is the transaction amount itself.
"""

from __future__ import annotations

import re
from decimal import Decimal

from ..models import ExtractedBalance
from ..patterns import NUMERAL
from .amounts import parse_amount

MAX_BALANCE = Decimal("100000000")

_BALANCE_TOKEN_RX = re.compile(rf"(?<![\w,.])({NUMERAL})(?=\s|$)")
_DIGITS_RX = re.compile(r"[^0-9.]")


def extract_balance(
    line: str, transaction_amount_text: str | None = None
) -> ExtractedBalance | None:
    """Return the trailing balance on ``line`` or ``None``.

    Example
    -------
    ``extract_balance("Purchase -125.50 2450.75", "-125.50")`` gives
    ``2450.75`` with confidence 80.
    """

    matches = list(_BALANCE_TOKEN_RX.finditer(line))
    if not matches:
        return None

    last = matches[-1]
    if transaction_amount_text:
        amount_digits = _DIGITS_RX.sub("", transaction_amount_text)
        if amount_digits and _DIGITS_RX.sub("", last.group(1)) == amount_digits:
            return None

    value = parse_amount(last.group(1))
    if value is None or value < 0 or value > MAX_BALANCE:
        return None

    return ExtractedBalance(
        value=value,
        original=last.group(0).strip(),
        confidence=80 if len(matches) > 1 else 60,
    )


__all__ = ["MAX_BALANCE", "extract_balance"]
