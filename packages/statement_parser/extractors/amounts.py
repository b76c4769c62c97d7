"""Layer 3b: amount extraction and classification.

Bank statement rows put the transaction amount and the running balance at the
right edge of the line. Extraction therefore:

1. removes the date text, so its digits cannot be read as money;
2. scans with amount shapes ordered by specificity (a CR/DR-marked amount is
   the strongest signal, a bare decimal the weakest), discarding any weaker
   match that overlaps a stronger one;
3. keeps only the last few matches by position. Earlier numeric tokens, such
   as masked card or account numbers, fall away without needing a pattern
   to exclude them.

``classify_amounts`` then splits the retained matches into transaction amount
and balance, and ``resolve_direction`` decides debit vs credit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ..keywords import DEFAULT_SIGN_KEYWORDS, SignKeywords
from ..logging_setup import get_logger
from ..models import ExtractedAmount, to_money
from ..patterns import CURRENCY_SYMBOLS, NUMERAL

logger = get_logger("statement_parser.extractors.amounts")

MAX_AMOUNT = Decimal("10000000")
# Right-edge window: transaction amount(s) plus balance.
MAX_RIGHT_EDGE_AMOUNTS = 3

_CUR = f"[{CURRENCY_SYMBOLS}]"
# Token boundaries: not glued to digits, separators or letters on either side.
_L = r"(?<![\w,.])"
_R = r"(?![\w,]|\.\d)"

_COMMA_DECIMAL = r"\d{1,3}(?:,\d{3})+\.\d{2}"
_PLAIN_DECIMAL = r"\d+\.\d{2}"


@dataclass(frozen=True, slots=True)
class AmountShape:
    name: str
    pattern: re.Pattern[str]
    confidence: int
    is_debit: bool | None = None
    """``True``/``False`` when the shape itself fixes the direction."""


# Ordered by specificity. Each pattern exposes the numeral as group "num".
AMOUNT_EXTRACTION_SHAPES: tuple[AmountShape, ...] = (
    AmountShape(
        "marked",
        re.compile(
            rf"{_L}{_CUR}?\s?(?P<num>{NUMERAL})\s*(?P<marker>CR|DR)\b\.?", re.IGNORECASE
        ),
        100,
    ),
    AmountShape(
        "parenthesized",
        re.compile(rf"\(\s*{_CUR}?\s*(?P<num>{NUMERAL})\s*\)"),
        95,
        is_debit=True,
    ),
    AmountShape(
        "signed",
        re.compile(rf"(?<!\S)-\s?{_CUR}?\s?(?P<num>{NUMERAL}){_R}"),
        95,
        is_debit=True,
    ),
    AmountShape("comma_decimal", re.compile(rf"{_L}{_CUR}?(?P<num>{_COMMA_DECIMAL}){_R}"), 80),
    AmountShape("currency", re.compile(rf"{_CUR}\s?(?P<num>{NUMERAL}){_R}"), 70),
    AmountShape("plain_decimal", re.compile(rf"{_L}(?P<num>{_PLAIN_DECIMAL}){_R}"), 60),
)


def parse_amount(text: str) -> Decimal | None:
    """Parse a numeral with optional thousands separators into cents."""

    try:
        return to_money(text.replace(",", "").strip())
    except InvalidOperation:
        return None


def _overlaps(span: tuple[int, int], taken: list[tuple[int, int]]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in taken)


def _remove_first(text: str, fragment: str | None) -> str:
    # Blank out rather than delete so positions stay comparable to the line.
    if not fragment:
        return text
    idx = text.find(fragment)
    if idx < 0:
        return text
    return text[:idx] + " " * len(fragment) + text[idx + len(fragment) :]


def extract_amounts(line: str, date_text: str | None = None) -> list[ExtractedAmount]:
    """Return the right-edge amount candidates of ``line`` in positional order.

    Example
    -------
    ``extract_amounts("15/01/2024 Purchase -125.50 2450.75", "15/01/2024")``
    yields ``125.50`` (debit, from the minus sign) followed by ``2450.75``
    (unresolved; it becomes the balance).
    """

    scanned = _remove_first(line, date_text)
    taken: list[tuple[int, int]] = []
    found: list[ExtractedAmount] = []

    for shape in AMOUNT_EXTRACTION_SHAPES:
        for m in shape.pattern.finditer(scanned):
            if _overlaps(m.span(), taken):
                continue
            value = parse_amount(m.group("num"))
            if value is None or value <= 0 or value > MAX_AMOUNT:
                continue

            if shape.name == "marked":
                is_debit = m.group("marker").upper() == "DR"
                is_credit = not is_debit
            else:
                is_debit = shape.is_debit is True
                is_credit = shape.is_debit is False

            taken.append(m.span())
            found.append(
                ExtractedAmount(
                    value=value,
                    original=m.group(0).strip(),
                    is_debit=is_debit,
                    is_credit=is_credit,
                    confidence=shape.confidence,
                    position=m.start(),
                )
            )

    found.sort(key=lambda a: a.position)
    return found[-MAX_RIGHT_EDGE_AMOUNTS:]


def classify_amounts(
    amounts: list[ExtractedAmount],
) -> tuple[ExtractedAmount | None, ExtractedAmount | None]:
    """Split amounts into ``(transaction_amount, balance)``.

    With three or more amounts the first is the transaction amount and the
    last the balance; anything in between is dropped. Layouts with separate
    debit and credit columns both populated on one row are not recovered.
    """

    if not amounts:
        return None, None
    if len(amounts) == 1:
        return amounts[0], None
    if len(amounts) > 2:
        logger.debug(
            "dropping %d middle amount(s): %s",
            len(amounts) - 2,
            [a.original for a in amounts[1:-1]],
        )
    return amounts[0], amounts[-1]


def resolve_direction(
    amount: ExtractedAmount, line: str, keywords: SignKeywords | None = None
) -> tuple[bool, bool]:
    """Return ``(is_debit, is_credit)`` for ``amount`` on ``line``.

    A marker attached to the amount always wins. Otherwise the keyword table
    is consulted, then its fallback direction. With neither, both flags are
    false and the amount stays unresolved.
    """

    if amount.is_resolved:
        return amount.is_debit, amount.is_credit

    table = keywords or DEFAULT_SIGN_KEYWORDS
    direction = table.infer(line)
    if direction is None:
        direction = table.fallback
        if direction is not None:
            logger.debug("no sign keyword matched; using fallback %s", direction)
    return direction == "debit", direction == "credit"


__all__ = [
    "AMOUNT_EXTRACTION_SHAPES",
    "MAX_AMOUNT",
    "MAX_RIGHT_EDGE_AMOUNTS",
    "AmountShape",
    "classify_amounts",
    "extract_amounts",
    "parse_amount",
    "resolve_direction",
]
