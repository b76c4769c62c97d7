"""Shared regular expressions for statement text.

Date and amount shapes are needed by three layers (line splitting, candidate
detection and field extraction). They live here so every layer agrees on what
a "date-like" or "amount-like" substring is.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_MONTH_ALT = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"

ISO_DATE_RX = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
NUMERIC_DATE_4Y_RX = re.compile(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b")
DAY_MONTH_NAME_RX = re.compile(
    rf"\b(\d{{1,2}})[\s\-]?({_MONTH_ALT})\.?[\s\-,]*(\d{{4}})\b", re.IGNORECASE
)
MONTH_NAME_DAY_RX = re.compile(
    rf"\b({_MONTH_ALT})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})\b", re.IGNORECASE
)
NUMERIC_DATE_2Y_RX = re.compile(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2})\b")

# Detection order: most specific shape first.
DATE_SHAPES: tuple[re.Pattern[str], ...] = (
    ISO_DATE_RX,
    NUMERIC_DATE_4Y_RX,
    DAY_MONTH_NAME_RX,
    MONTH_NAME_DAY_RX,
    NUMERIC_DATE_2Y_RX,
)

MONTH_NAMES: dict[str, int] = {
    "jan": 1,
    "january": 1,
    "feb": 2,
    "february": 2,
    "mar": 3,
    "march": 3,
    "apr": 4,
    "april": 4,
    "may": 5,
    "jun": 6,
    "june": 6,
    "jul": 7,
    "july": 7,
    "aug": 8,
    "august": 8,
    "sep": 9,
    "sept": 9,
    "september": 9,
    "oct": 10,
    "october": 10,
    "nov": 11,
    "november": 11,
    "dec": 12,
    "december": 12,
}


def month_number(name: str) -> int | None:
    """Return 1..12 for a month name or abbreviation, ``None`` otherwise."""

    return MONTH_NAMES.get(name.strip().rstrip(".").lower())


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

CURRENCY_SYMBOLS = "$£€₹"
_CUR = f"[{CURRENCY_SYMBOLS}]"

# A numeral with optional thousands separators and an optional 2-digit
# fraction. Grouped numbers are tried before plain digit runs.
NUMERAL = r"(?:\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)"

# Whitespace-delimited tokens only; adjacent tokens must both be found.
CURRENCY_NUMERAL_RX = re.compile(rf"(?<!\S){_CUR}?\s?{NUMERAL}(?!\S)")
PAREN_NUMERAL_RX = re.compile(rf"\(\s*{_CUR}?\s*{NUMERAL}\s*\)")
SIGNED_NUMERAL_RX = re.compile(rf"(?<!\S)-\s?{_CUR}?\s?{NUMERAL}(?!\S)")
MARKED_NUMERAL_RX = re.compile(rf"(?<![\d,.]){NUMERAL}\s*(?:CR|DR)\b", re.IGNORECASE)

AMOUNT_SHAPES: tuple[re.Pattern[str], ...] = (
    CURRENCY_NUMERAL_RX,
    PAREN_NUMERAL_RX,
    MARKED_NUMERAL_RX,
    SIGNED_NUMERAL_RX,
)

# Loose "looks like money" matcher: a decimal numeral with optional sign,
# parentheses, currency symbol and trailing CR/DR marker.
MONEY_LIKE_RX = re.compile(
    rf"\(?-?\s?{_CUR}?\s?(?:\d{{1,3}}(?:,\d{{3}})+|\d+)\.\d{{2}}\)?(?:\s*(?:CR|DR)\b)?",
    re.IGNORECASE,
)


__all__ = [
    "AMOUNT_SHAPES",
    "CURRENCY_NUMERAL_RX",
    "CURRENCY_SYMBOLS",
    "DATE_SHAPES",
    "DAY_MONTH_NAME_RX",
    "ISO_DATE_RX",
    "MARKED_NUMERAL_RX",
    "MONEY_LIKE_RX",
    "MONTH_NAMES",
    "MONTH_NAME_DAY_RX",
    "NUMERAL",
    "NUMERIC_DATE_2Y_RX",
    "NUMERIC_DATE_4Y_RX",
    "PAREN_NUMERAL_RX",
    "SIGNED_NUMERAL_RX",
    "month_number",
]
