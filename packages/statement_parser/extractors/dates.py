"""Layer 3a: date extraction.

Finds the transaction date on a line and normalizes it to ISO
``YYYY-MM-DD``. Shapes are tried in a fixed priority order; the first one
that matches *and* yields a real calendar date wins, so a lower-priority
shape is never consulted once a higher one succeeded.

Numeric ``A/B/Y`` shapes are ambiguous between day-first and month-first.
A component above 12 settles it; otherwise the caller's preference applies.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import TypeAlias

from ..models import ExtractedDate
from ..patterns import (
    DAY_MONTH_NAME_RX,
    ISO_DATE_RX,
    MONTH_NAME_DAY_RX,
    NUMERIC_DATE_2Y_RX,
    NUMERIC_DATE_4Y_RX,
    month_number,
)

MIN_YEAR = 1990
BASE_CONFIDENCE = 70

_Ymd: TypeAlias = tuple[int, int, int]
_Parser: TypeAlias = Callable[[re.Match[str], bool], _Ymd | None]


def _day_month(first: int, second: int, prefer_day_first: bool) -> tuple[int, int]:
    if first > 12:
        return first, second
    if second > 12:
        return second, first
    return (first, second) if prefer_day_first else (second, first)


def expand_two_digit_year(yy: int) -> int:
    return 2000 + yy if yy < 50 else 1900 + yy


def _parse_iso(m: re.Match[str], _prefer_day_first: bool) -> _Ymd | None:
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def _parse_numeric_4y(m: re.Match[str], prefer_day_first: bool) -> _Ymd | None:
    day, month = _day_month(int(m.group(1)), int(m.group(2)), prefer_day_first)
    return int(m.group(3)), month, day


def _parse_day_month_name(m: re.Match[str], _prefer_day_first: bool) -> _Ymd | None:
    month = month_number(m.group(2))
    if month is None:
        return None
    return int(m.group(3)), month, int(m.group(1))


def _parse_month_name_day(m: re.Match[str], _prefer_day_first: bool) -> _Ymd | None:
    month = month_number(m.group(1))
    if month is None:
        return None
    return int(m.group(3)), month, int(m.group(2))


def _parse_numeric_2y(m: re.Match[str], prefer_day_first: bool) -> _Ymd | None:
    day, month = _day_month(int(m.group(1)), int(m.group(2)), prefer_day_first)
    return expand_two_digit_year(int(m.group(3))), month, day


@dataclass(frozen=True, slots=True)
class DateShape:
    pattern: re.Pattern[str]
    format: str
    parser: _Parser
    month_named: bool = False


# Priority order matters: see module docstring.
DATE_EXTRACTION_SHAPES: tuple[DateShape, ...] = (
    DateShape(ISO_DATE_RX, "YYYY-MM-DD", _parse_iso),
    DateShape(NUMERIC_DATE_4Y_RX, "DD/MM/YYYY", _parse_numeric_4y),
    DateShape(DAY_MONTH_NAME_RX, "DD MMM YYYY", _parse_day_month_name, month_named=True),
    DateShape(MONTH_NAME_DAY_RX, "MMM DD YYYY", _parse_month_name_day, month_named=True),
    DateShape(NUMERIC_DATE_2Y_RX, "DD/MM/YY", _parse_numeric_2y),
)


def _shift_months(d: date, months: int) -> date:
    # Clamp the day so e.g. Jan 31 + 1 month lands on the last day of Feb.
    total = d.year * 12 + (d.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    for day in (d.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"cannot shift {d!r} by {months} months")


def to_calendar_date(year: int, month: int, day: int, *, today: date) -> date | None:
    """Return the date when the components are plausible, else ``None``.

    Years must fall in ``[1990, today.year + 1]``.
    """

    if year < MIN_YEAR or year > today.year + 1:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_recent(d: date, *, today: date) -> bool:
    """Within one year back and one month ahead of ``today``."""

    return _shift_months(today, -12) <= d <= _shift_months(today, 1)


def extract_date(
    line: str, prefer_day_first: bool = True, *, today: date | None = None
) -> ExtractedDate | None:
    """Extract the first valid date from ``line``.

    Example
    -------
    ``extract_date("15/01/2024 Purchase -50.00")`` returns value
    ``"2024-01-15"`` with format ``"DD/MM/YYYY"``.
    """

    ref = today or date.today()
    for shape in DATE_EXTRACTION_SHAPES:
        for m in shape.pattern.finditer(line):
            parts = shape.parser(m, prefer_day_first)
            if parts is None:
                continue
            found = to_calendar_date(*parts, today=ref)
            if found is None:
                continue

            if shape.format == "YYYY-MM-DD":
                confidence = 100
            else:
                confidence = BASE_CONFIDENCE
                if shape.month_named:
                    confidence += 20
                if is_recent(found, today=ref):
                    confidence += 10

            return ExtractedDate(
                value=found.isoformat(),
                original=m.group(0),
                format=shape.format,
                confidence=min(confidence, 100),
            )
    return None


__all__ = [
    "DATE_EXTRACTION_SHAPES",
    "DateShape",
    "expand_two_digit_year",
    "extract_date",
    "is_recent",
    "to_calendar_date",
]
