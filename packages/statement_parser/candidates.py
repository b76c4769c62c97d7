"""Layer 2: candidate row detection.

A cheap boolean classifier deciding which normalized lines are worth running
the field extractors on. No scoring happens here; confidence is computed in
``validation`` once fields have been extracted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import CandidateLine, RawLine
from .patterns import AMOUNT_SHAPES, DATE_SHAPES

_ALPHA_RX = re.compile(r"[A-Za-z]{2,}")
_DIGIT_RX = re.compile(r"\d")


def _amount_spans(line: str) -> list[tuple[int, int]]:
    # Distinct amount-shaped spans; overlapping matches from different shapes
    # (e.g. "6,063.00" and "6,063.00 Cr") count once.
    spans = sorted(m.span() for rx in AMOUNT_SHAPES for m in rx.finditer(line))
    merged: list[tuple[int, int]] = []
    for start, end in spans:
        if merged and start < merged[-1][1]:
            merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
        else:
            merged.append((start, end))
    return merged


def has_date_pattern(line: str) -> bool:
    return any(rx.search(line) for rx in DATE_SHAPES)


def has_amount_pattern(line: str) -> bool:
    return any(rx.search(line) for rx in AMOUNT_SHAPES)


def has_balance_pattern(line: str) -> bool:
    """Two or more amounts suggest the last one is a running balance."""

    return len(_amount_spans(line)) >= 2


def has_good_structure(line: str) -> bool:
    """At least three tokens mixing alphabetic and numeric content."""

    if len(line.split()) < 3:
        return False
    return bool(_ALPHA_RX.search(line)) and bool(_DIGIT_RX.search(line))


def classify_line(line: str, line_number: int) -> CandidateLine:
    has_date = has_date_pattern(line)
    has_amount = has_amount_pattern(line)
    likely = (has_date and has_amount) or (has_good_structure(line) and (has_date or has_amount))
    return CandidateLine(
        line=line,
        line_number=line_number,
        has_date=has_date,
        has_amount=has_amount,
        has_balance=has_balance_pattern(line),
        likely_transaction=likely,
    )


def detect_candidates(lines: Iterable[RawLine]) -> list[CandidateLine]:
    """Classify every numbered line, carrying its line number through."""

    return [classify_line(raw.text, raw.line_number) for raw in lines]


def filter_likely_candidates(candidates: Iterable[CandidateLine]) -> list[CandidateLine]:
    return [c for c in candidates if c.likely_transaction]


__all__ = [
    "classify_line",
    "detect_candidates",
    "filter_likely_candidates",
    "has_amount_pattern",
    "has_balance_pattern",
    "has_date_pattern",
    "has_good_structure",
]
