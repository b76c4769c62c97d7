"""Layer 1: line normalization.

Turns raw statement text into an ordered list of clean, non-empty lines:
split, collapse whitespace, and drop noise such as page markers, column
headers, separators and legal boilerplate. Nothing here raises; an empty or
all-noise input simply yields no lines.
"""

from __future__ import annotations

import re

from .models import RawLine
from .patterns import DATE_SHAPES

MIN_LINE_LENGTH = 10
MAX_LINE_LENGTH = 300

# Below this many lines, a long text probably lost its line breaks during
# extraction and is re-split on date occurrences instead.
_COLLAPSED_MIN_LINES = 5
_COLLAPSED_MIN_CHARS = 500

NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Page numbers
    re.compile(r"^page\s+\d+", re.IGNORECASE),
    re.compile(r"^\d+\s+of\s+\d+$", re.IGNORECASE),
    # Statement header labels
    re.compile(r"^statement\s+(period|date)", re.IGNORECASE),
    re.compile(r"^account\s+(number|summary|name)", re.IGNORECASE),
    re.compile(r"^(opening|closing)\s+balance", re.IGNORECASE),
    re.compile(r"^total\s+(debits?|credits?|payments?|receipts?)", re.IGNORECASE),
    # Table header rows
    re.compile(r"^date\s+(description|details|particulars|narration)", re.IGNORECASE),
    re.compile(r"^(debit|credit|balance)$", re.IGNORECASE),
    re.compile(r"^amount\s+balance$", re.IGNORECASE),
    # Legal/disclaimer blocks in capitals
    re.compile(r"^[A-Z\s,.'&()/-]{50,}$"),
    # Separator runs
    re.compile(r"^[-=_*.~\s]{10,}$"),
    # Continued markers
    re.compile(r"^(continued|cont\.|contd)", re.IGNORECASE),
)

_HSPACE_RX = re.compile(r"[ \t\f\v\u00a0]+")
_COLON_RX = re.compile(r"\s*:\s*")


def _combined_date_matches(text: str) -> list[re.Match[str]]:
    """All date-shaped matches in ``text``, leftmost first, without overlaps."""

    found: list[re.Match[str]] = []
    for rx in DATE_SHAPES:
        found.extend(rx.finditer(text))
    found.sort(key=lambda m: (m.start(), -m.end()))

    kept: list[re.Match[str]] = []
    last_end = -1
    for m in found:
        if m.start() >= last_end:
            kept.append(m)
            last_end = m.end()
    return kept


def split_on_dates(text: str) -> list[str]:
    """Split ``text`` so each date occurrence starts a new logical line."""

    starts = [m.start() for m in _combined_date_matches(text)]
    if not starts:
        return [text]
    bounds = starts + [len(text)]
    pieces: list[str] = []
    if starts[0] > 0:
        pieces.append(text[: starts[0]])
    for begin, end in zip(bounds, bounds[1:], strict=False):
        pieces.append(text[begin:end])
    return [p for p in pieces if p.strip()]


def split_into_lines(text: str) -> list[str]:
    """Split raw text into lines, recovering from collapsed line breaks.

    When extraction flattened the document into a handful of very long
    lines, the date-anchored split is tried as well and whichever split
    produces more lines wins.
    """

    naive = [ln for ln in text.splitlines() if ln.strip()]
    if len(naive) >= _COLLAPSED_MIN_LINES or len(text) <= _COLLAPSED_MIN_CHARS:
        return naive

    anchored: list[str] = []
    for ln in naive:
        anchored.extend(split_on_dates(ln))
    return anchored if len(anchored) > len(naive) else naive


def _colon_replacement(m: re.Match[str]) -> str:
    s = m.string
    before = s[m.start() - 1] if m.start() > 0 else ""
    after = s[m.end()] if m.end() < len(s) else ""
    # Keep clock times such as 10:30 intact.
    if before.isdigit() and after.isdigit() and m.group() == ":":
        return ":"
    return ": " if after else ":"


def normalize_line(line: str) -> str:
    """Trim, collapse horizontal whitespace and normalize colon spacing."""

    normalized = _HSPACE_RX.sub(" ", line.strip())
    return _COLON_RX.sub(_colon_replacement, normalized)


def is_noise_line(line: str) -> bool:
    """Return ``True`` when ``line`` should not reach candidate detection."""

    if len(line) < MIN_LINE_LENGTH or len(line) > MAX_LINE_LENGTH:
        return True
    return any(p.search(line) for p in NOISE_PATTERNS)


def normalize_lines(text: str) -> list[str]:
    """Full Layer 1 pipeline: split, normalize, drop noise and empties.

    Example
    -------
    >>> normalize_lines("Page 1\\n\\nDate  Description  Amount\\n15/01/2024 Grocery Store   -125.50\\n")
    ['15/01/2024 Grocery Store -125.50']
    """

    out: list[str] = []
    for raw in split_into_lines(text):
        line = normalize_line(raw)
        if line and not is_noise_line(line):
            out.append(line)
    return out


def normalize_raw_lines(text: str) -> list[RawLine]:
    """Like :func:`normalize_lines` but numbered (1-based) as ``RawLine``.

    This is what the engine feeds to candidate detection, so line numbers in
    skipped-line reports count surviving lines only.
    """

    return [RawLine(text=ln, line_number=i) for i, ln in enumerate(normalize_lines(text), 1)]


__all__ = [
    "MAX_LINE_LENGTH",
    "MIN_LINE_LENGTH",
    "NOISE_PATTERNS",
    "is_noise_line",
    "normalize_line",
    "normalize_lines",
    "normalize_raw_lines",
    "split_into_lines",
    "split_on_dates",
]
