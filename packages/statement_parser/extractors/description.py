"""Layer 3c: description extraction.

The description is whatever narrative is left once the date, the amounts and
reference noise are taken out of the line.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..patterns import MONEY_LIKE_RX

MAX_DESCRIPTION_LENGTH = 100
MIN_DESCRIPTION_LENGTH = 3
_FALLBACK_TOKENS = 5

_REFERENCE_RX = re.compile(r"\b(?:REF|TXN|ID|TRACE|AUTH)\s*[:#]\s*[A-Z0-9-]+", re.IGNORECASE)
# Whitespace-delimited codes of 6+ characters with at least one digit, which
# also covers masked card numbers such as 432572******5281.
_LONG_CODE_RX = re.compile(r"(?<!\S)(?=[A-Za-z0-9*#/-]*\d)[A-Za-z0-9*#/-]{6,}(?!\S)")
_SPACES_RX = re.compile(r"\s{2,}")
_EDGE_PUNCT = " \t-–—:;,.|/\\*#"
_ALPHA_TOKEN_RX = re.compile(r"[A-Za-z]{2,}")


def extract_description(
    line: str,
    date_text: str | None = None,
    amount_texts: Iterable[str] = (),
) -> str:
    """Return the cleaned narrative part of ``line``.

    ``date_text`` and ``amount_texts`` are the exact substrings matched by the
    date and amount extractors; each is removed once by literal replacement.

    Example
    -------
    ``extract_description("15/01/2024 ATM WITHDRAWAL REF:12345 -100.00 2450.75",
    "15/01/2024", ["-100.00", "2450.75"])`` returns ``"ATM WITHDRAWAL"``.
    """

    description = line
    if date_text:
        description = description.replace(date_text, " ", 1)
    for amount_text in amount_texts:
        if amount_text:
            description = description.replace(amount_text, " ", 1)

    description = _REFERENCE_RX.sub(" ", description)
    description = MONEY_LIKE_RX.sub(" ", description)
    description = _LONG_CODE_RX.sub(" ", description)
    description = _SPACES_RX.sub(" ", description).strip().strip(_EDGE_PUNCT).strip()

    if len(description) < MIN_DESCRIPTION_LENGTH:
        tokens = [t for t in line.split() if _ALPHA_TOKEN_RX.search(t)]
        description = " ".join(tokens[:_FALLBACK_TOKENS])

    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH].rstrip() + "..."
    return description


def title_case_description(description: str) -> str:
    """Title-case words, keeping short all-caps tokens (ATM, POS) as they are."""

    words = []
    for word in description.split(" "):
        if len(word) <= 4 and word.isupper():
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


__all__ = ["MAX_DESCRIPTION_LENGTH", "extract_description", "title_case_description"]
