"""Keyword tables used to infer debit/credit direction from line text.

Statement rows often print a bare amount and leave the direction to the
column it sits in, which is lost once the text is flattened. When no marker
(minus sign, parentheses, CR/DR suffix) settles the direction, the line is
scanned for institution-specific phrases. The table is plain data so callers
can supply their own vocabulary, typically from a JSON file:

.. code-block:: json

    {"debit": ["ATM WDL", "POS"], "credit": ["SALARY"], "fallback": "debit"}

Amounts that neither a marker nor a keyword resolves stay unresolved unless
the table names a ``fallback`` direction.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from .models import Direction

# Phrases that turn an otherwise debit-looking row ("Annual fee reversal",
# "Refund of purchase") into money coming back.
DEFAULT_REVERSAL_KEYWORDS: tuple[str, ...] = (
    "REFUND",
    "REVERSAL",
    "REVERSED",
    "CHARGEBACK",
)

DEFAULT_DEBIT_KEYWORDS: tuple[str, ...] = (
    "TRF TO",
    "TRANSFER TO",
    "CASH ADVANCE",
    "ATM WITHDRAWAL",
    "WITHDRAWAL",
    "POS PURCHASE",
    "PURCHASE",
    "BILL PAYMENT",
    "SERVICE CHARGE",
    "EFT-CHG",
    "FEE",
)

DEFAULT_CREDIT_KEYWORDS: tuple[str, ...] = (
    "TRF FROM",
    "TRANSFER FROM",
    "OPENING BALANCE",
    "DEPOSIT",
    "SALARY",
    "INTEREST CREDIT",
)


class SignKeywords(BaseModel):
    """Phrase lists consulted for unsigned amounts.

    Order: ``reversal`` (credit), then ``debit``, then ``credit``.
    ``fallback`` is the direction assigned when nothing matched; the default
    ``None`` leaves the amount unresolved, which makes the line fail
    validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    debit: tuple[str, ...] = DEFAULT_DEBIT_KEYWORDS
    credit: tuple[str, ...] = DEFAULT_CREDIT_KEYWORDS
    reversal: tuple[str, ...] = DEFAULT_REVERSAL_KEYWORDS
    case_sensitive: bool = False
    fallback: Direction | None = None

    @field_validator("debit", "credit", "reversal")
    @classmethod
    def _drop_blank(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s.strip() for s in v if s.strip())

    def _matches(self, phrases: tuple[str, ...], line: str) -> bool:
        # Whole-phrase matches only, so "FEE" does not fire inside "COFFEE".
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return any(re.search(rf"(?<!\w){re.escape(p)}(?!\w)", line, flags) for p in phrases)

    def infer(self, line: str) -> Direction | None:
        """Return the direction implied by ``line`` (keywords only)."""

        if self._matches(self.reversal, line):
            return "credit"
        if self._matches(self.debit, line):
            return "debit"
        if self._matches(self.credit, line):
            return "credit"
        return None

    @classmethod
    def from_json_file(cls, path: str | Path) -> SignKeywords:
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


DEFAULT_SIGN_KEYWORDS = SignKeywords()


__all__ = [
    "DEFAULT_CREDIT_KEYWORDS",
    "DEFAULT_DEBIT_KEYWORDS",
    "DEFAULT_REVERSAL_KEYWORDS",
    "DEFAULT_SIGN_KEYWORDS",
    "SignKeywords",
]
