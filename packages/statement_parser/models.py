"""Data models for ``statement_parser``.

Per-run records are frozen ``dataclass`` instances: they are created once per
parse invocation and never mutated. Caller-supplied configuration
(:class:`ParsingOptions`) is a pydantic model so bad values fail loudly at the
boundary instead of somewhere inside the pipeline.

Monetary values are :class:`~decimal.Decimal` quantized to two places and are
always non-negative; direction is carried by which column holds the value
(``debit_amount`` vs ``credit_amount``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

# Plain aliases (not ``type`` statements) so pydantic resolves them as Literals.
DateFormat = Literal["DD/MM/YYYY", "MM/DD/YYYY", "auto"]
Direction = Literal["debit", "credit"]

_CENTS = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize ``value`` to cents using half-up rounding."""

    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def fmt_money(value: Decimal | None) -> str | None:
    # Plain two-decimal string, ASCII dot, no grouping.
    if value is None:
        return None
    return f"{to_money(value):.2f}"


# ---------------------------------------------------------------------------
# Line-level records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawLine:
    """A single normalized line of statement text and its 1-based number."""

    text: str
    line_number: int


@dataclass(frozen=True, slots=True)
class CandidateLine:
    """Classification of one normalized line (see ``candidates``)."""

    line: str
    line_number: int
    has_date: bool
    has_amount: bool
    has_balance: bool
    likely_transaction: bool


# ---------------------------------------------------------------------------
# Field extraction provenance
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtractedDate:
    value: str
    """ISO ``YYYY-MM-DD``."""
    original: str
    format: str
    confidence: int


@dataclass(frozen=True, slots=True)
class ExtractedAmount:
    """One amount-shaped match.

    Both ``is_debit`` and ``is_credit`` false means the sign is unresolved
    and the orchestrator must infer it from context.
    """

    value: Decimal
    original: str
    is_debit: bool
    is_credit: bool
    confidence: int
    position: int = 0

    @property
    def is_resolved(self) -> bool:
        return self.is_debit or self.is_credit


@dataclass(frozen=True, slots=True)
class ExtractedBalance:
    value: Decimal
    original: str
    confidence: int


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """The canonical output record.

    Statements label the money columns differently (debit/credit,
    payments/receipts, withdrawals/deposits). The stored representation is
    always ``debit_amount``/``credit_amount``; the other spellings are exposed
    as read-only aliases.
    """

    date: str
    description: str
    debit_amount: Decimal | None = None
    credit_amount: Decimal | None = None
    balance: Decimal | None = None
    raw_line: str = ""

    @property
    def payment(self) -> Decimal | None:
        return self.debit_amount

    @property
    def receipt(self) -> Decimal | None:
        return self.credit_amount

    @property
    def direction(self) -> Direction | None:
        if self.debit_amount is not None:
            return "debit"
        if self.credit_amount is not None:
            return "credit"
        return None

    @property
    def signed_amount(self) -> Decimal | None:
        """Credit positive, debit negative; ``None`` when no amount is set."""

        if self.debit_amount is not None:
            return -self.debit_amount
        return self.credit_amount

    @property
    def is_complete(self) -> bool:
        return self.debit_amount is not None or self.credit_amount is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "description": self.description,
            "debit_amount": fmt_money(self.debit_amount),
            "credit_amount": fmt_money(self.credit_amount),
            "balance": fmt_money(self.balance),
            "raw_line": self.raw_line,
        }


@dataclass(frozen=True, slots=True)
class ConfidenceFactors:
    """Six independent quality checks; weights live in ``validation``."""

    has_valid_date: bool
    has_amount: bool
    has_description: bool
    has_balance: bool
    amount_format_valid: bool
    date_in_reasonable_range: bool

    def as_mapping(self) -> Mapping[str, bool]:
        return {
            "has_valid_date": self.has_valid_date,
            "has_amount": self.has_amount,
            "has_description": self.has_description,
            "has_balance": self.has_balance,
            "amount_format_valid": self.amount_format_valid,
            "date_in_reasonable_range": self.date_in_reasonable_range,
        }


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A transaction paired with its confidence score and issues.

    ``transaction`` is the public record; the remaining fields are the
    scoring detail that is dropped once a transaction is accepted.
    """

    transaction: Transaction
    confidence: int
    factors: ConfidenceFactors
    issues: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SkippedLine:
    line: str
    line_number: int
    reason: str
    confidence: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.line,
            "line_number": self.line_number,
            "reason": self.reason,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class ParsingMetadata:
    total_lines: int
    candidate_lines: int
    parsed_transactions: int
    skipped_lines: int
    avg_confidence: int
    parse_date: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lines": self.total_lines,
            "candidate_lines": self.candidate_lines,
            "parsed_transactions": self.parsed_transactions,
            "skipped_lines": self.skipped_lines,
            "avg_confidence": self.avg_confidence,
            "parse_date": self.parse_date,
        }


@dataclass(frozen=True, slots=True)
class ParsingResult:
    transactions: tuple[Transaction, ...]
    skipped: tuple[SkippedLine, ...]
    metadata: ParsingMetadata
    # Scored view of ``transactions`` in the same order; not part of the
    # serialized result.
    scored: tuple[ParsedTransaction, ...] = field(default=(), repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "skipped": [s.to_dict() for s in self.skipped],
            "metadata": self.metadata.to_dict(),
        }


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class ParsingOptions(BaseModel):
    """Caller-tunable parsing behaviour.

    ``reference_date`` is "today" for every date-relative rule (year ceiling,
    reasonable-range checks). Leaving it ``None`` uses the current local date;
    pinning it makes a parse fully reproducible.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_confidence: int = 50
    date_format: DateFormat = "auto"
    strict: bool = False
    reference_date: date | None = None

    @field_validator("min_confidence")
    @classmethod
    def _confidence_in_range(cls, v: int) -> int:
        if 0 <= v <= 100:
            return v
        raise ValueError("min_confidence must be within [0,100]")

    @property
    def prefer_day_first(self) -> bool:
        return self.date_format != "MM/DD/YYYY"

    def today(self) -> date:
        return self.reference_date or date.today()


__all__ = [
    "CandidateLine",
    "ConfidenceFactors",
    "DateFormat",
    "Direction",
    "ExtractedAmount",
    "ExtractedBalance",
    "ExtractedDate",
    "ParsedTransaction",
    "ParsingMetadata",
    "ParsingOptions",
    "ParsingResult",
    "RawLine",
    "SkippedLine",
    "Transaction",
    "fmt_money",
    "to_money",
]
