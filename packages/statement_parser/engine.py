"""Transaction parsing engine.

Drives the layers in order for every line of page-concatenated statement
text::

    normalize -> detect candidates -> extract date -> extract amounts
              -> extract balance/description -> validate and score

Lines that do not look like transactions are dropped silently. Candidate
lines that cannot be turned into a transaction, or that score below the
threshold, are reported in :attr:`ParsingResult.skipped` with a reason.

The engine keeps no state between calls; the same text and options always
produce the same result apart from ``metadata.parse_date``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from .candidates import detect_candidates, filter_likely_candidates
from .extractors import (
    classify_amounts,
    extract_amounts,
    extract_balance,
    extract_date,
    extract_description,
    resolve_direction,
)
from .keywords import DEFAULT_SIGN_KEYWORDS, SignKeywords
from .logging_setup import get_logger
from .models import (
    ParsedTransaction,
    ParsingMetadata,
    ParsingOptions,
    ParsingResult,
    SkippedLine,
    Transaction,
)
from .normalizer import normalize_raw_lines
from .validation import is_valid_transaction, validate_transaction

logger = get_logger("statement_parser.engine")

EXTRACTION_FAILURE_REASON = "Failed to extract required fields"


def _parse_line(
    line: str, options: ParsingOptions, keywords: SignKeywords
) -> tuple[ParsedTransaction | None, str | None]:
    """Return ``(parsed, None)`` or ``(None, missing_field_message)``."""

    today = options.today()
    found_date = extract_date(line, options.prefer_day_first, today=today)
    if found_date is None:
        return None, "no date found"

    amounts = extract_amounts(line, found_date.original)
    tx_amount, balance_amount = classify_amounts(amounts)
    if tx_amount is None:
        return None, "no transaction amount found"

    is_debit, is_credit = resolve_direction(tx_amount, line, keywords)

    balance_texts: list[str] = []
    if balance_amount is not None:
        balance = balance_amount.value
    else:
        fallback = extract_balance(
            line.replace(found_date.original, " ", 1), tx_amount.original
        )
        balance = fallback.value if fallback else None
        if fallback is not None:
            balance_texts.append(fallback.original)

    description = extract_description(
        line,
        found_date.original,
        [a.original for a in amounts] + balance_texts,
    )

    transaction = Transaction(
        date=found_date.value,
        description=description,
        debit_amount=tx_amount.value if is_debit else None,
        credit_amount=tx_amount.value if is_credit else None,
        balance=balance,
        raw_line=line,
    )
    return validate_transaction(transaction, today=today), None


def parse_line(
    line: str,
    options: ParsingOptions | None = None,
    keywords: SignKeywords | None = None,
) -> ParsedTransaction | None:
    """Parse a single normalized line; ``None`` when a required field is missing.

    Example
    -------
    ``parse_line("15/01/2024 Grocery Store -125.50 2450.75")`` returns a
    debit of ``125.50`` dated ``2024-01-15`` with balance ``2450.75``.
    """

    parsed, _missing = _parse_line(
        line, options or ParsingOptions(), keywords or DEFAULT_SIGN_KEYWORDS
    )
    return parsed


def _average_confidence(parsed: list[ParsedTransaction]) -> int:
    if not parsed:
        return 0
    mean = Decimal(sum(p.confidence for p in parsed)) / len(parsed)
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_transactions(
    text: str,
    options: ParsingOptions | None = None,
    *,
    keywords: SignKeywords | None = None,
) -> ParsingResult:
    """Parse page-concatenated statement ``text`` into transactions.

    Parameters
    ----------
    text:
        Extracted statement text. Any string is accepted; malformed content
        ends up in ``skipped`` or is dropped, it never raises.
    options:
        Threshold, date-order preference and strictness. Defaults to
        ``ParsingOptions()``.
    keywords:
        Sign keyword table for amounts without an explicit marker.

    Returns
    -------
    ParsingResult
        Accepted transactions sorted by date (stable for equal dates), the
        skipped candidate lines in input order and run statistics.
    """

    opts = options or ParsingOptions()
    table = keywords or DEFAULT_SIGN_KEYWORDS

    lines = normalize_raw_lines(text)
    candidates = filter_likely_candidates(detect_candidates(lines))
    logger.debug("normalized %d line(s); %d candidate(s)", len(lines), len(candidates))

    accepted: list[ParsedTransaction] = []
    skipped: list[SkippedLine] = []

    for candidate in candidates:
        parsed, missing = _parse_line(candidate.line, opts, table)

        if parsed is None:
            logger.debug("line %d: %s", candidate.line_number, missing)
            skipped.append(
                SkippedLine(
                    line=candidate.line,
                    line_number=candidate.line_number,
                    reason=f"{EXTRACTION_FAILURE_REASON}: {missing}",
                    confidence=0,
                )
            )
            continue

        if is_valid_transaction(parsed, opts.min_confidence, strict=opts.strict):
            logger.debug(
                "line %d: accepted (%d%%) %s",
                candidate.line_number,
                parsed.confidence,
                parsed.transaction.description,
            )
            accepted.append(parsed)
        else:
            issues = ", ".join(parsed.issues) or "none"
            label = "Low confidence" if parsed.confidence < opts.min_confidence else "Rejected"
            logger.debug("line %d: rejected (%d%%)", candidate.line_number, parsed.confidence)
            skipped.append(
                SkippedLine(
                    line=candidate.line,
                    line_number=candidate.line_number,
                    reason=f"{label} ({parsed.confidence}%). Issues: {issues}",
                    confidence=parsed.confidence,
                )
            )

    # ISO dates sort lexically; sorted() is stable for ties.
    accepted = sorted(accepted, key=lambda p: p.transaction.date)

    metadata = ParsingMetadata(
        total_lines=len(lines),
        candidate_lines=len(candidates),
        parsed_transactions=len(accepted),
        skipped_lines=len(skipped),
        avg_confidence=_average_confidence(accepted),
        parse_date=datetime.now(UTC).isoformat(),
    )
    logger.info(
        "parsed %d transaction(s) from %d candidate line(s); %d skipped; avg confidence %d%%",
        metadata.parsed_transactions,
        metadata.candidate_lines,
        metadata.skipped_lines,
        metadata.avg_confidence,
    )

    return ParsingResult(
        transactions=tuple(p.transaction for p in accepted),
        skipped=tuple(skipped),
        metadata=metadata,
        scored=tuple(accepted),
    )


__all__ = ["EXTRACTION_FAILURE_REASON", "parse_line", "parse_transactions"]
