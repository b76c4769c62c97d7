"""CSV serialization of parsed transactions.

Output is deliberately locale-free: ISO dates and plain two-decimal numbers
with a dot, so spreadsheets and scripts read it the same way everywhere.
Missing values are empty cells.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from pathlib import PurePath
from typing import Literal, TypeAlias

from .models import Transaction, fmt_money

ColumnStyle: TypeAlias = Literal["debit_credit", "payment_receipt"]

COLUMN_HEADERS: dict[str, tuple[str, ...]] = {
    "debit_credit": ("Date", "Description", "Debit", "Credit", "Balance"),
    "payment_receipt": ("Date", "Particulars", "Payments", "Receipts", "Balance"),
}


@dataclass(frozen=True, slots=True)
class CsvExport:
    csv: str
    row_count: int
    file_name: str


def _cell(value: Decimal | None) -> str:
    return fmt_money(value) or ""


def transactions_to_csv(
    transactions: Iterable[Transaction],
    *,
    column_style: ColumnStyle = "debit_credit",
    delimiter: str = ",",
    include_headers: bool = True,
    describe: Callable[[str], str] | None = None,
) -> str:
    """Render ``transactions`` as CSV text (``\\n`` line endings).

    ``describe`` optionally rewrites each description before it is written.

    Example
    -------
    >>> from decimal import Decimal
    >>> tx = Transaction("2024-01-15", "Grocery Store", debit_amount=Decimal("125.5"))
    >>> transactions_to_csv([tx], include_headers=False)
    '2024-01-15,Grocery Store,125.50,,\\n'
    """

    try:
        headers = COLUMN_HEADERS[column_style]
    except KeyError as e:
        raise ValueError(
            f"unknown column style {column_style!r}; expected one of {sorted(COLUMN_HEADERS)}"
        ) from e

    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    if include_headers:
        writer.writerow(headers)
    for tx in transactions:
        description = describe(tx.description) if describe else tx.description
        writer.writerow(
            (
                tx.date,
                description,
                _cell(tx.debit_amount),
                _cell(tx.credit_amount),
                _cell(tx.balance),
            )
        )
    return buf.getvalue()


def export_file_name(source_name: str) -> str:
    """``"statement.pdf"`` -> ``"statement_transactions.csv"``."""

    stem = PurePath(source_name).stem or "statement"
    return f"{stem}_transactions.csv"


def export_csv(
    transactions: Iterable[Transaction],
    source_name: str,
    *,
    column_style: ColumnStyle = "debit_credit",
    delimiter: str = ",",
    include_headers: bool = True,
    describe: Callable[[str], str] | None = None,
) -> CsvExport:
    rows = list(transactions)
    return CsvExport(
        csv=transactions_to_csv(
            rows,
            column_style=column_style,
            delimiter=delimiter,
            include_headers=include_headers,
            describe=describe,
        ),
        row_count=len(rows),
        file_name=export_file_name(source_name),
    )


__all__ = [
    "COLUMN_HEADERS",
    "ColumnStyle",
    "CsvExport",
    "export_csv",
    "export_file_name",
    "transactions_to_csv",
]
