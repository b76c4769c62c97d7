from decimal import Decimal

import pytest

from statement_parser.export import export_csv, export_file_name, transactions_to_csv
from statement_parser.extractors import title_case_description
from statement_parser.models import Transaction

ROWS = [
    Transaction(
        "2024-01-15",
        "Grocery Store",
        debit_amount=Decimal("125.5"),
        balance=Decimal("2450.75"),
    ),
    Transaction("2024-01-16", "SALARY, JANUARY", credit_amount=Decimal("3000")),
]


def test_debit_credit_columns():
    assert transactions_to_csv(ROWS) == (
        "Date,Description,Debit,Credit,Balance\n"
        "2024-01-15,Grocery Store,125.50,,2450.75\n"
        '2024-01-16,"SALARY, JANUARY",,3000.00,\n'
    )


def test_payment_receipt_columns_and_delimiter():
    csv_text = transactions_to_csv(ROWS, column_style="payment_receipt", delimiter=";")
    header, first, _second = csv_text.splitlines()
    assert header == "Date;Particulars;Payments;Receipts;Balance"
    assert first == "2024-01-15;Grocery Store;125.50;;2450.75"


def test_without_headers_and_with_describe():
    csv_text = transactions_to_csv(ROWS[1:], include_headers=False, describe=title_case_description)
    assert csv_text == '2024-01-16,"Salary, January",,3000.00,\n'


def test_unknown_column_style():
    with pytest.raises(ValueError, match="unknown column style"):
        transactions_to_csv(ROWS, column_style="wide")  # type: ignore[arg-type]


def test_export_csv_result():
    export = export_csv(iter(ROWS), "statements/nov-2025.pdf")
    assert export.row_count == 2
    assert export.file_name == "nov-2025_transactions.csv"
    assert export.csv.startswith("Date,Description")


def test_export_file_name_fallback():
    assert export_file_name("") == "statement_transactions.csv"
