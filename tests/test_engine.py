import textwrap
from datetime import date
from decimal import Decimal

from statement_parser.engine import EXTRACTION_FAILURE_REASON, parse_line, parse_transactions
from statement_parser.extractors.dates import extract_date
from statement_parser.keywords import SignKeywords
from statement_parser.models import ParsingOptions

OPTIONS = ParsingOptions(reference_date=date(2025, 12, 31))
DEBIT_FALLBACK = SignKeywords(fallback="debit")


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


STATEMENT = _dedent(
    """
    FIRST NATIONAL BANK
    Statement Period: 01/11/2025 - 30/11/2025
    Page 1 of 2
    Date Description Payments Receipts Balance
    20/11/25 KAS-IB-TRF FROM savings 1,500.00 7,563.00 Cr
    17/11/25 Cash advance 432572******5281 6,000.00 6,063.00 Cr
    18/11/2025 Grocery Store -125.50 5,937.50
    Miscellaneous fee applied 25.00
    18/11/2025 Coffee shop 4.50
    --------------------------------
    Page 2 of 2
    """
)


def test_grocery_store_line():
    parsed = parse_line(
        "15/01/2024 Grocery Store -125.50 2450.75",
        ParsingOptions(reference_date=date(2024, 6, 30)),
    )
    tx = parsed.transaction

    assert tx.date == "2024-01-15"
    assert "Grocery Store" in tx.description
    assert tx.debit_amount == Decimal("125.50")
    assert tx.credit_amount is None
    assert tx.balance == Decimal("2450.75")
    assert parsed.confidence >= 80


def test_cash_advance_line():
    parsed = parse_line("17/11/25 Cash advance 432572******5281 6,000.00 6,063.00 Cr", OPTIONS)
    tx = parsed.transaction

    assert tx.date == "2025-11-17"
    assert tx.description == "Cash advance"
    assert tx.debit_amount == Decimal("6000.00")
    assert tx.payment == Decimal("6000.00")
    assert tx.balance == Decimal("6063.00")


def test_line_without_date_is_skipped_with_reason():
    result = parse_transactions("Miscellaneous fee applied 25.00", OPTIONS)

    assert result.transactions == ()
    [skipped] = result.skipped
    assert skipped.reason.startswith(EXTRACTION_FAILURE_REASON)
    assert "date" in skipped.reason
    assert skipped.confidence == 0


def test_page_marker_never_reaches_output():
    result = parse_transactions("Page 2 of 5", OPTIONS)
    assert result.transactions == ()
    assert result.skipped == ()
    assert result.metadata.total_lines == 0


def test_date_order_preference():
    day_first = parse_line("03/04/2024 Grocery Store -10.00 90.00", OPTIONS)
    month_first = parse_line(
        "03/04/2024 Grocery Store -10.00 90.00",
        ParsingOptions(date_format="MM/DD/YYYY", reference_date=date(2025, 12, 31)),
    )
    assert day_first.transaction.date == "2024-04-03"
    assert month_first.transaction.date == "2024-03-04"


def test_full_statement():
    result = parse_transactions(STATEMENT, OPTIONS)

    assert [t.date for t in result.transactions] == ["2025-11-17", "2025-11-18", "2025-11-20"]
    by_desc = {t.description: t for t in result.transactions}
    assert by_desc["KAS-IB-TRF FROM savings"].credit_amount == Decimal("1500.00")
    assert by_desc["Grocery Store"].balance == Decimal("5937.50")

    # No marker and no keyword: the coffee amount has no direction.
    misc, coffee = result.skipped
    assert misc.line == "Miscellaneous fee applied 25.00"
    assert coffee.line == "18/11/2025 Coffee shop 4.50"
    assert coffee.reason == "Rejected (65%). Issues: No transaction amount found"
    assert coffee.confidence == 65

    meta = result.metadata
    assert meta.total_lines == 6  # bank name line survives normalization
    assert meta.candidate_lines == 5
    assert meta.parsed_transactions == 3
    assert meta.skipped_lines == 2
    assert meta.avg_confidence == 100


def test_full_statement_with_debit_fallback():
    result = parse_transactions(STATEMENT, OPTIONS, keywords=DEBIT_FALLBACK)

    coffee = [t for t in result.transactions if t.description == "Coffee shop"]
    assert coffee[0].debit_amount == Decimal("4.50")
    assert coffee[0].balance is None
    assert result.metadata.parsed_transactions == 4
    assert result.metadata.avg_confidence == 98  # (100 + 100 + 100 + 90) / 4 rounded half up


def test_ties_keep_input_order():
    result = parse_transactions(STATEMENT, OPTIONS, keywords=DEBIT_FALLBACK)
    same_day = [t.description for t in result.transactions if t.date == "2025-11-18"]
    assert same_day == ["Grocery Store", "Coffee shop"]


def test_dates_are_monotonic_and_round_trip():
    result = parse_transactions(STATEMENT, OPTIONS)
    dates = [t.date for t in result.transactions]
    assert dates == sorted(dates)
    for tx in result.transactions:
        assert extract_date(tx.raw_line, today=OPTIONS.today()).value == tx.date


def test_idempotent_apart_from_parse_date():
    first = parse_transactions(STATEMENT, OPTIONS).to_dict()
    second = parse_transactions(STATEMENT, OPTIONS).to_dict()
    first["metadata"].pop("parse_date")
    second["metadata"].pop("parse_date")
    assert first == second


def test_scores_within_bounds_and_threshold_respected():
    result = parse_transactions(STATEMENT, OPTIONS)
    assert len(result.scored) == len(result.transactions)
    for parsed in result.scored:
        assert 0 <= parsed.confidence <= 100
        assert parsed.confidence >= OPTIONS.min_confidence
        assert parsed.factors.has_valid_date and parsed.factors.has_amount


def test_threshold_moves_lines_to_skipped():
    strict_threshold = ParsingOptions(min_confidence=95, reference_date=date(2025, 12, 31))
    result = parse_transactions(STATEMENT, strict_threshold, keywords=DEBIT_FALLBACK)

    assert "Coffee shop" not in [t.description for t in result.transactions]
    low = [s for s in result.skipped if s.line.startswith("18/11/2025 Coffee")]
    assert low[0].reason.startswith("Low confidence (90%)")
    assert low[0].confidence == 90


def test_strict_rejects_transactions_with_issues():
    text = "15/01/2015 Grocery Store -10.00 90.00"
    lenient = parse_transactions(text, OPTIONS)
    strict = parse_transactions(
        text, ParsingOptions(strict=True, reference_date=date(2025, 12, 31))
    )

    assert len(lenient.transactions) == 1
    assert strict.transactions == ()
    assert "Date is outside reasonable range" in strict.skipped[0].reason


def test_unmarked_amount_without_keyword_is_skipped():
    result = parse_transactions("18/11/2025 Coffee shop 4.50 20.00", OPTIONS)

    assert result.transactions == ()
    assert "No transaction amount found" in result.skipped[0].reason


def test_reversal_of_a_fee_is_a_credit():
    result = parse_transactions("18/11/2025 Annual fee reversal 25.00 525.00", OPTIONS)

    [tx] = result.transactions
    assert tx.credit_amount == Decimal("25.00")
    assert tx.debit_amount is None


def test_empty_text():
    result = parse_transactions("", OPTIONS)
    assert result.transactions == ()
    assert result.metadata.avg_confidence == 0
    assert result.metadata.parse_date.endswith("+00:00")


def test_to_dict_uses_money_strings():
    result = parse_transactions("18/11/2025 Grocery Store -125.50 5,937.50", OPTIONS)
    [row] = result.to_dict()["transactions"]
    assert row == {
        "date": "2025-11-18",
        "description": "Grocery Store",
        "debit_amount": "125.50",
        "credit_amount": None,
        "balance": "5937.50",
        "raw_line": "18/11/2025 Grocery Store -125.50 5,937.50",
    }
