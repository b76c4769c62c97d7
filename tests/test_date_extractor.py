from datetime import date

from statement_parser.extractors.dates import expand_two_digit_year, extract_date

TODAY = date(2024, 6, 30)


def test_day_first_vs_month_first():
    assert extract_date("03/04/2024", True, today=TODAY).value == "2024-04-03"
    assert extract_date("03/04/2024", False, today=TODAY).value == "2024-03-04"


def test_unambiguous_components_override_preference():
    assert extract_date("25/12/2023 Gift", False, today=TODAY).value == "2023-12-25"
    assert extract_date("12/25/2023 Gift", True, today=TODAY).value == "2023-12-25"


def test_iso_is_full_confidence():
    found = extract_date("2024-01-15 Transfer", today=TODAY)
    assert found.value == "2024-01-15"
    assert found.format == "YYYY-MM-DD"
    assert found.confidence == 100


def test_numeric_date_confidence_and_provenance():
    found = extract_date("15/01/2024 Grocery Store -125.50", today=TODAY)
    assert found.value == "2024-01-15"
    assert found.original == "15/01/2024"
    assert found.format == "DD/MM/YYYY"
    assert found.confidence == 80  # base plus recent


def test_month_names():
    assert extract_date("15 Jan 2024 Coffee", today=TODAY).value == "2024-01-15"
    assert extract_date("Paid on January 5th, 2024", today=TODAY).value == "2024-01-05"
    assert extract_date("15-Mar-2024 Coffee", today=TODAY).confidence == 100


def test_month_name_not_recent():
    found = extract_date("15 Jan 2022 Coffee", today=TODAY)
    assert found.value == "2022-01-15"
    assert found.confidence == 90


def test_two_digit_years():
    assert expand_two_digit_year(25) == 2025
    assert expand_two_digit_year(49) == 2049
    assert expand_two_digit_year(99) == 1999
    assert extract_date("17/11/25 Cash advance", today=date(2025, 12, 31)).value == "2025-11-17"
    assert extract_date("01/02/99 Old entry", today=TODAY).value == "1999-02-01"


def test_invalid_dates_are_rejected():
    assert extract_date("31/02/2024 Nope", today=TODAY) is None
    assert extract_date("15/01/1985 Too old", today=TODAY) is None
    assert extract_date("15/01/2030 Too far ahead", today=TODAY) is None
    assert extract_date("no date here", today=TODAY) is None


def test_first_valid_occurrence_wins():
    found = extract_date("31/02/2024 then 15/01/2024", today=TODAY)
    assert found.value == "2024-01-15"
    assert found.original == "15/01/2024"


def test_output_is_zero_padded():
    assert extract_date("5/1/2024 Coffee", today=TODAY).value == "2024-01-05"
