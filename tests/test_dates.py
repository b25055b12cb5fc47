"""Tests for date and amount parsing helpers."""
from datetime import date, datetime

import pytest

from dompet.utils.amounts import parse_amount
from dompet.utils.dates import check_month, month_label, parse_date, shift_month
from dompet.utils.privacy import describe_record, obfuscate_description


def test_parse_date_iso():
    assert parse_date("2026-03-01") == date(2026, 3, 1)
    assert parse_date(" 2026-03-01 ") == date(2026, 3, 1)


def test_parse_date_keeps_local_calendar_day():
    """A late-evening timestamp with an offset stays on its own day."""
    assert parse_date("2026-03-31T23:30:00+07:00") == date(2026, 3, 31)
    assert parse_date(datetime(2026, 3, 31, 23, 59)) == date(2026, 3, 31)


def test_parse_date_invalid():
    with pytest.raises(ValueError):
        parse_date("2026-02-30")
    with pytest.raises(ValueError):
        parse_date("yesterday")
    with pytest.raises(ValueError):
        parse_date("")


def test_shift_month_wraps_years():
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 1, -5) == (2025, 8)
    assert shift_month(2025, 12, 1) == (2026, 1)
    assert shift_month(2026, 6, 0) == (2026, 6)
    assert shift_month(2026, 3, -27) == (2023, 12)


def test_month_label_and_check():
    assert month_label(8) == "Agu"
    assert month_label(12) == "Des"
    assert check_month(12) == 12
    with pytest.raises(ValueError):
        check_month(13)


def test_parse_amount_formats():
    assert parse_amount(50000) == 50000.0
    assert parse_amount("50000") == 50000.0
    assert parse_amount("12.5") == 12.5
    assert parse_amount("50.000") == 50000.0
    assert parse_amount("1.250.000") == 1250000.0
    assert parse_amount("Rp 20.000") == 20000.0


@pytest.mark.parametrize("value", [None, "", "   ", "abc", "inf", "nan", float("inf"), True])
def test_parse_amount_rejects(value):
    with pytest.raises(ValueError):
        parse_amount(value)


def test_obfuscation_for_logs():
    assert obfuscate_description("Batagor 2x") == "******* **"
    assert obfuscate_description(None) == "***"
    record = describe_record({"id": "t1", "kind": "expense", "description": "Secret", "date": "2026-03-01"})
    assert record["description"] == "******"
    assert record["kind"] == "expense"
