from datetime import date

from core.formatting import format_currency, format_date, format_signed, parse_date, round_half_up


def test_format_currency_groups_thousands_with_ruble_sign():
    result = format_currency(1234)
    assert "1 234" in result
    assert "₽" in result
    assert result == "1 234 ₽"


def test_format_currency_drops_decimals():
    assert format_currency(999.5) == "1 000 ₽"
    assert format_currency(0) == "0 ₽"
    assert format_currency(1234567.4) == "1 234 567 ₽"


def test_format_currency_negative():
    assert format_currency(-4000) == "-4 000 ₽"
    assert format_currency(-0.2) == "0 ₽"


def test_format_signed():
    assert format_signed(5000, "income") == "+5 000 ₽"
    assert format_signed(1000, "expense") == "-1 000 ₽"


def test_format_date():
    assert format_date("2025-03-01") == "01.03.2025"
    assert format_date("2025-12-31T23:59:00") == "31.12.2025"


def test_format_date_returns_garbage_unchanged():
    assert format_date("not a date") == "not a date"
    assert format_date("") == ""


def test_parse_date_variants():
    assert parse_date("2025-01-15") == date(2025, 1, 15)
    assert parse_date("2025-01-15T10:00:00Z") == date(2025, 1, 15)
    assert parse_date("2025/01/15") == date(2025, 1, 15)
    assert parse_date("15.01.2025") == date(2025, 1, 15)
    assert parse_date("") is None
    assert parse_date("2025-13-01") is None


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4) == 2
