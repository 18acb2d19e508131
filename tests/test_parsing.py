from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from explorer.parsing import (
    excel_serial_to_date,
    format_axis_value,
    is_date_like,
    is_excel_serial,
    is_numeric_like,
    parse_number,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("(1.234,56)", -1234.56),
        ("1234.56", 1234.56),
        ("-5", -5.0),
        ("R$ 10,50", 10.5),
        ("12,3", 12.3),
        ("1,234", 1234.0),
        ("1.234.567", 1234567.0),
        ("1.5", 1.5),
        ("0.125", 125.0),
        ("45%", 45.0),
        ("  $ 2,000.75 ", 2000.75),
        ("12,", 12.0),
    ],
)
def test_parse_number_mixed_conventions(text, expected):
    assert parse_number(text) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "", "abc", "-", ".", ",", "()", "1-2", "1.234,56,7"])
def test_parse_number_falls_back_to_zero(value):
    assert parse_number(value) == 0


def test_parse_number_native_values():
    assert parse_number(42) == 42.0
    assert parse_number(3.5) == 3.5
    assert parse_number(float("inf")) == 0
    assert parse_number(float("nan")) == 0
    assert parse_number(True) == 0


def test_parse_number_ignores_dates_and_serials():
    assert parse_number(datetime(2024, 1, 1)) == 0
    assert parse_number(date(2024, 1, 1)) == 0
    assert parse_number(45000) == 0
    assert parse_number(25569) == 25569.0


def test_parse_number_result_is_always_finite():
    for value in ["9" * 400, "-" + "9" * 400, "1e5", None, "R$"]:
        assert math.isfinite(parse_number(value))


def test_strict_mode_reports_failures():
    with pytest.raises(ValueError):
        parse_number("abc", strict=True)
    with pytest.raises(ValueError):
        parse_number(None, strict=True)
    with pytest.raises(ValueError):
        parse_number(45000, strict=True)
    assert parse_number("1.234,56", strict=True) == pytest.approx(1234.56)
    assert parse_number("0", strict=True) == 0


def test_excel_serial_window():
    assert is_excel_serial(25569.5) is True
    assert is_excel_serial(24000) is False
    assert is_excel_serial(70000) is False
    assert is_excel_serial(25569) is False
    assert is_excel_serial(60000) is False
    assert is_excel_serial("45000") is False
    assert is_excel_serial(True) is False


def test_excel_serial_to_date():
    assert excel_serial_to_date(45292) == datetime(2024, 1, 1)
    assert excel_serial_to_date(45292.5) == datetime(2024, 1, 1, 12)


def test_numeric_recognizer():
    for value in [10, 2.5, "12", "-3.75", "1,5", "1.234,56", "1,234.56", " 7 "]:
        assert is_numeric_like(value), value
    for value in ["abc", "   ", "12 apples", 45000, "2024-01-01"]:
        assert not is_numeric_like(value), value


def test_non_ascii_digits_are_not_numbers():
    for value in ["١٢", "１２", "١,٥"]:
        assert not is_numeric_like(value), value
        assert parse_number(value) == 0


def test_date_recognizer():
    assert is_date_like(datetime(2024, 1, 1))
    assert is_date_like(45000)
    assert is_date_like("31/12/2023")
    assert is_date_like("1/2/24")
    assert is_date_like("2024-01-01T10:00:00")
    assert not is_date_like("31/12/2023 extra")
    assert not is_date_like("hello")
    assert not is_date_like(12)


def test_axis_labels():
    assert format_axis_value(datetime(2024, 3, 5)) == "05/03/2024"
    assert format_axis_value(45292) == "01/01/2024"
    assert format_axis_value(30000) == "30000"
    assert format_axis_value(2.5) == "2.5"
    assert format_axis_value(3.0) == "3"
    assert format_axis_value("North") == "North"
