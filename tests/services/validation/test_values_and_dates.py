from __future__ import annotations

from datetime import date, datetime

from sheetgate.services.validation.dates import parse_date, to_iso
from sheetgate.services.validation.values import (
    ValueKind,
    as_text,
    fraction_digits,
    is_empty,
    kind_of,
    to_number,
)


def test_kind_of_classifies_raw_values() -> None:
    assert kind_of(None) is ValueKind.EMPTY
    assert kind_of(float("nan")) is ValueKind.EMPTY
    assert kind_of(True) is ValueKind.BOOLEAN
    assert kind_of(3) is ValueKind.NUMBER
    assert kind_of("3") is ValueKind.TEXT
    assert kind_of(datetime(2024, 1, 1)) is ValueKind.DATE
    assert kind_of([1]) is ValueKind.OTHER


def test_whitespace_is_not_empty() -> None:
    # Only "" counts as empty; "  " is a (short) text value
    assert is_empty("")
    assert not is_empty("  ")


def test_to_number() -> None:
    assert to_number("1,234.5") == 1234.5
    assert to_number(" -2 ") == -2.0
    assert to_number("inf") is None
    assert to_number("12abc") is None
    assert to_number(False) is None


def test_as_text() -> None:
    assert as_text(3.0) == "3"
    assert as_text(2.5) == "2.5"
    assert as_text(True) == "true"
    assert as_text(date(2024, 5, 1)) == "2024-05-01"
    assert as_text(None) == ""


def test_fraction_digits() -> None:
    assert fraction_digits("1.250") == 3
    assert fraction_digits(7) == 0
    assert fraction_digits(25.0) == 0
    assert fraction_digits(2.75) == 2
    assert fraction_digits("x") is None


def test_parse_date_formats() -> None:
    assert parse_date("2024-03-05") == date(2024, 3, 5)
    assert parse_date("2024-03-05 10:00:00") == date(2024, 3, 5)
    assert parse_date("4/3/2025") == date(2025, 4, 3)
    assert parse_date(datetime(2024, 1, 2, 3, 4)) == date(2024, 1, 2)
    assert parse_date("2024-02-30") is None
    assert parse_date("March 5") is None
    assert parse_date(20240305) is None


def test_to_iso() -> None:
    assert to_iso("12/25/2020") == "2020-12-25"
    assert to_iso("nope") is None
