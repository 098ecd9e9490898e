from __future__ import annotations
from datetime import datetime, timedelta, timezone
import math
import pytest
import numpy as np

from b2mml_schedule.errors import DateTimeError, ParseError
from b2mml_schedule.serialization.xml_datatypes import (
    bool_from_string,
    bool_to_string,
    datetime_for_serialization,
    datetime_from_string,
    datetime_to_string,
    double_from_string,
    double_to_string,
    expect_utc,
    int_from_string,
    int_to_string,
    is_utc,
    long_from_string,
    long_to_string,
    to_utc_if_possible,
)

INT32 = np.iinfo(np.int32)
INT64 = np.iinfo(np.int64)


@pytest.mark.parametrize("value, expected", [
    (0.0, "0"),
    (10.1, "10.1"),
    (-3.8, "-3.8"),
    (2e15, "2E+15"),
    (1e-05, "1E-05"),
    (0.0001, "0.0001"),
    (123456789012345.0, "123456789012345"),
    (math.inf, "INF"),
    (-math.inf, "-INF"),
    (5, "5"),
])
def test_double_to_string(value: float, expected: str) -> None:
    assert double_to_string(value) == expected


def test_double_to_string_nan() -> None:
    assert double_to_string(math.nan) == "NaN"
    assert math.isnan(double_from_string("NaN"))


@pytest.mark.parametrize("value", [0.1, 1 / 3, -2.5e-7, 1e300, 5e-324, 41.9, -1e15, 12.2])
def test_double_round_trip(value: float) -> None:
    assert double_from_string(double_to_string(value)) == value


@pytest.mark.parametrize("literal, expected", [
    ("0", 0.0),
    (" 10.1 ", 10.1),
    ("-3.8", -3.8),
    ("2E+15", 2e15),
    ("1e-5", 1e-5),
    (".5", 0.5),
    ("INF", math.inf),
    ("-INF", -math.inf),
    ("1.7976931348623157E+308", 1.7976931348623157e308),
])
def test_double_from_string(literal: str, expected: float) -> None:
    assert double_from_string(literal) == expected


@pytest.mark.parametrize("literal", [
    "", " ", "4,5", "1.2.3", "rtt", "inf", "1e", None,
    "\u0664\u0661.\u0669", "\u00a010.1", "1e400", "-1e400",
])
def test_double_from_string_invalid(literal: str | None) -> None:
    with pytest.raises(ParseError, match="Failed to parse double from"):
        double_from_string(literal)


@pytest.mark.parametrize("literal, expected", [
    ("true", True),
    ("false", False),
    ("  1 ", True),
    ("true  ", True),
    ("  0", False),
    (" false", False),
])
def test_bool_from_string(literal: str, expected: bool) -> None:
    assert bool_from_string(literal) is expected


@pytest.mark.parametrize("literal", ["fafse", "", "True", "yes", "2"])
def test_bool_from_string_invalid(literal: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        bool_from_string(literal)

    assert str(exc_info.value) == f"Failed to parse boolean from \"{literal}\""
    assert exc_info.value.type_name == "boolean"
    assert exc_info.value.literal == literal


def test_bool_to_string() -> None:
    assert bool_to_string(True) == "true"
    assert bool_to_string(False) == "false"


@pytest.mark.parametrize("value", [int(INT32.min), int(INT32.max), 0, -1, 42])
def test_int_round_trip(value: int) -> None:
    assert int_from_string(int_to_string(value)) == value


@pytest.mark.parametrize("value", [int(INT64.min), int(INT64.max), int(INT32.max) + 1, 0])
def test_long_round_trip(value: int) -> None:
    assert long_from_string(long_to_string(value)) == value


@pytest.mark.parametrize("literal", [
    "5.3", " ", "", "rtt", "2147483648", "-2147483649", "1e3", "\u0663", "\u0664\u0661", "\u00a07",
])
def test_int_from_string_invalid(literal: str) -> None:
    with pytest.raises(ParseError, match="Failed to parse int from"):
        int_from_string(literal)


@pytest.mark.parametrize("literal", [
    "5.3", " ", "rtt", "9223372036854775808", "-9223372036854775809", "\u0663", "7\u2003",
])
def test_long_from_string_invalid(literal: str) -> None:
    with pytest.raises(ParseError, match="Failed to parse long from"):
        long_from_string(literal)


def test_integer_from_string_trims_whitespace() -> None:
    assert int_from_string(" -7 ") == -7
    assert int_from_string("\t\r\n8\n") == 8
    assert long_from_string("+12") == 12


def test_integer_to_string_out_of_range() -> None:
    with pytest.raises(ValueError, match="32-bit"):
        int_to_string(int(INT32.max) + 1)

    with pytest.raises(ValueError, match="64-bit"):
        long_to_string(int(INT64.min) - 1)


def test_datetime_from_string_zones() -> None:
    utc = datetime_from_string("2019-04-24T15:00:00Z")
    assert utc == datetime(2019, 4, 24, 15, tzinfo=timezone.utc)
    assert is_utc(utc)

    naive = datetime_from_string("2019-04-24T15:00:00")
    assert naive.tzinfo is None
    assert naive.hour == 15

    offset = datetime_from_string("2019-04-24T17:00:00+02:00")
    assert offset.utcoffset() == timedelta(hours=2)
    assert not is_utc(offset)

    negative = datetime_from_string("2019-04-24T10:30:00-01:30")
    assert negative.utcoffset() == -timedelta(hours=1, minutes=30)


def test_datetime_from_string_fraction() -> None:
    value = datetime_from_string("2019-04-24T15:00:00.1234567Z")
    assert value.microsecond == 123456


@pytest.mark.parametrize("literal", [
    "2019-04-24T14:1025Z", "2019-13-01T00:00:00Z", "2019-04-24", "", "now",
    "\u0662019-04-24T15:00:00Z", "9999-12-31T23:30:00-01:00", "0001-01-01T00:30:00+01:00",
])
def test_datetime_from_string_invalid(literal: str) -> None:
    with pytest.raises(ParseError, match="Failed to parse dateTime from"):
        datetime_from_string(literal)


@pytest.mark.parametrize("value, expected", [
    (datetime(2019, 5, 9, 12, 20, 19, tzinfo=timezone.utc), "2019-05-09T12:20:19Z"),
    (datetime(2019, 5, 9, 12, 20, 19, 250000, tzinfo=timezone.utc), "2019-05-09T12:20:19.25Z"),
    (datetime(2019, 5, 9, 12, 20, 19), "2019-05-09T12:20:19"),
    (datetime(2019, 5, 9, 12, 20, 19, tzinfo=timezone(timedelta(hours=-5))), "2019-05-09T12:20:19-05:00"),
])
def test_datetime_to_string(value: datetime, expected: str) -> None:
    assert datetime_to_string(value) == expected
    assert datetime_from_string(expected) == value


def test_to_utc_if_possible() -> None:
    utc = datetime(2019, 4, 24, 15, tzinfo=timezone.utc)
    assert to_utc_if_possible(utc) is utc

    naive = datetime(2019, 4, 24, 15)
    assert to_utc_if_possible(naive) is naive

    plus_two = datetime(2019, 4, 24, 17, tzinfo=timezone(timedelta(hours=2)))
    converted = to_utc_if_possible(plus_two)
    assert is_utc(converted)
    assert converted.hour == 15

    minus_one = datetime(2019, 4, 24, 22, tzinfo=timezone(timedelta(hours=-1)))
    converted = to_utc_if_possible(minus_one)
    assert is_utc(converted)
    assert (converted.day, converted.hour) == (24, 23)


def test_to_utc_if_possible_local_zone() -> None:
    local = datetime(2020, 2, 20, 13, 9).astimezone()
    converted = to_utc_if_possible(local)

    assert is_utc(converted)
    assert converted == local
    assert converted.replace(tzinfo=None) == (local - local.utcoffset()).replace(tzinfo=None)


def test_expect_utc() -> None:
    expect_utc(datetime(2020, 2, 20, 13, 9, tzinfo=timezone.utc))

    with pytest.raises(DateTimeError, match="DateTime kind must be UTC"):
        expect_utc(datetime(2020, 2, 20, 13, 9))

    with pytest.raises(DateTimeError, match="DateTime kind must be UTC"):
        expect_utc(datetime(2020, 2, 20, 13, 9).astimezone(timezone(timedelta(hours=3))))


def test_datetime_for_serialization() -> None:
    value = datetime(2020, 2, 20, 13, 9, tzinfo=timezone.utc)
    assert datetime_for_serialization(value) is value

    with pytest.raises(DateTimeError):
        datetime_for_serialization(datetime(2020, 2, 20, 13, 9))
