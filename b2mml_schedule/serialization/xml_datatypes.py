"""
Conversions between native scalars and their XML Schema (xsd) lexical forms.

Parsing is strict: surrounding whitespace is trimmed, but anything else that is
not a complete, in-range literal of the requested type raises `ParseError`.
Timestamps are handled separately from the other scalars because of their
time-zone awareness:

  - an aware datetime whose UTC offset is zero is "UTC",
  - a naive datetime is "unspecified" (the zone is unknown),
  - any other aware datetime, including one in the host's local zone, is
    converted to UTC by `to_utc_if_possible`.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
import math
import re
from typing import Any, Callable, TypeVar
import numpy as np

from b2mml_schedule.errors import DateTimeError, ParseError

T = TypeVar('T')

_INT32 = np.iinfo(np.int32)
_INT64 = np.iinfo(np.int64)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DOUBLE_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_DATETIME_RE = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"T(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})(?P<fraction>\.[0-9]+)?"
    r"(?P<zone>Z|[+-][0-9]{2}:[0-9]{2})?"
)

_DOUBLE_SPECIALS: dict[str, float] = {
    "NaN": math.nan,
    "INF": math.inf,
    "+INF": math.inf,
    "-INF": -math.inf,
}

_BOOLEAN_LITERALS: dict[str, bool] = {
    "true": True,
    "1": True,
    "false": False,
    "0": False,
}

# xsd whitespace; other Unicode spaces are part of the literal
_XML_WHITESPACE = " \t\r\n"

# Decimal exponents outside [-4, 15) are written in scientific notation
_POSITIONAL_MIN_EXP = -4
_POSITIONAL_MAX_EXP = 14


def _try_parse(parser: Callable[[str], T], type_name: str, literal: str | None) -> T:
    """
    Run `parser` on the trimmed literal, mapping any failure to `ParseError`.
    """
    if literal is None:
        raise ParseError(type_name, literal)
    try:
        return parser(literal.strip(_XML_WHITESPACE))
    except (ValueError, OverflowError) as e:
        raise ParseError(type_name, literal) from e


def _parse_integer(text: str, limits: Any) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise ValueError("not an integer literal")
    value = int(text)
    if value < int(limits.min) or value > int(limits.max):
        raise OverflowError(f"{value} is out of range")
    return value


def _parse_boolean(text: str) -> bool:
    try:
        return _BOOLEAN_LITERALS[text]
    except KeyError as e:
        raise ValueError("not a boolean literal") from e


def _parse_double(text: str) -> float:
    special = _DOUBLE_SPECIALS.get(text)
    if special is not None:
        return special
    if not _DOUBLE_RE.fullmatch(text):
        raise ValueError("not a double literal")
    value = float(text)
    if math.isinf(value):
        raise OverflowError(f"{text} is out of range")
    return value


def bool_to_string(value: bool) -> str:
    return "true" if value else "false"


def bool_from_string(literal: str | None) -> bool:
    """
    Parse an xsd:boolean ("true", "false", "1" or "0").

    Raises:
        ParseError: If the literal is not a valid boolean.
    """
    return _try_parse(_parse_boolean, "boolean", literal)


def int_to_string(value: int) -> str:
    """
    Format a 32-bit integer.

    Raises:
        ValueError: If the value does not fit in 32 bits.
    """
    if value < int(_INT32.min) or value > int(_INT32.max):
        raise ValueError(f"Value {value} does not fit in a 32-bit integer")
    return str(int(value))


def int_from_string(literal: str | None) -> int:
    """
    Parse an xsd:int (32-bit signed integer).

    Raises:
        ParseError: If the literal is malformed or out of range.
    """
    return _try_parse(lambda s: _parse_integer(s, _INT32), "int", literal)


def long_to_string(value: int) -> str:
    """
    Format a 64-bit integer.

    Raises:
        ValueError: If the value does not fit in 64 bits.
    """
    if value < int(_INT64.min) or value > int(_INT64.max):
        raise ValueError(f"Value {value} does not fit in a 64-bit integer")
    return str(int(value))


def long_from_string(literal: str | None) -> int:
    """
    Parse an xsd:long (64-bit signed integer).

    Raises:
        ParseError: If the literal is malformed or out of range.
    """
    return _try_parse(lambda s: _parse_integer(s, _INT64), "long", literal)


def double_to_string(value: float) -> str:
    """
    Format an xsd:double using the shortest digits that round-trip.

    Moderate magnitudes are written positionally ("10.1", "0", "-3.8"), very
    large or small ones in scientific notation with a signed two-digit exponent
    ("2E+15", "1E-05"). NaN and infinities use the xsd literals.

    Args:
        value (float):
            The value to format.

    Returns:
        str:
            The canonical lexical form.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"

    scientific = np.format_float_scientific(value, unique=True, trim='-', exp_digits=2)
    mantissa, exponent = scientific.split("e")
    if value == 0 or _POSITIONAL_MIN_EXP <= int(exponent) <= _POSITIONAL_MAX_EXP:
        return np.format_float_positional(value, unique=True, trim='-')
    return f"{mantissa}E{exponent}"


def double_from_string(literal: str | None) -> float:
    """
    Parse an xsd:double. Locale variants such as a decimal comma are rejected.

    Raises:
        ParseError: If the literal is not a valid double.
    """
    return _try_parse(_parse_double, "double", literal)


def _parse_datetime(text: str) -> datetime:
    match = _DATETIME_RE.fullmatch(text)
    if match is None:
        raise ValueError("not a dateTime literal")

    tzinfo: timezone | None = None
    zone = match.group("zone")
    if zone == "Z":
        tzinfo = timezone.utc
    elif zone is not None:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tzinfo = timezone(sign * offset)

    # xsd allows any number of fractional digits; keep microsecond precision
    fraction = match.group("fraction")
    microsecond = int(fraction[1:7].ljust(6, "0")) if fraction else 0

    value = datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        microsecond,
        tzinfo=tzinfo,
    )
    if tzinfo is not None:
        # The UTC equivalent must be representable too, e.g. 9999-12-31T23:30:00-01:00 is not
        value.astimezone(timezone.utc)
    return value


def datetime_from_string(literal: str | None) -> datetime:
    """
    Parse an xsd:dateTime.

    "Z" yields a UTC datetime, a numeric offset yields an aware datetime with
    that fixed offset, and no zone yields a naive ("unspecified") datetime.

    Raises:
        ParseError: If the literal is not a valid dateTime.
    """
    return _try_parse(_parse_datetime, "dateTime", literal)


def datetime_to_string(value: datetime) -> str:
    """
    Format a datetime as xsd:dateTime. UTC is written with the "Z" designator.
    """
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")

    offset = value.utcoffset()
    if offset is None:
        return text
    if offset == timedelta(0):
        return text + "Z"

    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def is_utc(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() == timedelta(0)


def to_utc_if_possible(value: datetime) -> datetime:
    """
    Normalize the time zone of a timestamp that was read from a message.

    UTC and unspecified (naive) timestamps are returned unchanged; the latter
    cannot be helped. Any other aware timestamp, whether it carries a fixed
    offset or the host's local zone, is converted to UTC.

    Args:
        value (datetime):
            The timestamp to normalize.

    Returns:
        datetime:
            A UTC or naive datetime.
    """
    if value.tzinfo is None or is_utc(value):
        return value
    return value.astimezone(timezone.utc)


def expect_utc(value: datetime) -> None:
    """
    Raises:
        DateTimeError: If the timestamp is not in UTC.
    """
    if not is_utc(value):
        raise DateTimeError("DateTime kind must be UTC")


def datetime_for_serialization(value: datetime) -> datetime:
    """
    Return the timestamp unchanged after checking that it may be written.

    Raises:
        DateTimeError: If the timestamp is not in UTC.
    """
    expect_utc(value)
    return value
