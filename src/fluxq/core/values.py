"""
Typed decoding of single cells of the annotated Flux CSV format.

Responsibilities
- Substitute the column default for empty cells.
- Convert the resulting text to the Python value for the column's declared DataType.
- Raise DecodeError (never return a sentinel) when no usable value remains.

Type mapping
- long / unsignedLong / duration -> int (duration is integer nanoseconds)
- double -> float; ``+Inf`` / ``-Inf`` -> math.inf / -math.inf
- boolean -> bool (case-sensitive ``true`` / ``false``)
- dateTime:RFC3339 / dateTime:RFC3339Nano -> timezone-aware datetime
- string / base64Binary -> str, unchanged

Notes
- Python datetimes carry microseconds; fractional digits beyond six are truncated.
- Zero-IO (stdlib only).
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from .constants import NEGATIVE_INFINITY, POSITIVE_INFINITY
from .errors import DecodeError
from .grammar import DataType
from .tables import FluxColumn

__all__ = [
    "decode_cell",
    "parse_rfc3339",
]

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)

_INTEGER = re.compile(r"^[+-]?\d+$")

_DOUBLE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 / RFC3339Nano timestamp into an aware datetime.

    Args:
        value (str): Timestamp text, e.g. ``2019-11-12T08:09:04.795385031Z``.

    Returns:
        datetime: Timezone-aware datetime (microsecond precision).

    Raises:
        ValueError: If the text is not a valid RFC3339 timestamp.
    """
    m = _RFC3339.match(value)
    if m is None:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    year, month, day, hour, minute, second = (int(g) for g in m.groups()[:6])
    fraction = m.group(7) or ""
    micros = int((fraction + "000000")[:6])
    if m.group(8):
        tz = timezone.utc
    else:
        sign = -1 if m.group(9) == "-" else 1
        offset = timedelta(hours=int(m.group(10)), minutes=int(m.group(11)))
        tz = timezone(sign * offset)
    return datetime(year, month, day, hour, minute, second, micros, tzinfo=tz)


def _parse_int(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"not an integer: {text!r}")
    return int(text)


def _parse_double(text: str) -> float:
    if text == POSITIVE_INFINITY:
        return math.inf
    if text == NEGATIVE_INFINITY:
        return -math.inf
    if not _DOUBLE.fullmatch(text):
        raise ValueError(f"not a number: {text!r}")
    return float(text)


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _parse_unsigned(text: str) -> int:
    number = _parse_int(text)
    if number < 0:
        raise ValueError(f"negative value for unsigned column: {text!r}")
    return number


_PARSERS = {
    DataType.LONG: _parse_int,
    DataType.UNSIGNED_LONG: _parse_unsigned,
    DataType.DURATION: _parse_int,
    DataType.DOUBLE: _parse_double,
    DataType.BOOLEAN: _parse_bool,
    DataType.DATE_TIME_RFC3339: parse_rfc3339,
    DataType.DATE_TIME_RFC3339_NANO: parse_rfc3339,
}


def decode_cell(column: FluxColumn, raw: str) -> Any:
    """
    Decode one cell against its column definition.

    Args:
        column (FluxColumn): Column the cell belongs to.
        raw (str): Cell text as split from the line.

    Returns:
        Any: Typed value per the module-level type mapping.

    Raises:
        DecodeError: If the cell is empty with no usable default for a non-string
            column, or the text does not parse as the declared type.
    """
    text = raw if raw != "" else column.default_value
    if column.data_type.is_textual:
        return text
    if text == "":
        raise DecodeError(
            f"empty value for {column.data_type.value} column {column.label!r} and no default",
            column=column.label,
            data_type=column.data_type.value,
            value=text,
        )
    try:
        return _PARSERS[column.data_type](text)
    except ValueError as exc:
        raise DecodeError(
            f"cannot decode {text!r} as {column.data_type.value} for column {column.label!r}",
            column=column.label,
            data_type=column.data_type.value,
            value=text,
        ) from exc
