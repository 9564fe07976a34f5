import math
from datetime import datetime, timedelta, timezone

import pytest

from fluxq.core.errors import DecodeError
from fluxq.core.grammar import DataType
from fluxq.core.tables import FluxColumn
from fluxq.core.values import decode_cell, parse_rfc3339


def col(data_type: DataType, default: str = "", label: str = "v") -> FluxColumn:
    return FluxColumn(index=0, label=label, data_type=data_type, default_value=default)


def test_numeric_and_boolean_cells() -> None:
    assert decode_cell(col(DataType.LONG), "-42") == -42
    assert decode_cell(col(DataType.UNSIGNED_LONG), "18446744073709551615") == 2**64 - 1
    assert decode_cell(col(DataType.DURATION), "1500000000") == 1_500_000_000
    assert decode_cell(col(DataType.DOUBLE), "0.25") == 0.25
    assert decode_cell(col(DataType.BOOLEAN), "true") is True
    assert decode_cell(col(DataType.BOOLEAN), "false") is False


def test_double_infinities() -> None:
    assert decode_cell(col(DataType.DOUBLE), "+Inf") == math.inf
    assert decode_cell(col(DataType.DOUBLE), "-Inf") == -math.inf


def test_textual_cells_pass_through() -> None:
    assert decode_cell(col(DataType.STRING), "") == ""
    assert decode_cell(col(DataType.BASE64_BINARY), "aGVsbG8=") == "aGVsbG8="


def test_default_substitution_for_empty_cell() -> None:
    assert decode_cell(col(DataType.STRING, default="_result"), "") == "_result"
    assert decode_cell(col(DataType.LONG, default="7"), "") == 7
    # a non-empty cell wins over the default
    assert decode_cell(col(DataType.LONG, default="7"), "3") == 3


def test_empty_non_string_without_default_fails() -> None:
    with pytest.raises(DecodeError) as ei:
        decode_cell(col(DataType.DOUBLE, label="_value"), "")
    assert ei.value.column == "_value"
    assert ei.value.data_type == "double"


@pytest.mark.parametrize(
    "data_type,text",
    [
        (DataType.LONG, "1.5"),
        (DataType.UNSIGNED_LONG, "-1"),
        (DataType.BOOLEAN, "True"),
        (DataType.DOUBLE, "abc"),
        (DataType.DOUBLE, "1_000"),
        (DataType.DOUBLE, "infinity"),
        (DataType.DOUBLE, "nan"),
        (DataType.DOUBLE, " 1.5"),
        (DataType.LONG, "12\n"),
        (DataType.DATE_TIME_RFC3339, "yesterday"),
    ],
)
def test_malformed_cells_raise_decode_error(data_type: DataType, text: str) -> None:
    with pytest.raises(DecodeError) as ei:
        decode_cell(col(data_type), text)
    assert ei.value.value == text


def test_parse_rfc3339_nano_truncates_to_microseconds() -> None:
    ts = parse_rfc3339("2019-11-12T08:09:04.795385031Z")
    assert ts == datetime(2019, 11, 12, 8, 9, 4, 795385, tzinfo=timezone.utc)


def test_parse_rfc3339_offsets() -> None:
    ts = parse_rfc3339("2020-01-01T10:00:00+02:00")
    assert ts.utcoffset() == timedelta(hours=2)
    assert ts.astimezone(timezone.utc).hour == 8
    assert parse_rfc3339("2020-01-01T00:00:00.5-01:30").microsecond == 500000


def test_parse_rfc3339_rejects_missing_zone() -> None:
    with pytest.raises(ValueError):
        parse_rfc3339("2020-01-01T00:00:00")


@pytest.mark.parametrize("text,expected", [("1e3", 1000.0), (".5", 0.5), ("-2.", -2.0), ("+7", 7.0)])
def test_double_numeric_forms(text: str, expected: float) -> None:
    assert decode_cell(col(DataType.DOUBLE), text) == expected
