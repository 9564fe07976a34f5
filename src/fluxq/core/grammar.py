"""
Annotation grammar and data type codes of the annotated Flux CSV format.

Defines the column data types, the annotation kinds, and zero-IO helpers that classify
and split response lines. The parser in fluxq.io.parser builds on these helpers; it never
inspects raw cell text on its own.

Design principles
-----------------
1) Enum serialized values are the exact wire codes (e.g. ``dateTime:RFC3339Nano``).
2) Matching is positional: annotation cells, header labels and data cells line up by index.
3) Cell 0 is reserved on every row; it carries the annotation marker or is empty.

Examples
--------
>>> from fluxq.core.grammar import DataType, data_type_from_value, split_csv_line
>>> data_type_from_value("long") is DataType.LONG
True
>>> split_csv_line(',_result,"a,b",5')
['', '_result', 'a,b', '5']
"""

from __future__ import annotations

import csv
from enum import Enum

from .constants import (
    ANNOTATION_DATATYPE,
    ANNOTATION_DEFAULT,
    ANNOTATION_GROUP,
    ANNOTATION_PREFIX,
    DEFAULT_DELIMITER,
    ERROR_HEADER,
    FIRST_COLUMN_INDEX,
)
from .errors import SchemaConsistencyError

__all__ = [
    "DataType",
    "AnnotationKind",
    "data_type_from_value",
    "annotation_kind_from_token",
    "is_annotation_token",
    "parse_group_flag",
    "split_csv_line",
    "is_blank_line",
    "is_error_header",
]


class DataType(str, Enum):
    """Column data type codes as they appear in a ``#datatype`` row."""

    LONG = "long"
    UNSIGNED_LONG = "unsignedLong"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"
    DURATION = "duration"
    BASE64_BINARY = "base64Binary"
    DATE_TIME_RFC3339 = "dateTime:RFC3339"
    DATE_TIME_RFC3339_NANO = "dateTime:RFC3339Nano"

    @property
    def is_textual(self) -> bool:
        """True when an empty cell is a legal value (no typed parse needed)."""
        return self in (DataType.STRING, DataType.BASE64_BINARY)

    @property
    def is_timestamp(self) -> bool:
        return self in (DataType.DATE_TIME_RFC3339, DataType.DATE_TIME_RFC3339_NANO)


class AnnotationKind(str, Enum):
    """Annotation rows that may precede a header row."""

    DATATYPE = ANNOTATION_DATATYPE
    GROUP = ANNOTATION_GROUP
    DEFAULT = ANNOTATION_DEFAULT


# Older servers emit a bare "dateTime" code for RFC3339 columns.
_DATA_TYPE_ALIASES: dict[str, DataType] = {"dateTime": DataType.DATE_TIME_RFC3339}


def data_type_from_value(value: str) -> DataType:
    """
    Resolve a ``#datatype`` cell to a DataType.

    Args:
        value (str): Wire code, e.g. ``"double"`` or ``"dateTime:RFC3339"``.

    Returns:
        DataType: The matching enum member.

    Raises:
        SchemaConsistencyError: If the code is unknown.
    """
    if value in _DATA_TYPE_ALIASES:
        return _DATA_TYPE_ALIASES[value]
    try:
        return DataType(value)
    except ValueError as exc:
        raise SchemaConsistencyError(f"unknown column data type {value!r}") from exc


def is_annotation_token(token: str) -> bool:
    return token.startswith(ANNOTATION_PREFIX)


def annotation_kind_from_token(token: str) -> AnnotationKind | None:
    """
    Map the first cell of an annotation row to its kind.

    Returns:
        AnnotationKind | None: None for ``#``-prefixed rows that are not one of the
        three known annotations (treated as comments by the parser).
    """
    try:
        return AnnotationKind(token)
    except ValueError:
        return None


def parse_group_flag(value: str) -> bool:
    """Parse a ``#group`` cell; only the exact tokens ``true`` and ``false`` are accepted."""
    if value == "true":
        return True
    if value == "false":
        return False
    raise SchemaConsistencyError(f"invalid #group flag {value!r}; expected 'true' or 'false'")


def split_csv_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """
    Split one response line into cells, honouring double-quote quoting.

    Args:
        line (str): A single line without its terminator.
        delimiter (str): One-character cell delimiter.

    Returns:
        list[str]: Cells in positional order; ``[]`` for an empty line.
    """
    for cells in csv.reader([line], delimiter=delimiter):
        return cells
    return []


def is_blank_line(line: str) -> bool:
    """A blank line marks a table boundary and resets the active schema."""
    return not line.strip()


def is_error_header(cells: list[str]) -> bool:
    """True for the header row of a server error table (``,error,reference``)."""
    labels = tuple(cells[FIRST_COLUMN_INDEX : FIRST_COLUMN_INDEX + len(ERROR_HEADER)])
    return labels == ERROR_HEADER
