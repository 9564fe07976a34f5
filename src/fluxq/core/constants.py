"""
Wire-format constants for the annotated Flux CSV response format.

Defines the annotation markers, reserved header labels, special numeric tokens and
default dialect values shared by the parser, the dialect model and the transport.
This module is zero-IO and uses only the Python standard library.

Notes:
    - Every row of the format starts with a reserved cell: the annotation marker
      for annotation rows, and an empty cell for header and data rows.
    - Schema columns therefore start at cell index ``FIRST_COLUMN_INDEX``.
"""

from __future__ import annotations

__all__ = [
    "ANNOTATION_PREFIX",
    "ANNOTATION_DATATYPE",
    "ANNOTATION_GROUP",
    "ANNOTATION_DEFAULT",
    "ANNOTATIONS",
    "FIRST_COLUMN_INDEX",
    "ERROR_HEADER",
    "RESULT_COLUMN",
    "TABLE_COLUMN",
    "POSITIVE_INFINITY",
    "NEGATIVE_INFINITY",
    "DEFAULT_DELIMITER",
    "DEFAULT_DATE_TIME_FORMAT",
    "QUERY_PATH",
    "COLUMN_METADATA_KEY",
]

# Annotation rows are recognized by this prefix on their first cell.
ANNOTATION_PREFIX: str = "#"

ANNOTATION_DATATYPE: str = "#datatype"
ANNOTATION_GROUP: str = "#group"
ANNOTATION_DEFAULT: str = "#default"
ANNOTATIONS: tuple[str, ...] = (ANNOTATION_DATATYPE, ANNOTATION_GROUP, ANNOTATION_DEFAULT)

# Cell 0 of each row is reserved (annotation marker or empty).
FIRST_COLUMN_INDEX: int = 1

# Header labels of a server-side error table.
ERROR_HEADER: tuple[str, str] = ("error", "reference")

RESULT_COLUMN: str = "result"
TABLE_COLUMN: str = "table"

POSITIVE_INFINITY: str = "+Inf"
NEGATIVE_INFINITY: str = "-Inf"

DEFAULT_DELIMITER: str = ","
DEFAULT_DATE_TIME_FORMAT: str = "RFC3339"

QUERY_PATH: str = "/api/v2/query"

# Dataclass field metadata key naming the source column for the record mapper.
COLUMN_METADATA_KEY: str = "column"
