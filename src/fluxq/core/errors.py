"""
Core exception types raised while decoding the annotated Flux CSV format.

Provides typed exceptions that let callers tell "my parser failed" apart from
"the query itself failed":
- FluxCsvError and its subclasses for client-side parsing failures.
- FluxQueryError for query-execution errors reported by the server inside the stream.
- MappingError for unsupported record mapper targets.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Transport and HTTP failures live in fluxq.io.errors.

Examples:
    Distinguish a server-side failure from a decode failure.

    >>> from fluxq.core.errors import FluxCsvError, FluxQueryError
    >>> try:
    ...     raise FluxQueryError("bounds contain zero time", "897")
    ... except FluxCsvError:
    ...     kind = "parser"
    ... except FluxQueryError as e:
    ...     kind = f"query:{e.reference}"
    >>> kind
    'query:897'
"""

from __future__ import annotations

__all__ = [
    "FluxCsvError",
    "SchemaConsistencyError",
    "DecodeError",
    "ProtocolError",
    "FluxQueryError",
    "MappingError",
]


class FluxCsvError(ValueError):
    """Base class for failures of the client-side response parser."""


class SchemaConsistencyError(FluxCsvError):
    """Annotation/header rows of one block disagree (column counts, unknown datatype, bad group flag)."""


class DecodeError(FluxCsvError):
    """
    A cell could not be converted to its declared data type.

    Attributes:
        column (str | None): Label of the offending column, when known.
        data_type (str | None): Declared data type code of the column.
        value (str | None): Raw cell text after default substitution.
    """

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        data_type: str | None = None,
        value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.column = column
        self.data_type = data_type
        self.value = value


class ProtocolError(FluxCsvError):
    """A data row arrived before a complete schema (datatype + header) was established."""


class FluxQueryError(RuntimeError):
    """
    Query-execution error embedded in the response stream by the server.

    Attributes:
        message (str): Server supplied error description.
        reference (str | None): Optional reference code for server-side log correlation.
    """

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message if reference is None else f"{message} (reference: {reference})")
        self.message = message
        self.reference = reference


class MappingError(TypeError):
    """The record mapper has no way to build the requested target type."""
