"""
Polars conversion of decoded query results.

Overview
- table_to_frame(): one FluxTable -> DataFrame with dtypes taken from its ColumnSchema.
- tables_to_frame(): concatenates tables diagonally (tables may have different columns).

Dtype mapping
- long, duration -> Int64; unsignedLong -> UInt64; double -> Float64; boolean -> Boolean
- string, base64Binary -> Utf8
- dateTime:RFC3339 / RFC3339Nano -> Datetime("us", "UTC")
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from fluxq.core.grammar import DataType
from fluxq.core.tables import FluxTable

_POLARS_DTYPES: dict[DataType, object] = {
    DataType.LONG: pl.Int64,
    DataType.DURATION: pl.Int64,
    DataType.UNSIGNED_LONG: pl.UInt64,
    DataType.DOUBLE: pl.Float64,
    DataType.BOOLEAN: pl.Boolean,
    DataType.STRING: pl.Utf8,
    DataType.BASE64_BINARY: pl.Utf8,
    DataType.DATE_TIME_RFC3339: pl.Datetime("us", "UTC"),
    DataType.DATE_TIME_RFC3339_NANO: pl.Datetime("us", "UTC"),
}


def table_to_frame(table: FluxTable) -> pl.DataFrame:
    """
    Materialize one table as a DataFrame.

    Args:
        table (FluxTable): Decoded table.

    Returns:
        pl.DataFrame: One row per record, columns in schema order (possibly empty).
    """
    schema = {c.label: _POLARS_DTYPES[c.data_type] for c in table.columns.columns}
    return pl.DataFrame([r.row for r in table.records], schema=schema, orient="row")  # type: ignore[arg-type]


def tables_to_frame(tables: Iterable[FluxTable]) -> pl.DataFrame:
    """
    Concatenate tables into a single DataFrame.

    Notes:
        Columns missing from a table are filled with nulls; an empty input yields an
        empty DataFrame.
    """
    frames = [table_to_frame(t) for t in tables]
    if not frames:
        return pl.DataFrame()
    return pl.concat(frames, how="diagonal_relaxed")
