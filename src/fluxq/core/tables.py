"""
Column schema, record and table models for decoded Flux query results.

Notes:
    - A ColumnSchema is built once per annotation block and is immutable afterwards.
    - Records keep their values in column order (dict insertion order).
    - FluxRecord.table is the ordinal of the result table within one response,
      starting at 0; it is not the value of the ``table`` column.
    - Zero-IO (stdlib only).

Examples:
    >>> from fluxq.core.grammar import DataType
    >>> from fluxq.core.tables import ColumnSchema, FluxColumn, FluxRecord
    >>> schema = ColumnSchema(
    ...     (
    ...         FluxColumn(index=0, label="result", data_type=DataType.STRING),
    ...         FluxColumn(index=1, label="value", data_type=DataType.LONG),
    ...     )
    ... )
    >>> schema.labels
    ('result', 'value')
    >>> FluxRecord(table=0, values={"result": "_result", "value": 5}).result
    '_result'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .constants import RESULT_COLUMN
from .grammar import DataType

__all__ = [
    "FluxColumn",
    "ColumnSchema",
    "FluxRecord",
    "FluxTable",
]


@dataclass(frozen=True)
class FluxColumn:
    """
    One column of a result table.

    Attributes:
        index (int): Position within the schema (0-based, reserved cell excluded).
        label (str): Column name from the header row.
        data_type (DataType): Declared type from the ``#datatype`` row.
        group (bool): Whether the column is part of the group key.
        default_value (str): Raw text substituted for empty cells ("" when none).
    """

    index: int
    label: str
    data_type: DataType
    group: bool = False
    default_value: str = ""


@dataclass(frozen=True)
class ColumnSchema:
    """Ordered, immutable set of columns shared by the rows of one table."""

    columns: tuple[FluxColumn, ...]

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(c.label for c in self.columns)

    @property
    def width(self) -> int:
        return len(self.columns)

    def index_of(self, label: str) -> int | None:
        for column in self.columns:
            if column.label == label:
                return column.index
        return None

    def group_key_columns(self) -> tuple[FluxColumn, ...]:
        return tuple(c for c in self.columns if c.group)


@dataclass
class FluxRecord:
    """
    A single decoded data row.

    Attributes:
        table (int): Ordinal of the table the row belongs to.
        values (dict[str, Any]): Column label -> decoded value, in column order.
    """

    table: int
    values: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    @property
    def result(self) -> str | None:
        """Name of the result set the row belongs to (``result`` column)."""
        return self.values.get(RESULT_COLUMN)

    @property
    def row(self) -> tuple[Any, ...]:
        return tuple(self.values.values())

    def get_start(self) -> datetime | None:
        return self.values.get("_start")

    def get_stop(self) -> datetime | None:
        return self.values.get("_stop")

    def get_time(self) -> datetime | None:
        return self.values.get("_time")

    def get_value(self) -> Any:
        return self.values.get("_value")

    def get_field(self) -> str | None:
        return self.values.get("_field")

    def get_measurement(self) -> str | None:
        return self.values.get("_measurement")


@dataclass
class FluxTable:
    """
    Materialized result table returned by the synchronous query form.

    Attributes:
        columns (ColumnSchema): Schema the records were decoded against.
        records (list[FluxRecord]): Rows in stream order.
    """

    columns: ColumnSchema
    records: list[FluxRecord] = field(default_factory=list)

    def get_group_key(self) -> tuple[FluxColumn, ...]:
        return self.columns.group_key_columns()
