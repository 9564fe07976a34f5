"""
Annotation/header tracking for the streaming response parser.

Responsibilities
- Accumulate ``#datatype`` / ``#group`` / ``#default`` rows of one annotation block.
- Enforce equal cell counts across the block's annotation rows and its header row.
- Build an immutable ColumnSchema once the header row completes the block.

Block rules
- A ``#datatype`` row always opens a new block, discarding rows of any previous one.
- ``#group`` and ``#default`` are optional: absent flags mean non-key columns and
  absent defaults mean "" (no substitution).
- Cell 0 of every row is reserved and never becomes a column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fluxq.core.constants import FIRST_COLUMN_INDEX
from fluxq.core.errors import ProtocolError, SchemaConsistencyError
from fluxq.core.grammar import AnnotationKind, data_type_from_value, parse_group_flag
from fluxq.core.tables import ColumnSchema, FluxColumn

logger = logging.getLogger(__name__)


@dataclass
class StreamState:
    """
    Mutable per-query parsing state.

    Attributes:
        schema (ColumnSchema | None): Active schema; None while awaiting a block.
        table_index (int): Ordinal of the current table (-1 before the first one).
        table_id (str | None): Last raw ``table`` column value seen in the current block.
        error_table (bool): The current block is a server error table.
    """

    schema: ColumnSchema | None = None
    table_index: int = -1
    table_id: str | None = None
    error_table: bool = False

    def reset_schema(self) -> None:
        self.schema = None
        self.table_id = None
        self.error_table = False

    def start_table(self, schema: ColumnSchema) -> None:
        self.schema = schema
        self.table_index += 1
        self.table_id = None


class AnnotationTracker:
    """Collects the annotation rows of one block and turns them into a ColumnSchema."""

    def __init__(self) -> None:
        self._rows: dict[AnnotationKind, list[str]] = {}

    @property
    def in_block(self) -> bool:
        return bool(self._rows)

    @property
    def awaiting_header(self) -> bool:
        """True once a ``#datatype`` row was seen and the header has not arrived yet."""
        return AnnotationKind.DATATYPE in self._rows

    def reset(self) -> None:
        self._rows.clear()

    def _width(self) -> int | None:
        for cells in self._rows.values():
            return len(cells)
        return None

    def _check_width(self, what: str, cells: list[str]) -> None:
        expected = self._width()
        if expected is not None and len(cells) != expected:
            raise SchemaConsistencyError(
                f"{what} row has {len(cells)} columns, expected {expected} from the annotation block"
            )

    def feed(self, kind: AnnotationKind, row: list[str]) -> None:
        """
        Record one annotation row.

        Args:
            kind (AnnotationKind): Annotation kind of the row.
            row (list[str]): All cells of the row, including the reserved cell 0.

        Raises:
            SchemaConsistencyError: On a column-count mismatch or a repeated annotation.
        """
        if kind is AnnotationKind.DATATYPE and kind in self._rows:
            self._rows.clear()
        if kind in self._rows:
            raise SchemaConsistencyError(f"duplicate {kind.value} row in annotation block")
        cells = row[FIRST_COLUMN_INDEX:]
        self._check_width(kind.value, cells)
        self._rows[kind] = cells

    def check_header(self, row: list[str]) -> None:
        self._check_width("header", row[FIRST_COLUMN_INDEX:])

    def complete(self, header: list[str]) -> ColumnSchema:
        """
        Close the block with its header row and build the schema.

        Args:
            header (list[str]): Header row cells, including the reserved cell 0.

        Returns:
            ColumnSchema: The new schema; the tracker is reset for the next block.

        Raises:
            ProtocolError: If no ``#datatype`` row precedes the header.
            SchemaConsistencyError: On width mismatch, unknown data type or bad group flag.
        """
        if not self.awaiting_header:
            raise ProtocolError("header row without a preceding #datatype annotation")
        labels = header[FIRST_COLUMN_INDEX:]
        self._check_width("header", labels)
        n = len(labels)
        types = [data_type_from_value(v) for v in self._rows[AnnotationKind.DATATYPE]]
        group_cells = self._rows.get(AnnotationKind.GROUP)
        groups = [parse_group_flag(v) for v in group_cells] if group_cells else [False] * n
        defaults = self._rows.get(AnnotationKind.DEFAULT) or [""] * n
        schema = ColumnSchema(
            tuple(
                FluxColumn(index=i, label=labels[i], data_type=types[i], group=groups[i], default_value=defaults[i])
                for i in range(n)
            )
        )
        self._rows.clear()
        logger.debug("schema established: %s", ",".join(schema.labels))
        return schema
