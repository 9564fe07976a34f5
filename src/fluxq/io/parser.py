"""
Streaming parser for annotated Flux CSV query responses.

Overview
- FluxCsvParser.records(): lazily yields one FluxRecord per data row.
- FluxCsvParser.tables(): collects the whole response into FluxTable objects.

Line handling
- Blank line: table boundary; the active schema is dropped.
- Quoted cells may span lines: a line with an unbalanced ``"`` is joined with the
  following lines (``\n``) until the quotes balance.
- ``#datatype`` / ``#group`` / ``#default``: accumulated by AnnotationTracker; any
  annotation row ends the current table. Other ``#`` rows are comments and skipped.
- Header row (first non-annotation row of a block): completes the schema and starts
  a new table, unless it is the ``,error,reference`` header of a server error table.
- Data row: decoded against the active schema. A change of the ``table`` column value
  within one block starts a new table that keeps the same schema.
- Row after an error header: raised as FluxQueryError.

Errors
- Every failure is raised from the generator and ends the stream; there is no
  row-level recovery. Callers decide how to surface it (see fluxq.io.dispatch).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from fluxq.core.constants import DEFAULT_DELIMITER, FIRST_COLUMN_INDEX, TABLE_COLUMN
from fluxq.core.errors import DecodeError, FluxQueryError, ProtocolError
from fluxq.core.grammar import (
    annotation_kind_from_token,
    is_annotation_token,
    is_blank_line,
    is_error_header,
    split_csv_line,
)
from fluxq.core.tables import ColumnSchema, FluxRecord, FluxTable
from fluxq.core.values import decode_cell

from .annotations import AnnotationTracker, StreamState

logger = logging.getLogger(__name__)


def decode_row(schema: ColumnSchema, cells: list[str], table_index: int) -> FluxRecord:
    """
    Decode a split data row against a schema.

    Args:
        schema (ColumnSchema): Active schema.
        cells (list[str]): Row cells including the reserved cell 0.
        table_index (int): Ordinal of the table the row belongs to.

    Returns:
        FluxRecord: Values keyed by column label, in column order.

    Raises:
        DecodeError: On a cell-count mismatch or an undecodable cell.
    """
    data = cells[FIRST_COLUMN_INDEX:]
    if len(data) != schema.width:
        raise DecodeError(f"data row has {len(data)} columns, schema defines {schema.width}")
    values = {column.label: decode_cell(column, data[column.index]) for column in schema.columns}
    return FluxRecord(table=table_index, values=values)


def _join_quoted(line: str, lines: Iterator[str]) -> str:
    """Append following lines until the double quotes of a quoted cell balance out."""
    parts = [line]
    quotes = line.count('"')
    while quotes % 2:
        nxt = next(lines, None)
        if nxt is None:
            raise DecodeError("unterminated quoted cell at end of response")
        parts.append(nxt)
        quotes += nxt.count('"')
    return "\n".join(parts)


class FluxCsvParser:
    """
    Single-pass parser over response lines.

    Args:
        lines (Iterable[str]): Response lines without terminators (e.g. a LineReader).
        delimiter (str): Cell delimiter of the response dialect.
        on_table (Callable[[int, ColumnSchema], None] | None): Invoked with the table
            ordinal and schema each time a new table starts, including empty tables.

    Notes:
        The parser is single-use: state lives on the instance and is consumed by
        one iteration.
    """

    def __init__(
        self,
        lines: Iterable[str],
        *,
        delimiter: str = DEFAULT_DELIMITER,
        on_table: Callable[[int, ColumnSchema], None] | None = None,
    ) -> None:
        self._lines = lines
        self._delimiter = delimiter
        self._tracker = AnnotationTracker()
        self._on_table = on_table
        self.state = StreamState()

    def __iter__(self) -> Iterator[FluxRecord]:
        return self.records()

    def _query_error(self, cells: list[str]) -> FluxQueryError:
        message = cells[1] if len(cells) > 1 else ""
        reference = cells[2] if len(cells) > 2 and cells[2] else None
        logger.warning("query failed on server: %s (reference=%s)", message, reference)
        return FluxQueryError(message, reference)

    def _table_started(self) -> None:
        logger.debug("table %d started", self.state.table_index)
        if self._on_table is not None and self.state.schema is not None:
            self._on_table(self.state.table_index, self.state.schema)

    def _track_table_id(self, schema: ColumnSchema, cells: list[str]) -> None:
        idx = schema.index_of(TABLE_COLUMN)
        if idx is None:
            return
        current = cells[FIRST_COLUMN_INDEX + idx] if FIRST_COLUMN_INDEX + idx < len(cells) else None
        if self.state.table_id is None:
            self.state.table_id = current
        elif current != self.state.table_id:
            self.state.start_table(schema)
            self.state.table_id = current
            self._table_started()

    def records(self) -> Iterator[FluxRecord]:
        """
        Yield decoded records in stream order.

        Raises:
            ProtocolError: Data row before a complete schema.
            SchemaConsistencyError: Mismatched annotation/header rows.
            DecodeError: Undecodable cell or row width mismatch.
            FluxQueryError: Server error table in the stream.
        """
        state = self.state
        tracker = self._tracker
        lines = iter(self._lines)
        for line in lines:
            if is_blank_line(line):
                state.reset_schema()
                tracker.reset()
                continue

            if line.count('"') % 2:
                line = _join_quoted(line, lines)
            cells = split_csv_line(line, self._delimiter)
            token = cells[0] if cells else ""

            if is_annotation_token(token):
                kind = annotation_kind_from_token(token)
                if kind is None:
                    logger.debug("skipping comment line: %s", line)
                    continue
                if state.schema is not None or state.error_table:
                    state.reset_schema()
                tracker.feed(kind, cells)
                continue

            if tracker.in_block:
                if is_error_header(cells):
                    tracker.check_header(cells)
                    tracker.reset()
                    state.error_table = True
                    continue
                state.start_table(tracker.complete(cells))
                self._table_started()
                continue

            if state.error_table:
                raise self._query_error(cells)

            if state.schema is None:
                if is_error_header(cells):
                    state.error_table = True
                    continue
                raise ProtocolError(
                    "unable to parse response: data row before a table definition (#datatype + header)"
                )

            self._track_table_id(state.schema, cells)
            yield decode_row(state.schema, cells, state.table_index)

    def tables(self) -> list[FluxTable]:
        """Consume the stream and group records into tables (one per table ordinal)."""
        tables: list[FluxTable] = []
        chained = self._on_table

        def _start(index: int, schema: ColumnSchema) -> None:
            tables.append(FluxTable(columns=schema))
            if chained is not None:
                chained(index, schema)

        self._on_table = _start
        for record in self.records():
            tables[record.table].records.append(record)
        return tables
