"""
fluxq.io: Streaming query pipeline for the fluxq client.

## Responsibilities
- Read a chunked response body line by line without materializing it (lines).
- Track annotation blocks and build column schemas (annotations).
- Decode data rows into FluxRecord values and group them into tables (parser).
- Drive one response to a consumer with cancellation and error routing (dispatch).
- Submit queries over HTTP and expose every consumption form (transport, query_api).
- Convert decoded tables to Polars DataFrames (frame).

## Public API
- ClientSettings: Endpoint and transport configuration (env > TOML > defaults).
- QueryApi: Facade for query / query_stream / query_callback / query_async /
  query_raw / query_raw_callback / query_data_frame.
- Cancellable, QueryHandlers: Consumer-side controls of the callback forms.
- FluxCsvParser, LineReader: The decoding pipeline, usable over any byte source.

## Import DAG discipline
- Depends only on stdlib, requests/urllib3, polars and fluxq.core.*.

## Examples
```python
from fluxq.io import ClientSettings, QueryApi

settings = ClientSettings(url="http://localhost:8086", org="my-org")  # doctest: +SKIP
with QueryApi(settings) as api:  # doctest: +SKIP
    for table in api.query('from(bucket: "telegraf") |> range(start: -1h)'):
        for record in table.records:
            print(record.get_time(), record.get_value())
```

## Notes
- One query owns its parser state, schema and Cancellable; nothing is shared between
  concurrent queries except the HTTP session and the worker pool.
- The response body is closed on every exit path: completion, failure, cancellation,
  or early close of a streaming iterator.
"""

from __future__ import annotations

from .config import ClientSettings
from .dispatch import Cancellable, QueryHandlers, RecordStream
from .lines import LineReader
from .parser import FluxCsvParser
from .query_api import QueryApi

__all__ = [
    "ClientSettings",
    "QueryApi",
    "Cancellable",
    "QueryHandlers",
    "RecordStream",
    "FluxCsvParser",
    "LineReader",
]
