"""
QueryApi facade for fluxq.

Provides one object bound to ClientSettings that submits Flux queries and exposes every
consumption form of the response over the same streaming pipeline.

Call forms
- query / query_stream / query_data_frame: synchronous; failures are raised.
- query_callback: synchronous callbacks; failures go to ``on_error`` when supplied,
  otherwise they are raised.
- query_async: the callback form run on a worker thread; returns a Future.
- query_raw / query_raw_callback: undecoded response text, optionally with a custom Dialect.

Import DAG discipline
- Depends on fluxq.core.* and sibling fluxq.io modules.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import polars as pl

from fluxq.core.mapper import DEFAULT_MAPPER, RecordMapper
from fluxq.core.schema import DEFAULT_DIALECT, Dialect, Query
from fluxq.core.tables import FluxTable

from .config import ClientSettings
from .dispatch import (
    Cancellable,
    OnComplete,
    OnError,
    OnRecord,
    QueryHandlers,
    RecordStream,
    dispatch_raw,
    dispatch_records,
    iter_records,
    read_raw,
)
from .errors import IoConfigError
from .frame import tables_to_frame
from .lines import LineReader
from .parser import FluxCsvParser
from .transport import HttpTransport, QueryTransport, ResponseBody

logger = logging.getLogger(__name__)

QueryLike = str | Query


class QueryApi:
    """
    Facade bound to ClientSettings that runs Flux queries.

    Notes:
        - Decoded forms always request DEFAULT_DIALECT (all annotations, header, comma).
        - Each call owns its own parser state, schema and Cancellable; the instance can
          serve concurrent queries.
        - Use as a context manager, or call close(), to release the worker pool and the
          HTTP session.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: QueryTransport | None = None,
        mapper: RecordMapper | None = None,
    ) -> None:
        """
        Initialize the facade.

        Args:
            settings (ClientSettings | None): Client configuration; defaults when omitted.
            transport (QueryTransport | None): Query transport; an HttpTransport over
                ``settings`` when omitted.
            mapper (RecordMapper | None): Mapper used for ``model=`` queries.

        Notes:
            This does not perform any I/O at construction time.
        """
        self.settings = settings or ClientSettings()
        self.transport = transport or HttpTransport(self.settings)
        self.mapper = mapper or DEFAULT_MAPPER
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> QueryApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.transport.close()

    # ---------------------------------------------------------------------
    # Submission
    # ---------------------------------------------------------------------
    def _resolve_org(self, org: str | None) -> str:
        resolved = org or self.settings.org
        if not resolved:
            raise IoConfigError("an organization is required: set FLUXQ_ORG or pass org=")
        return resolved

    def _open(self, query: QueryLike, *, org: str | None, dialect: Dialect | None) -> ResponseBody:
        q = Query(query=query) if isinstance(query, str) else query
        if dialect is not None:
            q = q.with_dialect(dialect)
        elif q.dialect is None:
            q = q.with_dialect(DEFAULT_DIALECT)
        resolved = self._resolve_org(org)
        logger.debug("submitting query for org=%s (annotations=%s)", resolved, q.dialect.annotations)
        return self.transport.post_query(q, resolved)

    # ---------------------------------------------------------------------
    # Decoded results
    # ---------------------------------------------------------------------
    def query(
        self, query: QueryLike, *, org: str | None = None, model: type | None = None
    ) -> list[FluxTable] | list[Any]:
        """
        Run a query and materialize the result.

        Args:
            query (str | Query): Flux script or Query model.
            org (str | None): Organization override.
            model (type | None): Map each record to this type and return a flat list.

        Returns:
            list[FluxTable] | list[Any]: Tables in stream order, or mapped objects.

        Raises:
            fluxq.core.errors.FluxCsvError: Response could not be decoded.
            fluxq.core.errors.FluxQueryError: Server reported a query error in the stream.
            fluxq.io.errors.IoError: Configuration, HTTP or transport failure.
        """
        body = self._open(query, org=org, dialect=DEFAULT_DIALECT)
        if model is not None:
            return list(iter_records(body, model=model, mapper=self.mapper))
        try:
            return FluxCsvParser(LineReader(body.iter_chunks())).tables()
        finally:
            body.close()

    def query_stream(
        self, query: QueryLike, *, org: str | None = None, model: type | None = None
    ) -> RecordStream:
        """
        Run a query and iterate records lazily.

        Notes:
            The returned RecordStream owns the response body: exhausting it, closing it
            (also before the first record) or leaving its ``with`` block closes the body.
        """
        body = self._open(query, org=org, dialect=DEFAULT_DIALECT)
        return RecordStream(body, model=model, mapper=self.mapper)

    def query_data_frame(self, query: QueryLike, *, org: str | None = None) -> pl.DataFrame:
        """Run a query and return all tables as one Polars DataFrame."""
        return tables_to_frame(self.query(query, org=org))

    def query_callback(
        self,
        query: QueryLike,
        on_record: OnRecord,
        *,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
        org: str | None = None,
        model: type | None = None,
        cancellable: Cancellable | None = None,
    ) -> None:
        """
        Run a query delivering ``(cancellable, record)`` to ``on_record``.

        Args:
            query (str | Query): Flux script or Query model.
            on_record (OnRecord): Per-record consumer; may call ``cancellable.cancel()``.
            on_error (OnError | None): Receives the terminating failure; raised when None.
            on_complete (OnComplete | None): Called once at end of an uncancelled stream.
            org (str | None): Organization override.
            model (type | None): Map records to this type before delivery.
            cancellable (Cancellable | None): Handle to cancel from outside the callback.
        """
        handlers = QueryHandlers(on_record=on_record, on_error=on_error, on_complete=on_complete)
        try:
            body = self._open(query, org=org, dialect=DEFAULT_DIALECT)
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
            return
        dispatch_records(body, handlers, cancellable=cancellable, model=model, mapper=self.mapper)

    def query_async(
        self,
        query: QueryLike,
        on_record: OnRecord,
        *,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
        org: str | None = None,
        model: type | None = None,
        cancellable: Cancellable | None = None,
    ) -> Future[None]:
        """
        Run query_callback on a worker thread.

        Returns:
            Future[None]: Resolves when the query finished, failed or was cancelled.
            Without ``on_error`` the failure is set on the Future.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.settings.max_workers, thread_name_prefix="fluxq-query"
            )
        return self._executor.submit(
            self.query_callback,
            query,
            on_record,
            on_error=on_error,
            on_complete=on_complete,
            org=org,
            model=model,
            cancellable=cancellable,
        )

    # ---------------------------------------------------------------------
    # Raw results
    # ---------------------------------------------------------------------
    def query_raw(
        self, query: QueryLike, *, dialect: Dialect | None = None, org: str | None = None
    ) -> str:
        """
        Run a query and return the response text untouched by the parser.

        Args:
            query (str | Query): Flux script or Query model (its dialect is kept when set).
            dialect (Dialect | None): Dialect override.
            org (str | None): Organization override.
        """
        return read_raw(self._open(query, org=org, dialect=dialect))

    def query_raw_callback(
        self,
        query: QueryLike,
        on_line: OnRecord,
        *,
        dialect: Dialect | None = None,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
        org: str | None = None,
        cancellable: Cancellable | None = None,
    ) -> None:
        """Deliver ``(cancellable, line)`` for each response line; same contract as query_callback."""
        handlers = QueryHandlers(on_record=on_line, on_error=on_error, on_complete=on_complete)
        try:
            body = self._open(query, org=org, dialect=dialect)
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
            return
        dispatch_raw(body, handlers, cancellable=cancellable)
