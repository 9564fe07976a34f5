"""
Dispatch controller: drives one response body through the parser to a consumer.

State machine (per query)
- awaiting-schema / have-schema: handled inside FluxCsvParser.
- error-terminated: any failure (transport, schema, decode, server error row, or an
  exception raised by the consumer) stops reading; ``on_error`` fires once, or the
  error is raised when no ``on_error`` was supplied.
- completed: end of stream; ``on_complete`` fires once.
- cancelled: the consumer called ``Cancellable.cancel()`` during a callback; reading
  stops before the next line and neither ``on_error`` nor ``on_complete`` fires.

The body is closed on every exit path. Cancellation is checked between callbacks only;
a row being decoded is never interrupted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any

from fluxq.core.constants import DEFAULT_DELIMITER
from fluxq.core.mapper import DEFAULT_MAPPER, RecordMapper

from .lines import LineReader
from .parser import FluxCsvParser
from .transport import ResponseBody

logger = logging.getLogger(__name__)


class Cancellable:
    """Cooperative cancellation handle handed to every consumer callback of one query."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def is_cancelled(self) -> bool:
        return self._cancelled


OnRecord = Callable[[Cancellable, Any], None]
OnError = Callable[[Exception], None]
OnComplete = Callable[[], None]


@dataclass(frozen=True)
class QueryHandlers:
    """
    Consumer callbacks for one query.

    Attributes:
        on_record (OnRecord): Called with ``(cancellable, item)`` for each record (or raw line).
        on_error (OnError | None): Receives the single terminating failure. When None,
            failures are raised to the caller instead.
        on_complete (OnComplete | None): Called once after the last item of an
            uncancelled, successful stream.
    """

    on_record: OnRecord
    on_error: OnError | None = None
    on_complete: OnComplete | None = None


def iter_records(
    body: ResponseBody,
    *,
    model: type | None = None,
    mapper: RecordMapper | None = None,
    delimiter: str = DEFAULT_DELIMITER,
) -> Generator[Any, None, None]:
    """
    Lazily decode a response body into records (or mapped models).

    Args:
        body (ResponseBody): Open response body; closed when the iterator finishes,
            fails, or is closed early.
        model (type | None): Optional target type; records are mapped when given.
        mapper (RecordMapper | None): Mapper to use (DEFAULT_MAPPER when None).
        delimiter (str): Response cell delimiter.

    Yields:
        FluxRecord, or instances of ``model``.
    """
    mapper = mapper or DEFAULT_MAPPER
    try:
        parser = FluxCsvParser(LineReader(body.iter_chunks()), delimiter=delimiter)
        for record in parser.records():
            yield record if model is None else mapper.to_model(record, model)
    finally:
        body.close()
        logger.debug("response body closed")


class RecordStream:
    """
    Iterator over the records of one open response body.

    Notes:
        The body is closed when iteration ends, fails, or close() is called, including
        before the first record was read. Usable as a context manager.
    """

    def __init__(
        self,
        body: ResponseBody,
        *,
        model: type | None = None,
        mapper: RecordMapper | None = None,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        self._body = body
        self._items = iter_records(body, model=model, mapper=mapper, delimiter=delimiter)

    def __iter__(self) -> RecordStream:
        return self

    def __next__(self) -> Any:
        return next(self._items)

    def __enter__(self) -> RecordStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def close(self) -> None:
        self._items.close()
        self._body.close()


def iter_lines(body: ResponseBody) -> Generator[str, None, None]:
    """Yield raw response lines without decoding; the body is closed when done."""
    try:
        yield from LineReader(body.iter_chunks())
    finally:
        body.close()
        logger.debug("response body closed")


def read_raw(body: ResponseBody) -> str:
    """Read the whole body as text (lines joined with ``\\n``)."""
    return "\n".join(iter_lines(body))


def _drive(
    items: Generator[Any, None, None],
    body: ResponseBody,
    handlers: QueryHandlers,
    cancellable: Cancellable | None,
) -> None:
    if cancellable is None:
        cancellable = Cancellable()
    try:
        if cancellable.is_cancelled():
            logger.debug("query cancelled before the first read")
            return
        for item in items:
            handlers.on_record(cancellable, item)
            if cancellable.is_cancelled():
                logger.debug("query cancelled by consumer")
                return
    except Exception as exc:
        if handlers.on_error is None:
            raise
        logger.debug("query terminated with %s", type(exc).__name__)
        handlers.on_error(exc)
        return
    finally:
        items.close()
        body.close()
    if handlers.on_complete is not None:
        handlers.on_complete()


def dispatch_records(
    body: ResponseBody,
    handlers: QueryHandlers,
    *,
    cancellable: Cancellable | None = None,
    model: type | None = None,
    mapper: RecordMapper | None = None,
    delimiter: str = DEFAULT_DELIMITER,
) -> None:
    """
    Decode a body and deliver each record to ``handlers.on_record``.

    Args:
        body (ResponseBody): Open response body (always closed on return).
        handlers (QueryHandlers): Consumer callbacks.
        cancellable (Cancellable | None): Handle shared with the caller; a fresh one
            is created when omitted.
        model (type | None): Map records to this type before delivery.
        mapper (RecordMapper | None): Mapper used with ``model``.
        delimiter (str): Response cell delimiter.

    Raises:
        Exception: Any terminating failure, only when ``handlers.on_error`` is None.
    """
    items = iter_records(body, model=model, mapper=mapper, delimiter=delimiter)
    _drive(items, body, handlers, cancellable)


def dispatch_raw(
    body: ResponseBody,
    handlers: QueryHandlers,
    *,
    cancellable: Cancellable | None = None,
) -> None:
    """Deliver raw response lines to ``handlers.on_record``; same contract as dispatch_records."""
    _drive(iter_lines(body), body, handlers, cancellable)
