import pytest
from pydantic import BaseModel, Field

from fluxq.core.errors import FluxQueryError
from fluxq.io.dispatch import (
    Cancellable,
    QueryHandlers,
    dispatch_raw,
    dispatch_records,
    iter_records,
    read_raw,
)
from fluxq.io.errors import IoTransportError


class Collector:
    def __init__(self, cancel_at: int | None = None, fail_at: int | None = None) -> None:
        self.items: list = []
        self.errors: list[Exception] = []
        self.completed = 0
        self.cancel_at = cancel_at
        self.fail_at = fail_at

    def on_record(self, cancellable: Cancellable, item) -> None:
        self.items.append(item)
        if self.fail_at is not None and len(self.items) == self.fail_at:
            raise RuntimeError("consumer failed")
        if self.cancel_at is not None and len(self.items) == self.cancel_at:
            cancellable.cancel()

    def on_complete(self) -> None:
        self.completed += 1

    def handlers(self) -> QueryHandlers:
        return QueryHandlers(on_record=self.on_record, on_error=self.errors.append, on_complete=self.on_complete)


def test_all_records_then_completion(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector()
    dispatch_records(body, c.handlers())
    assert [r["_value"] for r in c.items] == [1.5, 2.5, 3.5]
    assert c.completed == 1
    assert c.errors == []
    assert body.closed


def test_cancel_during_record_stops_delivery(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector(cancel_at=2)
    dispatch_records(body, c.handlers())
    assert len(c.items) == 2
    assert c.completed == 0
    assert c.errors == []
    assert body.closed


def test_cancel_on_last_record_suppresses_completion(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector(cancel_at=3)
    dispatch_records(body, c.handlers())
    assert len(c.items) == 3
    assert c.completed == 0
    assert c.errors == []
    assert body.closed


def test_cancel_before_start_reads_nothing(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector()
    handle = Cancellable()
    handle.cancel()
    dispatch_records(body, c.handlers(), cancellable=handle)
    assert c.items == []
    assert c.completed == 0
    assert body.closed


def test_external_cancellable_is_passed_to_callbacks(memory_body, simple_csv: str) -> None:
    handle = Cancellable()
    received = []
    dispatch_records(memory_body(simple_csv), QueryHandlers(on_record=lambda c, r: received.append(c)))
    dispatch_records(
        memory_body(simple_csv),
        QueryHandlers(on_record=lambda c, r: received.append(c)),
        cancellable=handle,
    )
    assert received[-1] is handle
    assert received[0] is not handle


def test_error_row_after_three_records(memory_body, error_after_three_csv: str) -> None:
    body = memory_body(error_after_three_csv)
    c = Collector()
    dispatch_records(body, c.handlers())
    assert len(c.items) == 3
    assert len(c.errors) == 1
    assert isinstance(c.errors[0], FluxQueryError)
    assert c.errors[0].reference == "897"
    assert c.completed == 0
    assert body.close_count >= 1


def test_failure_is_raised_without_on_error(memory_body, error_after_three_csv: str) -> None:
    body = memory_body(error_after_three_csv)
    seen = []
    with pytest.raises(FluxQueryError):
        dispatch_records(body, QueryHandlers(on_record=lambda c, r: seen.append(r)))
    assert len(seen) == 3
    assert body.closed


def test_consumer_exception_routed_to_on_error(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector(fail_at=1)
    dispatch_records(body, c.handlers())
    assert len(c.items) == 1
    assert [str(e) for e in c.errors] == ["consumer failed"]
    assert c.completed == 0
    assert body.closed


def test_transport_failure_mid_stream(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv, chunk_size=16, fail_after=5)
    c = Collector()
    dispatch_records(body, c.handlers())
    assert len(c.errors) == 1
    assert isinstance(c.errors[0], IoTransportError)
    assert c.completed == 0
    assert body.closed


class Point(BaseModel):
    result: str
    value: float = Field(alias="_value")


def test_records_mapped_to_model(memory_body, simple_csv: str) -> None:
    c = Collector()
    dispatch_records(memory_body(simple_csv), c.handlers(), model=Point)
    assert c.items[0] == Point(result="_result", _value=1.5)


def test_raw_dispatch_delivers_lines(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    c = Collector()
    dispatch_raw(body, c.handlers())
    assert c.items[0] == "#datatype,string,long,double"
    assert c.items[3] == ",result,table,_value"
    assert c.items[-1] == ""
    assert c.completed == 1
    assert body.closed


def test_raw_dispatch_cancel(memory_body, simple_csv: str) -> None:
    c = Collector(cancel_at=1)
    dispatch_raw(memory_body(simple_csv), c.handlers())
    assert c.items == ["#datatype,string,long,double"]
    assert c.completed == 0


def test_read_raw_joins_lines(memory_body) -> None:
    body = memory_body("a,b\r\nc,d\r\n")
    assert read_raw(body) == "a,b\nc,d"
    assert body.closed


def test_iter_records_early_close_closes_body(memory_body, simple_csv: str) -> None:
    body = memory_body(simple_csv)
    it = iter_records(body)
    first = next(it)
    assert first["_value"] == 1.5
    assert not body.closed
    it.close()
    assert body.closed
