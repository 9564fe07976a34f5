from __future__ import annotations

from collections.abc import Iterator

import pytest

from fluxq.core.schema import Query


class MemoryBody:
    """In-memory response body that hands out fixed-size chunks and counts closes."""

    def __init__(self, data: bytes | str, chunk_size: int = 7, fail_after: int | None = None) -> None:
        self.data = data.encode("utf-8") if isinstance(data, str) else data
        self.chunk_size = chunk_size
        self.fail_after = fail_after
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def iter_chunks(self) -> Iterator[bytes]:
        for n, start in enumerate(range(0, len(self.data), self.chunk_size)):
            if self.fail_after is not None and n >= self.fail_after:
                raise ConnectionResetError("connection reset by peer")
            yield self.data[start : start + self.chunk_size]

    def close(self) -> None:
        self.close_count += 1


class FakeTransport:
    """QueryTransport returning MemoryBody objects and recording submissions."""

    def __init__(self, data: bytes | str = b"") -> None:
        self.data = data
        self.submitted: list[tuple[Query, str]] = []
        self.bodies: list[MemoryBody] = []
        self.closed = False

    def post_query(self, query: Query, org: str) -> MemoryBody:
        self.submitted.append((query, org))
        body = MemoryBody(self.data)
        self.bodies.append(body)
        return body

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def memory_body():
    return MemoryBody


@pytest.fixture
def fake_transport():
    return FakeTransport


# A two-column response: one table with three rows, group/default annotations included.
SIMPLE_CSV = (
    "#datatype,string,long,double\r\n"
    "#group,false,false,false\r\n"
    "#default,_result,,\r\n"
    ",result,table,_value\r\n"
    ",,0,1.5\r\n"
    ",,0,2.5\r\n"
    ",,0,3.5\r\n"
    "\r\n"
)

ERROR_AFTER_THREE_CSV = (
    SIMPLE_CSV
    + "#datatype,string,string\r\n"
    + "#group,true,true\r\n"
    + "#default,,\r\n"
    + ",error,reference\r\n"
    + ',"engine: unknown bucket ""telegraf""",897\r\n'
)


@pytest.fixture
def simple_csv() -> str:
    return SIMPLE_CSV


@pytest.fixture
def error_after_three_csv() -> str:
    return ERROR_AFTER_THREE_CSV
