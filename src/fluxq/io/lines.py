"""
Lazy line reader over a chunked response body.

Responsibilities
- Turn an iterable of byte chunks (HTTP body, file reads) into text lines, one at a time.
- Strip ``\\n`` / ``\\r\\n`` terminators; a final unterminated line is still returned.
- Map transport failures raised while pulling chunks to IoTransportError.

Notes
- At most one partially consumed chunk is held; the body is never materialized.
- Splitting happens on bytes before decoding, so CRLF pairs split across chunk
  boundaries never produce a phantom blank line.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import requests
import urllib3.exceptions

from fluxq.core.errors import DecodeError

from .errors import IoTransportError

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (OSError, requests.RequestException, urllib3.exceptions.HTTPError)


class LineReader:
    """
    Pull-based reader yielding decoded lines from byte chunks.

    Args:
        chunks (Iterable[bytes]): Source of raw body bytes.
        encoding (str): Text encoding of the body.

    Examples:
        >>> reader = LineReader([b"a,b\\r", b"\\nc"])
        >>> reader.next_line(), reader.next_line(), reader.next_line()
        ('a,b', 'c', None)
    """

    def __init__(self, chunks: Iterable[bytes], encoding: str = "utf-8") -> None:
        self._chunks: Iterator[bytes] = iter(chunks)
        self._encoding = encoding
        self._buffer = bytearray()
        self._scanned = 0
        self._eof = False
        self.line_number = 0

    def _pull(self) -> bool:
        try:
            chunk = next(self._chunks)
        except StopIteration:
            self._eof = True
            return False
        except _TRANSPORT_ERRORS as exc:
            logger.warning("response body read failed after %d lines: %s", self.line_number, exc)
            raise IoTransportError(f"failed reading response body: {exc}") from exc
        if chunk:
            self._buffer += chunk
        return True

    def _decode(self, raw: bytearray) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        try:
            return raw.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise DecodeError(
                f"line {self.line_number} is not valid {self._encoding}: {exc}"
            ) from exc

    def next_line(self) -> str | None:
        """
        Return the next line, or None at end of stream.

        Raises:
            IoTransportError: If the underlying body fails while reading.
            DecodeError: If the line bytes are not valid in the configured encoding.
        """
        while True:
            idx = self._buffer.find(b"\n", self._scanned)
            if idx >= 0:
                raw = self._buffer[:idx]
                del self._buffer[: idx + 1]
                self._scanned = 0
                self.line_number += 1
                return self._decode(raw)
            # bytes already searched hold no terminator
            self._scanned = len(self._buffer)
            if self._eof or not self._pull():
                break
        if self._buffer:
            raw, self._buffer = self._buffer, bytearray()
            self._scanned = 0
            self.line_number += 1
            return self._decode(raw)
        return None

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
