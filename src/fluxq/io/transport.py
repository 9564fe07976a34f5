"""
HTTP transport and response bodies for fluxq.

Responsibilities
- Submit a Query to the ``/api/v2/query`` endpoint and hand back the open body.
- Map non-2xx answers to IoHttpError using the server's JSON error body.
- Expose response bodies through one small protocol (``iter_chunks`` / ``close``) so the
  line reader works the same over HTTP responses, files and test fixtures.

Notes
- Requests are sent with ``stream=True``: nothing is read until the line reader pulls.
- Timeouts are the transport's concern (``ClientSettings.timeout_s``); retries are not
  performed here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import BinaryIO, Protocol

import requests

from fluxq.core.constants import QUERY_PATH
from fluxq.core.schema import Query

from .config import ClientSettings
from .errors import IoConfigError, IoHttpError

logger = logging.getLogger(__name__)


class ResponseBody(Protocol):
    """An open, chunked response body that must be closed by its consumer."""

    def iter_chunks(self) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...


class QueryTransport(Protocol):
    """Submits a query and returns its open response body."""

    def post_query(self, query: Query, org: str) -> ResponseBody:
        ...

    def close(self) -> None:
        ...


class HttpResponseBody:
    """ResponseBody over a streamed ``requests.Response``."""

    def __init__(self, response: requests.Response, chunk_size: int) -> None:
        self.response = response
        self.chunk_size = chunk_size
        self.closed = False

    def iter_chunks(self) -> Iterator[bytes]:
        return self.response.iter_content(chunk_size=self.chunk_size)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.response.close()


class FileResponseBody:
    """ResponseBody over a binary file handle (saved responses, fixtures)."""

    def __init__(self, fh: BinaryIO, chunk_size: int = 8192) -> None:
        self.fh = fh
        self.chunk_size = chunk_size

    @property
    def closed(self) -> bool:
        return self.fh.closed

    def iter_chunks(self) -> Iterator[bytes]:
        while True:
            chunk = self.fh.read(self.chunk_size)
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        self.fh.close()


def _error_details(response: requests.Response) -> tuple[str, str | None]:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        message = data.get("message") or data.get("error") or response.reason or ""
        code = data.get("code")
        return str(message), (str(code) if code is not None else None)
    return (response.text or response.reason or "", None)


class HttpTransport:
    """
    Query submission over HTTP using a requests Session.

    Args:
        settings (ClientSettings): Endpoint URL, timeout, chunk size, extra headers.
        session (requests.Session | None): Session to use; one is created when omitted.

    Notes:
        The transport owns sessions it creates and closes them in close().
    """

    def __init__(self, settings: ClientSettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    @property
    def query_url(self) -> str:
        return self.settings.url.rstrip("/") + QUERY_PATH

    def post_query(self, query: Query, org: str) -> HttpResponseBody:
        """
        Submit a query and return its open body.

        Args:
            query (Query): Query payload (dialect included when set).
            org (str): Organization name or id sent as the ``org`` parameter.

        Returns:
            HttpResponseBody: Streamed body; the caller must close it.

        Raises:
            IoConfigError: If org is empty.
            IoHttpError: On a non-2xx response.
            requests.RequestException: On connection failures (not retried).
        """
        if not org:
            raise IoConfigError("an organization is required: set FLUXQ_ORG or pass org=")
        headers = {
            "Accept": "text/csv",
            "Content-Type": "application/json",
            **self.settings.headers,
        }
        logger.debug("POST %s org=%s", self.query_url, org)
        response = self.session.post(
            self.query_url,
            params={"org": org},
            json=query.to_payload(),
            headers=headers,
            stream=True,
            timeout=self.settings.timeout_s,
        )
        if response.status_code >= 300:
            try:
                message, code = _error_details(response)
            finally:
                response.close()
            logger.warning("query rejected with HTTP %s: %s", response.status_code, message)
            raise IoHttpError(message, response.status_code, code)
        return HttpResponseBody(response, self.settings.chunk_size)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
