"""
Custom exceptions for the fluxq.io layer.

Purpose
- Provide IO-layer error types for configuration, transport and HTTP concerns.
- Keep fluxq.core.errors as the source of truth for parser and query-execution errors.

Boundaries
- fluxq.core.errors.FluxCsvError (and subclasses) are raised while decoding the stream.
- fluxq.core.errors.FluxQueryError carries errors reported by the server inside the stream.
- fluxq.io raises Io* errors:
  - IoConfigError: invalid or missing configuration (e.g. no org).
  - IoTransportError: reading the response body failed.
  - IoHttpError: the query endpoint answered with a non-2xx status.
"""

from __future__ import annotations


class IoError(Exception):
    """
    Base class for IO-related errors in fluxq.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from fluxq.core errors.
    """


class IoConfigError(IoError):
    """
    Raised when client configuration is invalid or incomplete.

    Examples:
        - No organization configured and none passed to the query call
        - Non-positive chunk size
    """


class IoTransportError(IoError):
    """
    Raised when pulling bytes from an open response body fails.

    Notes:
        Fatal for the query: the body is closed and no further records are delivered.
        Retries are out of scope for this layer.
    """


class IoHttpError(IoError):
    """
    Raised when the query endpoint rejects the request.

    Attributes:
        status_code (int): HTTP status of the response.
        code (str | None): Server error code from the JSON error body, when present.
    """

    def __init__(self, message: str, status_code: int, code: str | None = None) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.message = message
        self.status_code = status_code
        self.code = code
