"""
fluxq: Streaming client for annotated Flux CSV query responses.

Layers
- fluxq.core: zero-IO contracts: grammar, column schemas, records, cell decoding,
  request payload models, record mapper, errors.
- fluxq.io: line reader, parser, dispatch controller, HTTP transport, QueryApi facade.
- fluxq.cli: command line front end (``fluxq query`` / ``fluxq parse``).

Logging
- Every module logs through ``logging.getLogger(__name__)``; the package installs a
  NullHandler so nothing is printed unless the application configures logging
  (see fluxq.logging_setup.setup_logging).
"""

from __future__ import annotations

import logging

from .core.errors import FluxCsvError, FluxQueryError
from .io import ClientSettings, QueryApi

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ClientSettings",
    "QueryApi",
    "FluxCsvError",
    "FluxQueryError",
]
