"""
Configuration for the fluxq client.

Defines ClientSettings, a frozen dataclass carrying the endpoint and transport options
used by QueryApi and HttpTransport.

Precedence
- environment (FLUXQ_*) > TOML (fluxq.toml or pyproject [tool.fluxq.client]) > defaults.
- Values that fail to parse are ignored and the previous layer's value is kept.

Import DAG discipline
- Depends only on stdlib and fluxq.io.errors.

Notes
- Authentication is not modelled; extra request headers can be supplied through TOML
  ``headers`` (e.g. a gateway-specific header).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import tomllib

from .errors import IoConfigError

DEFAULT_URL = "http://localhost:8086"


@dataclass(frozen=True)
class ClientSettings:
    """
    Runtime settings for the fluxq client.

    Attributes:
        url (str): Base URL of the server (``/api/v2/query`` is appended).
        org (str | None): Default organization for queries; may be overridden per call.
        timeout_s (float): Per-request timeout handed to requests (connect and read).
        chunk_size (int): Bytes pulled from the response body per read (>= 1).
        max_workers (int): Worker threads for asynchronous queries (>= 1).
        headers (dict[str, str]): Extra headers sent with every query.

    Examples:
        >>> from fluxq.io import ClientSettings
        >>> ClientSettings(url="http://tsdb:8086", org="my-org")  # doctest: +ELLIPSIS
        ClientSettings(...)
    """

    url: str = DEFAULT_URL
    org: str | None = None
    timeout_s: float = 10.0
    chunk_size: int = 8192
    max_workers: int = 4
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise IoConfigError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.max_workers < 1:
            raise IoConfigError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.timeout_s <= 0:
            raise IoConfigError(f"timeout_s must be > 0, got {self.timeout_s}")

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ClientSettings, cfg: dict[str, Any] | None) -> ClientSettings:
        """Apply a loose config mapping onto ClientSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "url" in cfg and isinstance(cfg["url"], str) and cfg["url"]:
            s = replace(s, url=cfg["url"])

        if "org" in cfg and isinstance(cfg["org"], str):
            s = replace(s, org=cfg["org"] or None)

        if "timeout_s" in cfg:
            try:
                s = replace(s, timeout_s=float(cfg["timeout_s"]))
            except (TypeError, ValueError, IoConfigError):
                pass

        if "chunk_size" in cfg:
            try:
                s = replace(s, chunk_size=int(cfg["chunk_size"]))
            except (TypeError, ValueError, IoConfigError):
                pass

        if "max_workers" in cfg:
            try:
                s = replace(s, max_workers=int(cfg["max_workers"]))
            except (TypeError, ValueError, IoConfigError):
                pass

        if "headers" in cfg and isinstance(cfg["headers"], dict):
            s = replace(s, headers={str(k): str(v) for k, v in cfg["headers"].items()})

        return s

    @classmethod
    def from_env(cls, base: ClientSettings | None = None, prefix: str = "FLUXQ_") -> ClientSettings:
        """
        Build ClientSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - FLUXQ_URL
            - FLUXQ_ORG
            - FLUXQ_TIMEOUT_S
            - FLUXQ_CHUNK_SIZE
            - FLUXQ_MAX_WORKERS
            - FLUXQ_HEADERS is not supported; provide headers via TOML
        """
        s = base or cls()

        def get(name: str) -> str | None:
            return os.getenv(prefix + name)

        mapping: dict[str, Any] = {}
        for key in ("url", "org", "timeout_s", "chunk_size", "max_workers"):
            v = get(key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ClientSettings:
        """
        Build ClientSettings from a TOML file.

        Search order when `path` is None:
            1) ./fluxq.toml (with either a top-level [client] table or direct keys)
            2) ./pyproject.toml under [tool.fluxq.client]

        Returns defaults if no file is present.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "fluxq.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("fluxq", {}).get("client", {}) if isinstance(tool, dict) else None
            else:
                top = data
                if "client" in top and isinstance(top["client"], dict):
                    cfg = top["client"]
                else:
                    cfg = top
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ClientSettings:
        """
        Load ClientSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (fluxq.toml, pyproject.toml).

        Returns:
            ClientSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
