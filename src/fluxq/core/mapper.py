"""
Mapping of decoded records onto caller-defined structured types.

Resolution order for ``RecordMapper.to_model(record, target)``:
1) a decode function registered for ``target`` (explicit registration);
2) pydantic models: ``target.model_validate(record.values)``; use ``Field(alias="_time")``
   to bind a field to a column whose label is not a valid identifier;
3) dataclasses: fields are filled from the column of the same name, or from the column
   named in ``field(metadata={"column": ...})``; absent columns leave dataclass defaults.

Anything else raises MappingError. Validation errors raised by pydantic propagate unchanged.

Examples:
    >>> from pydantic import BaseModel, Field
    >>> from fluxq.core.mapper import RecordMapper
    >>> from fluxq.core.tables import FluxRecord
    >>> class Level(BaseModel):
    ...     location: str
    ...     level: float = Field(alias="_value")
    >>> RecordMapper().to_model(FluxRecord(0, {"location": "coyote_creek", "_value": 8.1}), Level)
    Level(location='coyote_creek', level=8.1)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel

from .constants import COLUMN_METADATA_KEY
from .errors import MappingError
from .tables import FluxRecord

__all__ = [
    "RecordMapper",
    "DEFAULT_MAPPER",
]

T = TypeVar("T")

Decoder = Callable[[FluxRecord], Any]


class RecordMapper:
    """Registry of per-type decode functions with pydantic/dataclass fallbacks."""

    def __init__(self) -> None:
        self._decoders: dict[type, Decoder] = {}

    def register(self, target: type[T], decoder: Callable[[FluxRecord], T] | None = None):
        """
        Register a decode function for ``target``.

        Usable directly (``mapper.register(Point, fn)``) or as a decorator
        (``@mapper.register(Point)``).
        """
        if decoder is not None:
            self._decoders[target] = decoder
            return decoder

        def _wrap(fn: Callable[[FluxRecord], T]) -> Callable[[FluxRecord], T]:
            self._decoders[target] = fn
            return fn

        return _wrap

    def is_registered(self, target: type) -> bool:
        return target in self._decoders

    def to_model(self, record: FluxRecord, target: type[T]) -> T:
        decoder = self._decoders.get(target)
        if decoder is not None:
            return decoder(record)
        if isinstance(target, type) and issubclass(target, BaseModel):
            return target.model_validate(record.values)  # type: ignore[return-value]
        if isinstance(target, type) and dataclasses.is_dataclass(target):
            return _to_dataclass(record, target)
        raise MappingError(
            f"cannot map records to {target!r}: register a decoder or use a pydantic model/dataclass"
        )


def _to_dataclass(record: FluxRecord, target: type[T]) -> T:
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(target):  # type: ignore[arg-type]
        if not f.init:
            continue
        column = f.metadata.get(COLUMN_METADATA_KEY, f.name)
        if column in record.values:
            kwargs[f.name] = record.values[column]
    try:
        return target(**kwargs)
    except TypeError as exc:
        raise MappingError(f"record does not provide required fields of {target.__name__}: {exc}") from exc


DEFAULT_MAPPER = RecordMapper()
