"""
Pydantic v2 models for the query request payload.

Responsibilities
- Define the Query and Dialect models posted to the query endpoint.
- Validate dialect options the response parser depends on (delimiter, annotations).
- Serialize to the server's camelCase JSON body.

Style
- Zero-IO (stdlib + pydantic only).
- Python field names are lower_snake; JSON aliases follow the server API.

Examples:
    >>> from fluxq.core.schema import Query
    >>> Query(query='from(bucket: "telegraf")').to_payload()["type"]
    'flux'
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_DATE_TIME_FORMAT, DEFAULT_DELIMITER

__all__ = [
    "Dialect",
    "Query",
    "DEFAULT_DIALECT",
]

_ANNOTATION_NAMES: tuple[str, ...] = ("datatype", "group", "default")


class Dialect(BaseModel):
    """
    Formatting options for the CSV response body.

    Attributes:
        header (bool): Include the header row.
        delimiter (str): One-character cell delimiter.
        annotations (list[str]): Annotation rows to emit; subset of
            {"datatype", "group", "default"}.
        comment_prefix (str): Prefix of annotation/comment rows (JSON ``commentPrefix``).
        date_time_format (Literal["RFC3339", "RFC3339Nano"]): Timestamp rendering
            (JSON ``dateTimeFormat``).

    Raises:
        pydantic.ValidationError: On a multi-character delimiter or unknown annotation.

    Notes:
        Decoded queries always use DEFAULT_DIALECT; custom dialects only make sense
        for raw queries, whose body is handed to the caller untouched.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    header: bool = True
    delimiter: str = DEFAULT_DELIMITER
    annotations: list[str] = Field(default_factory=lambda: list(_ANNOTATION_NAMES))
    comment_prefix: str = Field(default="#", alias="commentPrefix")
    date_time_format: Literal["RFC3339", "RFC3339Nano"] = Field(
        default=DEFAULT_DATE_TIME_FORMAT, alias="dateTimeFormat"
    )

    @field_validator("delimiter")
    @classmethod
    def _single_char_delimiter(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"delimiter must be a single character, got {v!r}")
        return v

    @field_validator("annotations")
    @classmethod
    def _known_annotations(cls, v: list[str]) -> list[str]:
        unknown = [a for a in v if a not in _ANNOTATION_NAMES]
        if unknown:
            raise ValueError(f"unknown annotations {unknown!r}; allowed {list(_ANNOTATION_NAMES)!r}")
        return v


DEFAULT_DIALECT = Dialect()


class Query(BaseModel):
    """
    A Flux query submission.

    Attributes:
        query (str): Flux script text (non-empty).
        type (Literal["flux"]): Query language.
        dialect (Dialect | None): Response formatting; server defaults when None.

    Examples:
        >>> from fluxq.core.schema import Dialect, Query
        >>> body = Query(query="buckets()", dialect=Dialect(delimiter=";")).to_payload()
        >>> body["dialect"]["delimiter"], body["dialect"]["commentPrefix"]
        (';', '#')
    """

    model_config = ConfigDict(extra="forbid")

    query: str = Field(..., min_length=1)
    type: Literal["flux"] = "flux"
    dialect: Dialect | None = None

    def with_dialect(self, dialect: Dialect) -> Query:
        return self.model_copy(update={"dialect": dialect})

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the query endpoint (aliases applied, unset dialect omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)
