"""Base model and timestamp handling for rtlamr messages.

Every rtlamr payload model inherits from :class:`AmrBaseModel` which
provides:

* ``populate_by_name`` so models can be built from either the rtlamr
  CamelCase keys or the snake_case field names.
* ``extra="ignore"`` so packet fields the collector does not use
  (preambles, tamper counters, packet CRCs) are accepted silently.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

# rtlamr emits Go RFC3339Nano timestamps; datetime keeps microseconds only.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_rtlamr_time(value: Any) -> Any:
    """Convert an rtlamr ``Time`` value into a timezone-aware UTC datetime.

    Nanosecond fractions are truncated to microseconds and naive values are
    assumed to be UTC. Non-string, non-datetime values are passed through for
    pydantic to reject.
    """
    if isinstance(value, str):
        text = _FRACTION_RE.sub(r"\1", value.strip())
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return value


AmrTimestamp = Annotated[datetime, BeforeValidator(parse_rtlamr_time)]
"""Annotated type that coerces rtlamr RFC3339(Nano) strings to UTC datetimes."""

U8 = Annotated[int, Field(ge=0, le=0xFF)]
U16 = Annotated[int, Field(ge=0, le=0xFFFF)]
U32 = Annotated[int, Field(ge=0, le=0xFFFFFFFF)]


class AmrBaseModel(BaseModel):
    """Base for rtlamr payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original message dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged
