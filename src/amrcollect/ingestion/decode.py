"""Decoding of rtlamr JSON lines into typed messages."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from amrcollect._constants import MESSAGE_TYPE_IDM, MESSAGE_TYPE_SCM
from amrcollect.exceptions import DecodeError, UnknownTypeError
from amrcollect.models.idm import IdmMessage
from amrcollect.models.scm import ScmMessage

_MESSAGE_MODELS: dict[str, type[IdmMessage] | type[ScmMessage]] = {
    MESSAGE_TYPE_IDM: IdmMessage,
    MESSAGE_TYPE_SCM: ScmMessage,
}


class _Envelope(BaseModel):
    """Minimal envelope used to read the discriminator before full parsing."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = Field(alias="Type")


def _short_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors()[:3]:
        loc = ".".join(str(p) for p in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg', '')}")
    return "; ".join(parts)


def decode_payload(payload: Any) -> IdmMessage | ScmMessage:
    """Validate an already-parsed JSON object into a typed message.

    Raises
    ------
    UnknownTypeError
        ``Type`` is not a handled message family.
    DecodeError
        The envelope or payload does not match the message schema.
    """
    if not isinstance(payload, dict):
        raise DecodeError(f"expected a JSON object, got {type(payload).__name__}")

    try:
        envelope = _Envelope.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"message has no Type: {_short_errors(exc)}") from exc

    model = _MESSAGE_MODELS.get(envelope.type)
    if model is None:
        raise UnknownTypeError(f"Ignoring unknown msg type {envelope.type}", message_type=envelope.type)

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"invalid {envelope.type} message: {_short_errors(exc)}") from exc


def decode_line(line: str | bytes) -> IdmMessage | ScmMessage:
    """Parse one newline-delimited rtlamr JSON record."""
    try:
        payload = json.loads(line)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc
    return decode_payload(payload)
