"""Output point handed to the time-series store."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

FieldValue = float | int


def _escape_key(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _format_field(value: FieldValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"field value {value!r} cannot be written")
    return repr(float(value))


@dataclass(frozen=True)
class Point:
    """One record: measurement name, tag set, field set and timestamp."""

    measurement: str
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, FieldValue] = field(default_factory=dict)
    time: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def epoch_seconds(self) -> int:
        """Timestamp in whole seconds since the epoch (floor)."""
        return math.floor(self.time.timestamp())

    def to_line_protocol(self) -> str:
        """Serialise to InfluxDB line protocol with second precision.

        Tags are written sorted by key, as the server stores them.
        """
        if not self.fields:
            raise ValueError(f"point for {self.measurement!r} has no fields")
        head = _escape_measurement(self.measurement)
        for key in sorted(self.tags):
            head += f",{_escape_key(key)}={_escape_key(self.tags[key])}"
        body = ",".join(f"{_escape_key(key)}={_format_field(value)}" for key, value in self.fields.items())
        return f"{head} {body} {self.epoch_seconds}"
