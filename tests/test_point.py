from __future__ import annotations

from datetime import UTC, datetime

import pytest

from amrcollect.models.point import Point


def test_line_protocol_sorted_tags_and_float_field() -> None:
    point = Point(
        "power",
        {"endpoint_type": "8", "endpoint_id": "12345"},
        {"consumption": 50.0},
        datetime(2020, 1, 1, tzinfo=UTC),
    )

    assert point.to_line_protocol() == "power,endpoint_id=12345,endpoint_type=8 consumption=50.0 1577836800"


def test_line_protocol_integer_field_and_escaping() -> None:
    point = Point(
        "my power",
        {"site": "a,b=c d"},
        {"consumption": 1.5, "interval": 11},
        datetime(2020, 1, 1, 0, 0, 1, 999999, tzinfo=UTC),
    )

    assert point.to_line_protocol() == r"my\ power,site=a\,b\=c\ d consumption=1.5,interval=11i 1577836801"


def test_line_protocol_requires_fields() -> None:
    with pytest.raises(ValueError):
        Point("power", {}, {}, datetime(2020, 1, 1, tzinfo=UTC)).to_line_protocol()


def test_line_protocol_rejects_nan() -> None:
    with pytest.raises(ValueError):
        Point("power", {}, {"consumption": float("nan")}, datetime(2020, 1, 1, tzinfo=UTC)).to_line_protocol()
