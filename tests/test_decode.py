from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from amrcollect.exceptions import DecodeError, UnknownTypeError
from amrcollect.ingestion.decode import decode_line, decode_payload
from amrcollect.models import IdmMessage, ScmMessage, parse_rtlamr_time

_IDM_LINE = json.dumps(
    {
        "Time": "2020-01-01T00:00:00.123456789-05:00",
        "Offset": 0,
        "Length": 0,
        "Type": "IDM",
        "Message": {
            "Preamble": 1431639715,
            "PacketTypeID": 28,
            "PacketLength": 92,
            "HammingCode": 198,
            "ApplicationVersion": 4,
            "ERTType": 8,
            "ERTSerialNumber": 12345,
            "ConsumptionIntervalCount": 10,
            "ModuleProgrammingState": 188,
            "TamperCounters": "AQIDBAUG",
            "AsynchronousCounters": 0,
            "PowerOutageFlags": "AAAAAAAA",
            "LastConsumptionCount": 1234567,
            "DifferentialConsumptionIntervals": [5, 5, 5],
            "TransmitTimeOffset": 1200,
            "SerialNumberCRC": 4660,
            "PacketCRC": 22136,
        },
    }
)


def test_decode_idm_line() -> None:
    message = decode_line(_IDM_LINE)

    assert isinstance(message, IdmMessage)
    assert message.received_at == datetime(2020, 1, 1, 5, 0, 0, 123456, tzinfo=UTC)
    assert message.idm.endpoint_id == 12345
    assert message.idm.endpoint_type == 8
    assert message.idm.interval_count == 10
    assert message.idm.intervals == [5, 5, 5]
    assert message.idm.transmit_time_offset == 1200
    assert message.idm.serial_checksum == 4660
    assert message.idm.raw["PacketCRC"] == 22136


def test_decode_scm_line() -> None:
    line = '{"Time":"2020-01-01T00:00:00Z","Type":"SCM","Message":{"ID":4711,"Type":7,"Consumption":99}}'

    message = decode_line(line)

    assert isinstance(message, ScmMessage)
    assert message.scm.endpoint_id == 4711
    assert message.scm.consumption == 99


def test_invalid_json_raises_decode_error() -> None:
    with pytest.raises(DecodeError, match="invalid JSON"):
        decode_line("{not json")


def test_non_object_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_line("[1, 2, 3]")


def test_missing_type_raises_decode_error() -> None:
    with pytest.raises(DecodeError, match="no Type"):
        decode_payload({"Time": "2020-01-01T00:00:00Z", "Message": {}})


def test_unknown_type_raises_unknown_type_error() -> None:
    with pytest.raises(UnknownTypeError) as exc_info:
        decode_payload({"Time": "2020-01-01T00:00:00Z", "Type": "R900", "Message": {}})

    assert exc_info.value.message_type == "R900"


def test_out_of_range_interval_count_rejected() -> None:
    payload = json.loads(_IDM_LINE)
    payload["Message"]["ConsumptionIntervalCount"] = 256

    with pytest.raises(DecodeError, match="invalid IDM message"):
        decode_payload(payload)


def test_negative_interval_rejected() -> None:
    payload = json.loads(_IDM_LINE)
    payload["Message"]["DifferentialConsumptionIntervals"] = [1, -1]

    with pytest.raises(DecodeError):
        decode_payload(payload)


def test_missing_serial_crc_rejected() -> None:
    payload = json.loads(_IDM_LINE)
    del payload["Message"]["SerialNumberCRC"]

    with pytest.raises(DecodeError):
        decode_payload(payload)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2020-01-01T00:00:00Z", datetime(2020, 1, 1, tzinfo=UTC)),
        ("2020-01-01T00:00:00", datetime(2020, 1, 1, tzinfo=UTC)),
        ("2020-01-01T01:00:00.500000+01:00", datetime(2020, 1, 1, 0, 0, 0, 500000, tzinfo=UTC)),
    ],
)
def test_parse_rtlamr_time(value: str, expected: datetime) -> None:
    assert parse_rtlamr_time(value) == expected
