"""Interval Data Message (IDM) model."""

from __future__ import annotations

from pydantic import Field

from amrcollect.models._base import U8, U16, U32, AmrBaseModel, AmrTimestamp


class Idm(AmrBaseModel):
    """IDM payload: the last N consumption intervals of one endpoint.

    Parameters
    ----------
    endpoint_type : int
        ERT type byte.
    endpoint_id : int
        ERT serial number.
    transmit_time_offset : int
        62.5 µs ticks elapsed since the start of the most recent interval.
    interval_count : int
        Slot id (mod 256) of the most recent interval in ``intervals``.
    intervals : list of int
        Differential consumption per interval; index 0 is the most recent,
        index k is k intervals older.
    serial_checksum : int
        CRC over the serial number (``SerialNumberCRC``).
    """

    endpoint_type: U8 = Field(alias="ERTType")
    endpoint_id: U32 = Field(alias="ERTSerialNumber")
    transmit_time_offset: U16 = Field(default=0, alias="TransmitTimeOffset")
    interval_count: U8 = Field(alias="ConsumptionIntervalCount")
    intervals: list[U16] = Field(default_factory=list, alias="DifferentialConsumptionIntervals")
    serial_checksum: U16 = Field(alias="SerialNumberCRC")


class IdmMessage(AmrBaseModel):
    """A received IDM batch: envelope time plus the decoded payload."""

    received_at: AmrTimestamp = Field(alias="Time")
    type: str = Field(default="IDM", alias="Type")
    idm: Idm = Field(alias="Message")
