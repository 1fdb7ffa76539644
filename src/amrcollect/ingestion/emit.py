"""Projection of reconciled ring-store slots into output points."""

from __future__ import annotations

from amrcollect._constants import FIELD_CONSUMPTION, TAG_ENDPOINT_ID, TAG_ENDPOINT_TYPE
from amrcollect.models.idm import IdmMessage
from amrcollect.models.point import FieldValue, Point
from amrcollect.state.ring import RingStore, slot_id


def endpoint_tags(endpoint_id: int, endpoint_type: int) -> dict[str, str]:
    return {
        TAG_ENDPOINT_ID: str(endpoint_id),
        TAG_ENDPOINT_TYPE: str(endpoint_type),
    }


class RecordEmitter:
    """Build IDM points for the slots the last reconciliation flagged new.

    Parameters
    ----------
    measurement : str
        Measurement name of the emitted points.
    slot_field : str or None
        When set, the slot id is also written as an integer field of this
        name so that history queries can recover it.
    """

    def __init__(self, measurement: str, *, slot_field: str | None = None) -> None:
        self.measurement = measurement
        self.slot_field = slot_field

    def emit(self, meter_id: int, endpoint_type: int, store: RingStore, batch: IdmMessage) -> list[Point]:
        """Return one point per new slot touched by *batch*, in batch order."""
        tags = endpoint_tags(meter_id, endpoint_type)
        points: list[Point] = []
        seen: set[int] = set()

        idm = batch.idm
        for index in range(len(idm.intervals)):
            slot = slot_id(idm.interval_count, index)
            if slot in seen or not store.is_new[slot]:
                continue
            seen.add(slot)

            occupied = store.occupied_time[slot]
            if occupied is None:
                continue

            fields: dict[str, FieldValue] = {FIELD_CONSUMPTION: store.usage[slot]}
            if self.slot_field:
                fields[self.slot_field] = slot
            points.append(Point(self.measurement, dict(tags), fields, occupied))

        return points
