"""Fixed-capacity interval ring for one meter.

Slots are addressed by the absolute interval id the meter transmits, modulo
256. :func:`slot_id` is the only place that wraparound is computed.
"""

from __future__ import annotations

from datetime import datetime

from amrcollect._constants import RING_SLOTS


def slot_id(interval_count: int, index: int) -> int:
    """Return the slot of the interval *index* positions older than *interval_count*.

    >>> slot_id(2, 5)
    253
    """
    return (interval_count - index) % RING_SLOTS


class RingStore:
    """Most recent reading per interval slot for one meter.

    ``occupied_time[slot]`` is ``None`` for an empty slot. ``is_new`` is only
    meaningful right after a reconciliation call; the next call clears it.
    """

    __slots__ = ("occupied_time", "usage", "is_new")

    def __init__(self) -> None:
        self.occupied_time: list[datetime | None] = [None] * RING_SLOTS
        self.usage: list[float] = [0.0] * RING_SLOTS
        self.is_new: list[bool] = [False] * RING_SLOTS

    def __repr__(self) -> str:
        return f"RingStore(occupied={self.occupied_count()}, new={sum(self.is_new)})"

    def is_empty(self, slot: int) -> bool:
        return self.occupied_time[slot] is None

    def occupied_count(self) -> int:
        return sum(1 for t in self.occupied_time if t is not None)

    def clear_new(self) -> None:
        for slot in range(RING_SLOTS):
            self.is_new[slot] = False

    def set_slot(self, slot: int, occupied_time: datetime, usage: float, *, new: bool) -> None:
        self.occupied_time[slot] = occupied_time
        self.usage[slot] = usage
        if new:
            self.is_new[slot] = True
