"""Meter registry: one ring store per endpoint.

The registry is the only owner of ring stores. Stores are created lazily on
first sighting of a meter or eagerly while bootstrapping from history.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime

from amrcollect._constants import RING_SLOTS
from amrcollect.state.ring import RingStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoricalRow:
    """A previously recorded interval reading, as returned by the store."""

    timestamp: datetime
    usage: float
    meter_id: int
    meter_type: int | None
    slot_id: int


class MeterRegistry:
    """In-memory mapping of endpoint id to :class:`RingStore`.

    Lifetime is the process lifetime; nothing here is persisted.
    """

    def __init__(self) -> None:
        self._meters: dict[int, RingStore] = {}

    def __len__(self) -> int:
        return len(self._meters)

    def __contains__(self, meter_id: object) -> bool:
        return meter_id in self._meters

    def __iter__(self) -> Iterator[int]:
        return iter(self._meters)

    def get(self, meter_id: int) -> RingStore | None:
        return self._meters.get(meter_id)

    def get_or_create(self, meter_id: int) -> RingStore:
        """Return the store for *meter_id*, inserting an empty one if needed."""
        store = self._meters.get(meter_id)
        if store is None:
            store = RingStore()
            self._meters[meter_id] = store
            _logger.debug("New meter %s", meter_id)
        return store

    def bootstrap(self, rows: Iterable[HistoricalRow]) -> int:
        """Prime stores from known-good history.

        Slots are written directly: the reconciliation engine is bypassed and
        ``is_new`` is left untouched, so the first live batch compares
        against real history instead of empty slots.

        Returns
        -------
        int
            Number of rows applied.
        """
        applied = 0
        for row in rows:
            if not 0 <= row.slot_id < RING_SLOTS:
                _logger.warning("Skipping history row for meter %s: slot %s out of range", row.meter_id, row.slot_id)
                continue
            store = self.get_or_create(row.meter_id)
            store.set_slot(row.slot_id, row.timestamp, row.usage, new=False)
            applied += 1
        return applied
