"""Reconciliation of redundant IDM interval batches.

Every IDM transmission repeats the most recent intervals. This module
decides, per interval, whether the ring store already holds an equivalent
observation (suppressed) or whether the reading is new or corrected
(stored and flagged for emission).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from amrcollect._constants import (
    DEFAULT_MULTIPLIER,
    INTERVAL_PERIOD,
    RECONCILE_THRESHOLD,
    TRANSMIT_TICK_MICROSECONDS,
)
from amrcollect.models.idm import IdmMessage
from amrcollect.state.ring import RingStore, slot_id

_logger = logging.getLogger(__name__)


def reconstruct_interval_time(received_at: datetime, index: int, transmit_time_offset: int) -> datetime:
    """Return the boundary time of the interval *index* positions back.

    The transmit offset aligns receipt time to the start of the most recent
    interval. Sub-second jitter is dropped.
    """
    time_offset = timedelta(microseconds=transmit_time_offset * TRANSMIT_TICK_MICROSECONDS)
    t = received_at - index * INTERVAL_PERIOD - time_offset
    return t.replace(microsecond=0)


class Reconciler:
    """Merge IDM batches into per-meter ring stores.

    Parameters
    ----------
    multiplier : float
        Scaling applied to each interval delta before storing it. This is
        the only scaling applied to IDM usage.
    threshold : timedelta
        Maximum distance between a stored and a reconstructed timestamp for
        the two to count as the same observation.
    """

    def __init__(
        self,
        *,
        multiplier: float = DEFAULT_MULTIPLIER,
        threshold: timedelta = RECONCILE_THRESHOLD,
    ) -> None:
        self.multiplier = multiplier
        self.threshold = threshold

    def update(self, store: RingStore, batch: IdmMessage) -> None:
        """Apply *batch* to *store* and flag the slots it replaced."""
        store.clear_new()

        idm = batch.idm
        for index, delta in enumerate(idm.intervals):
            slot = slot_id(idm.interval_count, index)
            t = reconstruct_interval_time(batch.received_at, index, idm.transmit_time_offset)

            held = store.occupied_time[slot]
            if held is not None and abs(held - t) <= self.threshold:
                continue

            if held is not None:
                _logger.debug(
                    "Meter %s slot %d corrected: %s -> %s",
                    idm.endpoint_id,
                    slot,
                    held.isoformat(),
                    t.isoformat(),
                )
            store.set_slot(slot, t, float(delta) * self.multiplier, new=True)
