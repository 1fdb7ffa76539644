"""State layer.

Per-meter ring stores, the reconciliation engine that merges redundant IDM
batches into them, and the registry that owns one store per meter.
"""

from amrcollect.state.reconcile import Reconciler, reconstruct_interval_time
from amrcollect.state.registry import HistoricalRow, MeterRegistry
from amrcollect.state.ring import RingStore, slot_id

__all__ = [
    "HistoricalRow",
    "MeterRegistry",
    "Reconciler",
    "RingStore",
    "reconstruct_interval_time",
    "slot_id",
]
