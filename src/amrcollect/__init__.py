"""amrcollect - Deduplicating rtlamr to InfluxDB collector."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("amrcollect")
except PackageNotFoundError:
    __version__ = "0+local"
from amrcollect._checksum import check_idm_crc
from amrcollect.collector import CollectStats, Collector
from amrcollect.config import CollectConfig
from amrcollect.exceptions import (
    BootstrapError,
    ChecksumError,
    CollectConfigError,
    CollectError,
    DecodeError,
    UnknownTypeError,
    WriteError,
)
from amrcollect.models import Idm, IdmMessage, Point, Scm, ScmMessage
from amrcollect.state import HistoricalRow, MeterRegistry, Reconciler, RingStore, slot_id

__all__ = [
    "__version__",
    "BootstrapError",
    "ChecksumError",
    "CollectConfig",
    "CollectConfigError",
    "CollectError",
    "CollectStats",
    "Collector",
    "DecodeError",
    "HistoricalRow",
    "Idm",
    "IdmMessage",
    "MeterRegistry",
    "Point",
    "Reconciler",
    "RingStore",
    "Scm",
    "ScmMessage",
    "UnknownTypeError",
    "WriteError",
    "check_idm_crc",
    "slot_id",
]
