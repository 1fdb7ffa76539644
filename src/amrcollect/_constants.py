"""Internal constants shared across the library."""

from datetime import timedelta

# ------------------------------------------------------------------
# IDM interval bookkeeping
# ------------------------------------------------------------------

RING_SLOTS = 256
INTERVAL_PERIOD = timedelta(minutes=5)
TRANSMIT_TICK_MICROSECONDS = 62.5
RECONCILE_THRESHOLD = timedelta(seconds=30)

DEFAULT_MULTIPLIER = 10.0

# ------------------------------------------------------------------
# Serial number CRC (CRC-16/CCITT family)
# ------------------------------------------------------------------

IDM_CRC_INIT = 0xFFFF
IDM_CRC_RESIDUE = 0x1D0F

# ------------------------------------------------------------------
# Message families and output schema
# ------------------------------------------------------------------

MESSAGE_TYPE_IDM = "IDM"
MESSAGE_TYPE_SCM = "SCM"

TAG_ENDPOINT_ID = "endpoint_id"
TAG_ENDPOINT_TYPE = "endpoint_type"
FIELD_CONSUMPTION = "consumption"
FIELD_INTERVAL = "interval"

# ------------------------------------------------------------------
# InfluxDB defaults
# ------------------------------------------------------------------

DEFAULT_DATABASE = "rtlamr"
DEFAULT_MEASUREMENT = "power"
DEFAULT_INFLUXDB_PORT = 8086
DEFAULT_PRELOAD_HOURS = 4.0
