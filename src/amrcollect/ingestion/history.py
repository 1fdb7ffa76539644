"""Historical preload: query recent IDM points and convert them to rows.

The query result follows the InfluxDB 1.x ``/query`` JSON layout::

    {"results": [{"series": [{"name": ..., "columns": [...], "values": [[...], ...]}]}]}

Columns are looked up by name, so the order ``SELECT *`` happens to return
does not matter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from amrcollect._constants import FIELD_CONSUMPTION, FIELD_INTERVAL, TAG_ENDPOINT_ID, TAG_ENDPOINT_TYPE
from amrcollect._transport import HistorySource
from amrcollect.exceptions import BootstrapError
from amrcollect.ingestion.normalize import safe_float, safe_int
from amrcollect.state.registry import HistoricalRow

_logger = logging.getLogger(__name__)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _format_window(window: timedelta) -> str:
    return f"{max(int(window.total_seconds()), 1)}s"


def build_history_query(measurement: str, window: timedelta) -> str:
    return f"SELECT * FROM {_quote_identifier(measurement)} WHERE time > now() - {_format_window(window)}"


def _parse_time(value: Any) -> datetime | None:
    # epoch=ns is requested, but RFC3339 strings are accepted as well.
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    nsec = safe_int(value)
    if nsec is None:
        return None
    try:
        return datetime.fromtimestamp(nsec // 1_000_000_000, tz=UTC) + timedelta(microseconds=(nsec % 1_000_000_000) // 1000)
    except (OverflowError, OSError, ValueError):
        return None


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def _is_row(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def iter_history_rows(
    response: Mapping[str, Any],
    *,
    usage_field: str = FIELD_CONSUMPTION,
    slot_field: str = FIELD_INTERVAL,
) -> Iterator[HistoricalRow]:
    """Yield a :class:`HistoricalRow` for every usable value row.

    Rows missing a timestamp, meter id, usage or slot id are skipped, as are
    results, series and rows that do not have the documented shape.

    Raises
    ------
    BootstrapError
        The response body reports a query error.
    """
    if response.get("error"):
        raise BootstrapError(f"history query failed: {response['error']}")

    for result in _as_list(response.get("results")):
        if not isinstance(result, Mapping):
            continue
        if result.get("error"):
            raise BootstrapError(f"history query failed: {result['error']}")
        for series in _as_list(result.get("series")):
            if not isinstance(series, Mapping):
                _logger.debug("Ignoring malformed series: %r", series)
                continue
            columns = _as_list(series.get("columns"))
            if not all(isinstance(column, str) for column in columns):
                _logger.debug("Ignoring series with malformed columns: %r", columns)
                continue
            series_tags = series.get("tags")
            if not isinstance(series_tags, Mapping):
                series_tags = {}
            for values in _as_list(series.get("values")):
                if not _is_row(values):
                    _logger.debug("Ignoring malformed row: %r", values)
                    continue
                record = dict(series_tags)
                record.update(zip(columns, values))

                timestamp = _parse_time(record.get("time"))
                usage = safe_float(record.get(usage_field))
                meter_id = safe_int(record.get(TAG_ENDPOINT_ID))
                slot = safe_int(record.get(slot_field))
                if timestamp is None or usage is None or meter_id is None or slot is None:
                    continue

                yield HistoricalRow(
                    timestamp=timestamp,
                    usage=usage,
                    meter_id=meter_id,
                    meter_type=safe_int(record.get(TAG_ENDPOINT_TYPE)),
                    slot_id=slot,
                )


async def fetch_history(
    source: HistorySource,
    measurement: str,
    window: timedelta,
    *,
    usage_field: str = FIELD_CONSUMPTION,
    slot_field: str = FIELD_INTERVAL,
) -> list[HistoricalRow]:
    """Query the last *window* of *measurement* and return parsed rows."""
    statement = build_history_query(measurement, window)
    _logger.debug("History query: %s", statement)
    response = await source.query(statement)
    return list(iter_history_rows(response, usage_field=usage_field, slot_field=slot_field))
