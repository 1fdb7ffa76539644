"""InfluxDB 1.x HTTP transport and the sink/source interfaces it implements."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any, Protocol, TextIO

import aiohttp

from amrcollect.config import CollectConfig
from amrcollect.exceptions import BootstrapError, WriteError
from amrcollect.models.point import Point

_logger = logging.getLogger(__name__)

_WRITE_ENDPOINT = "/write"
_QUERY_ENDPOINT = "/query"


class PointSink(Protocol):
    """Anything that accepts a batch of points for persistence."""

    async def write(self, points: Sequence[Point]) -> None:
        ...


class HistorySource(Protocol):
    """Anything that can answer an InfluxQL statement with a ``/query`` JSON body."""

    async def query(self, statement: str) -> dict[str, Any]:
        ...


def encode_points(points: Sequence[Point]) -> list[str]:
    """Encode *points* as line protocol, dropping any that cannot be encoded."""
    lines: list[str] = []
    for point in points:
        try:
            lines.append(point.to_line_protocol())
        except ValueError as exc:
            _logger.warning("Dropping unencodable point for %s at %s: %s", point.measurement, point.time, exc)
    return lines


class InfluxTransport:
    """HTTP client for the InfluxDB 1.x write and query endpoints."""

    def __init__(self, config: CollectConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._auth = aiohttp.BasicAuth(config.username, config.password) if config.username else None

    async def write(self, points: Sequence[Point]) -> None:
        """Write *points* at second precision. No retry on failure."""
        if not points:
            return

        url = f"{self._config.base_url}{_WRITE_ENDPOINT}"
        params = {"db": self._config.database, "precision": "s"}
        lines = encode_points(points)
        if not lines:
            return
        body = "\n".join(lines)

        _logger.debug("POST %s (%d points)", url, len(lines))

        try:
            async with self._http.post(url, params=params, data=body.encode("utf-8"), auth=self._auth) as resp:
                if resp.status not in (200, 204):
                    text = await resp.text()
                    raise WriteError(
                        f"HTTP {resp.status} from {_WRITE_ENDPOINT}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=_WRITE_ENDPOINT,
                    )
        except WriteError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise WriteError(
                f"Request to {_WRITE_ENDPOINT} failed: {exc!r}",
                endpoint=_WRITE_ENDPOINT,
            ) from exc

    async def query(self, statement: str) -> dict[str, Any]:
        """Run an InfluxQL statement with nanosecond epoch timestamps."""
        url = f"{self._config.base_url}{_QUERY_ENDPOINT}"
        params = {"db": self._config.database, "epoch": "ns", "q": statement}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, params=params, auth=self._auth) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise BootstrapError(f"HTTP {resp.status} from {_QUERY_ENDPOINT}: {text[:200]}")
        except BootstrapError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise BootstrapError(f"Request to {_QUERY_ENDPOINT} failed: {exc!r}") from exc

        try:
            body_json = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BootstrapError(f"Invalid JSON from {_QUERY_ENDPOINT}: {text[:200]}") from exc

        if not isinstance(body_json, dict):
            raise BootstrapError(f"Unexpected response shape from {_QUERY_ENDPOINT}")
        return body_json


class LineProtocolPrinter:
    """Sink that prints line protocol instead of writing it (dry runs)."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out if out is not None else sys.stdout

    async def write(self, points: Sequence[Point]) -> None:
        for line in encode_points(points):
            self._out.write(line + "\n")
        self._out.flush()
