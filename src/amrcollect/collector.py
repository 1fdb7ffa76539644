"""High-level collector: rtlamr lines in, deduplicated points out."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from amrcollect._checksum import check_idm_crc
from amrcollect._constants import FIELD_CONSUMPTION, FIELD_INTERVAL
from amrcollect._transport import HistorySource, InfluxTransport, PointSink
from amrcollect.config import CollectConfig
from amrcollect.exceptions import (
    BootstrapError,
    ChecksumError,
    CollectError,
    DecodeError,
    UnknownTypeError,
    WriteError,
)
from amrcollect.ingestion.decode import decode_line
from amrcollect.ingestion.emit import RecordEmitter
from amrcollect.ingestion.history import fetch_history
from amrcollect.ingestion.scm import scm_points
from amrcollect.models.idm import IdmMessage
from amrcollect.models.point import Point
from amrcollect.models.scm import ScmMessage
from amrcollect.state.reconcile import Reconciler
from amrcollect.state.registry import MeterRegistry

_logger = logging.getLogger(__name__)


@dataclass
class CollectStats:
    """Counters for one collector run."""

    lines: int = 0
    idm_messages: int = 0
    scm_messages: int = 0
    points_written: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def summary(self) -> str:
        skipped = ", ".join(f"{k}={v}" for k, v in sorted(self.skipped.items())) or "none"
        return (
            f"lines={self.lines} idm={self.idm_messages} scm={self.scm_messages} "
            f"points_written={self.points_written} skipped: {skipped}"
        )


async def iter_stdin_lines() -> AsyncIterator[str]:
    """Yield stdin lines without blocking the event loop.

    Works for pipes and redirected files alike; each read runs in the
    default executor.
    """
    loop = asyncio.get_running_loop()
    while True:
        raw = await loop.run_in_executor(None, sys.stdin.buffer.readline)
        if not raw:
            return
        yield raw.decode("utf-8", errors="replace")


class Collector:
    """Pull loop that turns rtlamr output into time-series points.

    Each line is fully processed (decode, validate, reconcile, emit, write)
    before the next one is read. No error for a single line stops the loop.

    Usage::

        async with Collector(config) as collector:
            await collector.preload()
            await collector.run(iter_stdin_lines())
    """

    def __init__(
        self,
        config: CollectConfig,
        *,
        sink: PointSink | None = None,
        history: HistorySource | None = None,
        registry: MeterRegistry | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._history = history
        self._external_session = session is not None
        self._http_session = session
        self._registry = registry if registry is not None else MeterRegistry()
        self._reconciler = Reconciler(multiplier=config.multiplier)
        self._emitter = RecordEmitter(config.idm_measurement, slot_field=config.slot_field)
        self.stats = CollectStats()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Collector:
        _logger.debug("Collector config: %r", self._config)
        if self._sink is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = InfluxTransport(self._config, self._http_session)
            _logger.info("connecting to %r@%r", self._config.username, self._config.base_url)
            self._sink = transport
            if self._history is None:
                self._history = transport
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    @property
    def registry(self) -> MeterRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    async def preload(self) -> int:
        """Warm-start the registry from recent history.

        Failure is never fatal: the registry simply starts cold.

        Returns
        -------
        int
            Number of meters known after the preload.
        """
        if self._history is None:
            _logger.info("No history source; starting with an empty registry")
            return len(self._registry)

        try:
            rows = await fetch_history(
                self._history,
                self._config.idm_measurement,
                self._config.preload_window,
                usage_field=FIELD_CONSUMPTION,
                slot_field=self._config.slot_field or FIELD_INTERVAL,
            )
        except BootstrapError as exc:
            _logger.warning("Preload failed, starting cold: %s", exc)
            return len(self._registry)

        applied = self._registry.bootstrap(rows)
        _logger.info("Preloaded: %d meters (%d intervals)", len(self._registry), applied)
        return len(self._registry)

    # ------------------------------------------------------------------
    # Per-line processing
    # ------------------------------------------------------------------

    def handle_idm(self, message: IdmMessage) -> list[Point]:
        """Validate, reconcile and emit one IDM batch.

        Raises
        ------
        ChecksumError
            The serial number CRC is wrong; the registry is not touched.
        """
        idm = message.idm
        if not check_idm_crc(idm.endpoint_id, idm.serial_checksum):
            raise ChecksumError(
                f"Message failed checksum (endpoint {idm.endpoint_id})",
                endpoint_id=idm.endpoint_id,
            )

        store = self._registry.get_or_create(idm.endpoint_id)
        self._reconciler.update(store, message)
        return self._emitter.emit(idm.endpoint_id, idm.endpoint_type, store, message)

    def handle_scm(self, message: ScmMessage) -> list[Point]:
        return scm_points(message, self._config.scm_measurement)

    def handle_line(self, line: str | bytes) -> list[Point]:
        """Decode one input line and return the points it produces.

        Raises
        ------
        DecodeError, UnknownTypeError, ChecksumError
            The line is rejected as a whole.
        """
        message = decode_line(line)
        if isinstance(message, IdmMessage):
            _logger.debug("Received IDM message")
            self.stats.idm_messages += 1
            return self.handle_idm(message)
        _logger.debug("Received SCM message")
        self.stats.scm_messages += 1
        return self.handle_scm(message)

    async def process_line(self, line: str | bytes) -> list[Point]:
        """Handle and write one line, logging and counting any failure."""
        if not line.strip():
            return []
        self.stats.lines += 1

        try:
            points = self.handle_line(line)
        except UnknownTypeError as exc:
            _logger.info("%s", exc)
            self.stats.skip("unknown_type")
            return []
        except DecodeError as exc:
            _logger.warning("Skipping line: %s", exc)
            self.stats.skip("decode")
            return []
        except ChecksumError as exc:
            _logger.warning("%s", exc)
            self.stats.skip("checksum")
            return []

        if not points:
            return []
        if self._sink is None:
            raise CollectError("Collector has no sink; use it as an async context manager")

        try:
            await self._sink.write(points)
        except WriteError as exc:
            _logger.warning("Dropping %d points: %s", len(points), exc)
            self.stats.skip("write")
            return []

        self.stats.points_written += len(points)
        return points

    async def run(self, lines: AsyncIterable[str | bytes]) -> CollectStats:
        """Process *lines* until the iterable is exhausted."""
        async for line in lines:
            await self.process_line(line)
        _logger.info("End of input: %s", self.stats.summary())
        return self.stats
