"""Command line entry point: read rtlamr JSON from stdin, write to InfluxDB.

Typical use::

    rtlamr -format=json -msgtype=scm,idm | amr-collect
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from amrcollect._transport import LineProtocolPrinter
from amrcollect.collector import Collector, iter_stdin_lines
from amrcollect.config import CollectConfig
from amrcollect.exceptions import CollectConfigError

_LOG = logging.getLogger("amrcollect")

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(filename)s:%(lineno)d: %(message)s"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="amr-collect",
        description="Deduplicate rtlamr SCM/IDM messages from stdin into InfluxDB.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    parser.add_argument(
        "--no-preload",
        action="store_true",
        help="Skip warm-starting interval state from recent InfluxDB history.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print line protocol to stdout instead of writing to InfluxDB.",
    )
    return parser.parse_args(argv)


async def _run(config: CollectConfig, args: argparse.Namespace) -> int:
    sink = LineProtocolPrinter() if args.dry_run else None
    async with Collector(config, sink=sink) as collector:
        if config.preload_enabled and not args.no_preload and not args.dry_run:
            await collector.preload()
        stats = await collector.run(iter_stdin_lines())
    print(f"[amr-collect] {stats.summary()}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level, format=_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    try:
        config = CollectConfig.from_env(require_credentials=not args.dry_run)
    except CollectConfigError as exc:
        _LOG.error("%s", exc)
        return 2

    _LOG.info('using database name "%s"', config.database)
    _LOG.info('using measurement name "%s" for IDM', config.idm_measurement)
    _LOG.info('using measurement name "%s" for SCM', config.scm_measurement)

    try:
        return asyncio.run(_run(config, args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
