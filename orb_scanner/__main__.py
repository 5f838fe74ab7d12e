"""
Command line entry point.

    python -m orb_scanner --once
    python -m orb_scanner --output snapshots/orb.json --json-logs
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import structlog

from .config.delivery import FileDeliveryConfig, StdoutDeliveryConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .delivery.base import BaseSnapshotDelivery, DeliveryStatus
from .delivery.file import FileSnapshotDelivery
from .delivery.stdout import StdoutSnapshotDelivery
from .engine import ScanEngine
from .errors import ConfigurationError, MarketDataUnavailableError
from .logging.config import configure_logging
from .providers.yahoo import YahooChartProvider

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orb-scanner",
        description="Opening range breakout scanner for index options"
    )
    parser.add_argument(
        '--config-dir',
        type=Path,
        help='Directory holding instruments.yaml'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single scan and exit'
    )
    parser.add_argument(
        '--lotto',
        action='store_true',
        help='With --once, run the index lotto scan instead of the ORB scan'
    )
    parser.add_argument(
        '--check-config',
        action='store_true',
        help='Validate configuration for every configured symbol and exit'
    )
    parser.add_argument(
        '--output',
        type=str,
        help='Write snapshots to this file instead of stdout'
    )
    parser.add_argument(
        '--format',
        type=str,
        choices=['json', 'jsonl', 'pretty'],
        default='json',
        help='Snapshot format (jsonl only applies to --output)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        default='info',
        help='Log level'
    )
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON'
    )
    return parser


def build_delivery(output: Optional[str], fmt: str) -> BaseSnapshotDelivery:
    if output:
        return FileSnapshotDelivery("file", FileDeliveryConfig(
            output_path=output,
            format="jsonl" if fmt == "jsonl" else "json",
        ))
    return StdoutSnapshotDelivery("stdout", StdoutDeliveryConfig(
        format="pretty" if fmt == "pretty" else "json",
    ))


def check_config(config_dir: Optional[Path]) -> int:
    """Validate merged configuration per symbol; returns a process exit code."""
    loader = ConfigLoader.create(config_dir)
    config = loader.build_config()
    symbols = list(dict.fromkeys(config.scan.symbols + config.lotto.symbols))

    failures = 0
    for symbol in [None] + symbols:
        errors = ConfigValidator.validate_config(loader.merge_config(symbol))
        if errors:
            failures += 1
            for error in errors:
                logger.error("Invalid configuration", symbol=symbol or "*",
                             field=error.field, message=error.message, value=error.value)
        else:
            logger.info("Configuration valid", symbol=symbol or "*")
    return 1 if failures else 0


async def run(args: argparse.Namespace) -> int:
    delivery = build_delivery(args.output, args.format)

    async with YahooChartProvider() as provider:
        engine = ScanEngine.from_config_dir(provider, args.config_dir)

        if not args.once:
            await engine.run_forever(deliveries=[delivery])
            return 0

        try:
            if args.lotto:
                kind, payload = "lotto", (await engine.run_lotto_scan()).to_payload()
            else:
                kind, payload = "orb", (await engine.run_scan()).to_payload()
        except MarketDataUnavailableError as e:
            logger.error("Scan failed, no market data", failed_symbols=e.failed_symbols)
            return 2

        result = delivery.publish(kind, payload)
        return 0 if result.status is DeliveryStatus.SUCCESS else 1


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level.upper(), format_json=args.json_logs)

    if args.check_config:
        return check_config(args.config_dir)

    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error("Scanner not started", errors=e.errors)
        return 1
    except KeyboardInterrupt:
        logger.info("Scanner stopped")
        return 0


if __name__ == "__main__":
    sys.exit(main())
