"""Entry point for the trade feed.

Usage:
    python -m trade_feed --config config/feed.yaml
    python -m trade_feed --channel book --pair BTC-PERPETUAL
    python -m trade_feed --list-products
    python -m trade_feed --pair ETH-PERPETUAL --save-config config/feed.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from trade_feed.core.config import ChannelRevision, FeedConfig, load_config
from trade_feed.exchange.factory import create_adapter
from trade_feed.feed.runner import FeedRunner, LoggingTradeSink


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Exchange trade feed",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--channel",
        choices=[revision.value for revision in ChannelRevision],
        help="Trade channel revision (overrides config)",
    )

    parser.add_argument(
        "--pair",
        "-p",
        type=str,
        action="append",
        help="Pair to subscribe to (can specify multiple)",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path",
    )

    parser.add_argument(
        "--list-products",
        action="store_true",
        help="Fetch and print the exchange catalog, then exit",
    )

    parser.add_argument(
        "--save-config",
        type=str,
        help="Write the merged configuration to this path, then exit",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and validate without connecting",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> FeedConfig:
    """Build configuration from file and command line args.

    Args:
        args: Parsed command line arguments

    Returns:
        Merged configuration
    """
    config = load_config(args.config)

    if args.channel:
        config.exchange.channel = ChannelRevision(args.channel)

    if args.pair:
        config.pairs = list(args.pair)

    if args.log_level:
        config.log_level = args.log_level

    if args.log_file:
        config.log_file = args.log_file

    return config


async def list_products(config: FeedConfig) -> int:
    """Print the resolved catalog, one symbol per line."""
    adapter = create_adapter(config.exchange)
    for product in await adapter.fetch_products():
        print(f"{adapter.id}:{product}")
    return 0


async def main_async(config: FeedConfig) -> int:
    """Async main entry point.

    Args:
        config: Feed configuration

    Returns:
        Exit code
    """
    sink = LoggingTradeSink()
    adapter = create_adapter(config.exchange, sink)
    runner = FeedRunner(
        adapter,
        config.pairs,
        reconnect_delay=config.reconnect_delay_seconds,
        max_reconnect_delay=config.max_reconnect_delay_seconds,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.ensure_future(runner.stop()))

    try:
        await runner.run()
        return 0
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        return 1
    finally:
        adapter.keepalive.stop_all()
        logging.info(f"Received {sink.total} trades")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_file)

    logger = logging.getLogger(__name__)
    logger.info("Trade feed starting")
    logger.info(f"Exchange: {config.exchange.type.value}")
    logger.info(f"Channel: {config.exchange.channel.value}")
    logger.info(f"Pairs: {config.pairs}")

    if args.save_config:
        config.to_yaml(args.save_config)
        logger.info(f"Configuration written to {args.save_config}")
        return 0

    if args.dry_run:
        logger.info("Dry run - configuration valid")
        return 0

    if args.list_products:
        return asyncio.run(list_products(config))

    if not config.pairs:
        logger.error("No pairs specified. Use --pair or configure in YAML.")
        return 1

    return asyncio.run(main_async(config))


if __name__ == "__main__":
    sys.exit(main())
