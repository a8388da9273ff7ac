#!/usr/bin/env python3
"""
Command-line interface for the nerts bot.

Usage:
    python -m nerts_bot.cli --peer 127.0.0.1:27015 --server-id 76561198000000001 \
        --local-id 76561198000000002
    nerts-bot --peer relay.local:27015 --server-id 1 --local-id 2 --verbose
"""

import argparse
import logging
import signal
from typing import Tuple

from .bot.decision import DecisionEngine
from .bot.runtime import Bot
from .bot.transport import UdpTransport
from .config import BotConfig
from .errors import NertsBotError
from .sentry_config import capture_exception, init_sentry

logger = logging.getLogger(__name__)


def parse_address(value: str) -> Tuple[str, int]:
    """Parse ``host:port`` for argparse."""
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected host:port, got {value!r}")
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Autoplay bot for Nerts")
    parser.add_argument("--server-id", type=lambda v: int(v, 0), required=True,
                        help="Peer id of the game server")
    parser.add_argument("--local-id", type=lambda v: int(v, 0), required=True,
                        help="Peer id of this bot's seat")
    parser.add_argument("--peer", type=parse_address, required=True,
                        help="host:port of the relay forwarding game traffic")
    parser.add_argument("--bind", type=parse_address, default=("0.0.0.0", 0),
                        help="Local host:port to bind (default: any)")
    parser.add_argument("--wait-timeout", type=float, default=None,
                        help="Safety timeout in seconds for every wait")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def main(argv=None):
    """Main entry point for the nerts bot CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(threadName)s] %(levelname)s: %(message)s'
    )
    if init_sentry():
        logger.info("Sentry error monitoring enabled")

    try:
        config = BotConfig.from_env(wait_timeout=args.wait_timeout)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        transport = UdpTransport(
            args.bind, args.peer, peer_id=args.server_id,
            channels=(config.to_client_channel,),
        )
    except (NertsBotError, OSError) as e:
        logger.error(f"Cannot open transport: {e}")
        return 1
    bot = Bot(transport, args.local_id, config)

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        bot.stop(timeout=0)

    # Register signal handlers for graceful shutdown
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        with bot:
            bot.connect(args.server_id)
            DecisionEngine(bot).run()
    except NertsBotError as e:
        logger.error(f"Bot stopped: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        capture_exception(e)
        return 1
    finally:
        transport.close()

    return 0


if __name__ == "__main__":
    exit(main())
