#!/usr/bin/env python3
"""
dollar-kv Server Entry Point

This is the main entry point for starting the dollar-kv server.

Usage:
    python -m dollarkv.server                        # Default settings (127.0.0.1:5555)
    python -m dollarkv.server --port 8080            # Custom port
    python -m dollarkv.server --host 0.0.0.0         # Custom host
    python -m dollarkv.server --debug                # Enable debug logging

Environment Variables:
    DOLLAR_KV_HOST                - Server bind address
    DOLLAR_KV_PORT                - Server port
    DOLLAR_KV_MAX_REQUEST_LENGTH  - Longest incomplete request kept per connection
    DOLLAR_KV_DEBUG               - Enable debug mode (true/false)
    DOLLAR_KV_LOG_LEVEL           - Log level when debug mode is off
"""

import argparse
import asyncio
import logging
import signal
import sys

from .cache.store import KVStore
from .config.settings import settings
from .network.tcp_server import KVServer


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="dollar-kv: In-Memory Key-Value Store Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--max-request-length",
        type=int,
        default=settings.MAX_REQUEST_LENGTH,
        help="Close connections buffering a longer incomplete request",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main(argv=None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    # One store for the whole process, shared by every connection
    store = KVStore()
    server = KVServer(
        host=args.host,
        port=args.port,
        store=store,
        max_request_length=args.max_request_length,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only). On Windows Ctrl+C still arrives
    # as KeyboardInterrupt and is handled around run_until_complete below.
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting dollar-kv server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Max request length: {args.max_request_length}")
    logger.info(f"  Debug: {args.debug}")

    exit_code = 0
    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except OSError as e:
        logger.error(f"Cannot listen on {args.host}:{args.port}: {e}")
        exit_code = 1
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        asyncio.set_event_loop(None)
        logger.info("Server shutdown complete")

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
