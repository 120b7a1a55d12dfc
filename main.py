#!/usr/bin/env python3
"""
Minesweeper shared board - Main entry point.

Usage:
    python main.py serve [--host HOST] [--port PORT]
                         [--width W] [--height H] [--mines N]
                         [--restart-timeout SECONDS] [--seed SEED]
"""
import argparse
import asyncio
import logging
import os
import sys

from minefield import BoardConfig, GameConfig
from relay import run_server

logger = logging.getLogger(__name__)


def serve(args: argparse.Namespace) -> int:
    """Run the relay server until interrupted."""
    try:
        config = GameConfig(
            board=BoardConfig(
                width=args.width,
                height=args.height,
                num_mines=args.mines,
            ),
            restart_timeout_seconds=args.restart_timeout,
        )
    except ValueError as error:
        logger.error(f"Invalid configuration: {error}")
        return 2

    try:
        asyncio.run(run_server(config, args.host, args.port, seed=args.seed))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except OSError as error:
        logger.error(f"Failed to start server: {error}")
        return 1
    return 0


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minesweeper shared board - one board for every client"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the relay server")
    serve_parser.add_argument(
        "--host", default=os.getenv("MINEFIELD_HOST", "127.0.0.1"), help="Bind address"
    )
    serve_parser.add_argument(
        "--port", type=int, default=int(os.getenv("PORT", 3000)), help="Bind port"
    )
    serve_parser.add_argument("--width", type=int, default=5, help="Board columns")
    serve_parser.add_argument("--height", type=int, default=5, help="Board rows")
    serve_parser.add_argument("--mines", type=int, default=5, help="Number of mines")
    serve_parser.add_argument(
        "--restart-timeout",
        type=int,
        default=3,
        help="Seconds between a round ending and the next one starting",
    )
    serve_parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible boards"
    )

    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "serve":
        sys.exit(serve(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
