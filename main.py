# main.py

"""Entry point for the price_tracker command-line interface."""

import argparse
import logging
import os
import sys
from pathlib import Path

from price_tracker.config.logging_config import setup_logging

logger = logging.getLogger("price_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_tracker",
        description="Track e-commerce product prices over time.",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="SQLite database path (default: data/price_tracker.db).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    track = sub.add_parser(
        "track", help="Add or refresh a product by URL.",
    )
    track.add_argument("url", help="Product page URL.")
    track.add_argument(
        "--owner",
        default=os.getenv("PRICE_TRACKER_OWNER"),
        help="Authenticated owner id (default: $PRICE_TRACKER_OWNER).",
    )
    track.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Extraction timeout in seconds.",
    )

    history = sub.add_parser(
        "history", help="Show the price timeline of a product.",
    )
    history.add_argument("product_id", type=int)
    history.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )

    scrape = sub.add_parser(
        "scrape", help="Extract product data without saving it.",
    )
    scrape.add_argument("url", help="Product page URL.")
    scrape.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Extraction timeout in seconds.",
    )

    untrack = sub.add_parser(
        "untrack", help="Stop tracking a product and drop its history.",
    )
    untrack.add_argument("product_id", type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Dispatch to the requested CLI command."""
    from price_tracker.cli import runner

    args = _build_parser().parse_args(argv)

    log_file = setup_logging(command=args.command)
    logger.info("price_tracker %s starting, log file: %s",
                args.command, log_file)

    db_path = Path(args.db_path) if args.db_path else None

    try:
        if args.command == "track":
            return runner.run_track(
                args.owner, args.url, db_path, args.timeout,
            )
        if args.command == "history":
            return runner.run_history(
                args.product_id, args.output_format, db_path,
            )
        if args.command == "scrape":
            return runner.run_scrape(args.url, args.timeout)
        return runner.run_untrack(args.product_id, db_path)
    except Exception:
        logger.critical("Fatal error in %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("price_tracker shutting down")


if __name__ == "__main__":
    sys.exit(main())
