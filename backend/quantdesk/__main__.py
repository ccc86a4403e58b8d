"""CLI entry point for the outcome evaluator.

Usage:
    python -m quantdesk check
    python -m quantdesk reset
    python -m quantdesk accuracy AAPL --days 30
    python -m quantdesk init-db
    python -m quantdesk serve
"""

import argparse
import asyncio
import json
import logging
import sys

from quantdesk.config import get_settings
from quantdesk.logging_setup import configure_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="quantdesk",
        description="Trade recommendation outcome evaluator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m quantdesk check
  python -m quantdesk accuracy BTC --days 90
  python -m quantdesk serve
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Run one outcome evaluation pass")
    sub.add_parser("reset", help="Clear all evaluated outcomes")
    sub.add_parser("init-db", help="Create the trade_analyses table if missing")

    accuracy = sub.add_parser("accuracy", help="Show historical accuracy for a symbol")
    accuracy.add_argument("symbol", type=str)
    accuracy.add_argument(
        "--days",
        type=int,
        default=30,
        help="Lookback window in days (default: 30)",
    )

    sub.add_parser("serve", help="Run the HTTP API")
    return parser.parse_args(argv)


async def cmd_check(repo, settings) -> None:
    """Run one evaluation pass and print its counters."""
    from quantdesk.clients import PolygonRestClient
    from quantdesk.services import EvaluationBatchRunner

    client = PolygonRestClient(
        api_key=settings.polygon_api_key,
        base_url=settings.polygon_base_url,
        timeout=settings.request_timeout_seconds,
    )
    try:
        runner = EvaluationBatchRunner.from_settings(settings, repo, client)
        counters = await runner.evaluate_batch()
    finally:
        await client.close()
    print(json.dumps(counters.to_dict(), indent=2))


async def cmd_reset(repo) -> None:
    count = await repo.reset_outcomes()
    print(f"Reset {count} trade outcomes")


async def cmd_accuracy(repo, symbol: str, days: int) -> None:
    accuracy = await repo.get_accuracy(symbol, days=days)
    print(json.dumps(accuracy.to_dict(), indent=2))


async def run(args: argparse.Namespace) -> None:
    from quantdesk.storage import RecommendationRepository, init_database

    settings = get_settings()
    db = await init_database(settings.database_url, echo=settings.debug)
    repo = RecommendationRepository(db)

    try:
        if args.command == "check":
            await cmd_check(repo, settings)
        elif args.command == "reset":
            await cmd_reset(repo)
        elif args.command == "accuracy":
            await cmd_accuracy(repo, args.symbol, args.days)
        elif args.command == "init-db":
            print("Tables created: trade_analyses")
    finally:
        await db.close()


def main(argv=None) -> None:
    args = parse_args(argv)

    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    if args.command == "serve":
        from quantdesk.main import main as serve

        serve()
        return

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
