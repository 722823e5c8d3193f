# main.py

"""Entry point for the scrapmarket headless CLI."""

import argparse
import logging
import sys

from scrapmarket.config.logging_config import setup_logging
from scrapmarket.filters.group_filter import FilterCriteria
from scrapmarket.filters.group_ranker import SORT_MODES

logger = logging.getLogger("scrapmarket.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="scrapmarket",
        description="Grocery price comparison across supermarkets.",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query.",
    )
    parser.add_argument(
        "--db-only",
        action="store_true",
        default=False,
        dest="db_only",
        help="Search stored products only (no live scraping).",
    )
    parser.add_argument(
        "--data-saver",
        action="store_true",
        default=False,
        dest="data_saver",
        help="Ask the backend for a lighter response.",
    )
    parser.add_argument(
        "--input",
        default=None,
        dest="input_file",
        help="Process a saved backend JSON payload instead of fetching.",
    )
    parser.add_argument(
        "--min-price",
        type=float,
        default=None,
        dest="min_price",
        help="Drop groups cheaper than this.",
    )
    parser.add_argument(
        "--max-price",
        type=float,
        default=None,
        dest="max_price",
        help="Drop groups whose best price exceeds this.",
    )
    parser.add_argument(
        "--stores",
        default=None,
        help="Comma-separated supermarkets to keep.",
    )
    parser.add_argument(
        "--in-stock",
        action="store_true",
        default=False,
        dest="in_stock",
        help="Keep only groups with stock somewhere.",
    )
    parser.add_argument(
        "--sort",
        choices=list(SORT_MODES),
        default="relevance",
        help="Result ordering (default: relevance).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Custom output directory for --save (default: results/).",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        default=False,
        help="Save JSON and CSV copies of the results.",
    )
    parser.add_argument(
        "--popular",
        action="store_true",
        default=False,
        help="Show the backend's popular products.",
    )
    parser.add_argument(
        "--history",
        default=None,
        metavar="CANONID",
        help="Show the price history of one product.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on the backend.",
    )
    return parser


def _run_search(args: argparse.Namespace) -> int:
    from scrapmarket.cli.runner import cli_search, parse_stores

    criteria = FilterCriteria(
        min_price=args.min_price,
        max_price=args.max_price,
        supermarkets=parse_stores(args.stores),
        in_stock_only=args.in_stock,
    )
    return cli_search(
        query=args.query,
        db_only=args.db_only,
        data_saver=args.data_saver,
        input_file=args.input_file,
        criteria=criteria,
        sort=args.sort,
        output_format=args.output_format,
        output_dir=args.output_dir,
        save=args.save,
    )


def main(argv: list[str] | None = None) -> None:
    """Route to health check, history, popular products or search."""
    log_file = setup_logging()
    logger.info("scrapmarket starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.health:
        from scrapmarket.cli.runner import run_health_check

        sys.exit(run_health_check())
    if args.history:
        from scrapmarket.cli.runner import run_history

        sys.exit(run_history(args.history))
    if args.popular:
        from scrapmarket.cli.runner import run_popular

        sys.exit(run_popular(args.output_format))
    if not args.query:
        parser.error("a search query is required")
    sys.exit(_run_search(args))


if __name__ == "__main__":
    main()
