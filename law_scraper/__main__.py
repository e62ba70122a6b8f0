"""
CLI entry point for law-scraper.

Usage:
    python -m law_scraper crawl
    python -m law_scraper crawl --max-pages 2 --concurrency 4
    python -m law_scraper browse --data docs/data/documents.json --search 建築
"""

import argparse
import asyncio
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="law_scraper",
        description="KAA regulatory notice crawler and viewer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl every listing page and write docs/data/documents.json
  python -m law_scraper crawl

  # Crawl the first two pages with four detail workers
  python -m law_scraper crawl --max-pages 2 --concurrency 4

  # Show notices due soon from Kaohsiung issued in the last year
  python -m law_scraper browse --status due-soon --region kaohsiung --time-range 1y

Environment:
  DETAIL_CONCURRENCY  detail workers (default 2)
  DETAIL_DELAY_MS     per-worker delay after each detail page (default 200)
  FETCH_MAX_PAGES     listing page cap (default unbounded)
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    crawl = subparsers.add_parser("crawl", help="Crawl the listing and write the dataset")
    crawl.add_argument(
        "--config",
        type=str,
        help="Path to source YAML file (default: bundled source.yml)",
    )
    crawl.add_argument(
        "--output",
        type=str,
        default="docs/data/documents.json",
        help="Dataset file (default: docs/data/documents.json)",
    )
    crawl.add_argument(
        "--max-pages",
        type=int,
        help="Maximum listing pages to crawl (overrides FETCH_MAX_PAGES)",
    )
    crawl.add_argument(
        "--concurrency",
        type=int,
        help="Detail page workers (overrides DETAIL_CONCURRENCY)",
    )
    crawl.add_argument(
        "--delay-ms",
        type=int,
        help="Per-worker delay after each detail page (overrides DETAIL_DELAY_MS)",
    )

    browse = subparsers.add_parser("browse", help="Filter and print a dataset")
    browse.add_argument(
        "--data",
        type=str,
        default="docs/data/documents.json",
        help="Dataset path or URL (default: docs/data/documents.json)",
    )
    browse.add_argument(
        "--config",
        type=str,
        help="Path to source YAML file; its timezone sets the reference day",
    )
    browse.add_argument("--search", type=str, default="", help="Free-text search")
    browse.add_argument(
        "--sort",
        choices=["date-desc", "date-asc", "serial-asc", "serial-desc"],
        default="date-desc",
        help="Sort order (default: date-desc)",
    )
    browse.add_argument(
        "--status",
        action="append",
        choices=["due-soon", "active", "expired", "no-deadline"],
        help="Status to include; repeat for several (default: all)",
    )
    browse.add_argument(
        "--region",
        choices=["all", "central", "kaohsiung", "taipei", "newTaipei", "other"],
        default="all",
        help="Region filter (default: all)",
    )
    browse.add_argument(
        "--time-range",
        choices=["3m", "1y", "gt1y", "all"],
        default="3m",
        help="Issued within (default: 3m)",
    )
    browse.add_argument(
        "--simple",
        action="store_true",
        help="Compact one-line rows",
    )
    browse.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Result chunks to reveal (default: 1)",
    )

    return parser.parse_args(argv)


async def crawl_async(args):
    """Crawl and write the dataset."""
    from .orchestrator import run_scraper

    logger = structlog.get_logger(__name__)

    logger.info(
        "starting_law_scraper",
        max_pages=args.max_pages,
        concurrency=args.concurrency,
        delay_ms=args.delay_ms,
    )

    dataset = await run_scraper(
        config_path=args.config,
        output_path=args.output,
        max_pages=args.max_pages,
        concurrency=args.concurrency,
        delay=args.delay_ms / 1000.0 if args.delay_ms is not None else None,
    )

    logger.info(
        "crawl_complete",
        records=len(dataset.documents),
        output=args.output,
    )
    return dataset


async def browse_async(args) -> bool:
    """Load a dataset, apply the requested filters and print the view."""
    from .config.loader import load_source
    from .core.models import DeadlineCategory
    from .view.presenters import format_updated_at, render_card, render_simple_row
    from .view.session import ViewSession

    session = ViewSession.from_source(load_source(args.config))
    if not await session.load(args.data):
        print(session.status)
        return False

    session.set_search(args.search)
    session.set_sort(args.sort)
    session.set_region(args.region)
    session.set_time_range(args.time_range)
    if args.simple:
        session.toggle_simple_view()

    if args.status:
        wanted = {DeadlineCategory(s) for s in args.status}
        for category in DeadlineCategory:
            if category not in wanted:
                session.toggle_status(category, checked=False)

    for _ in range(max(args.pages, 1) - 1):
        if not session.load_more():
            break

    print(format_updated_at(session.updated_at, session.timezone))
    print(session.status)
    print()

    render = render_simple_row if session.filters.simple_view else render_card
    for doc in session.visible_documents:
        print(render(doc))
        if not session.filters.simple_view:
            print()

    if session.has_more:
        remaining = len(session.filtered) - len(session.visible_documents)
        print(f"... {remaining} more (use --pages)")

    return True


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"law-scraper {__version__}")
        sys.exit(0)

    if not args.command:
        print("Specify a command: crawl or browse (see --help)", file=sys.stderr)
        sys.exit(2)

    setup_logging(args.log_level, args.json_logs)

    try:
        if args.command == "crawl":
            dataset = asyncio.run(crawl_async(args))
            sys.exit(0 if dataset.documents else 1)
        else:
            ok = asyncio.run(browse_async(args))
            sys.exit(0 if ok else 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
