"""Daybook CLI."""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path

import uvicorn

from daybook import config, paths
from daybook.analysis import build_analysis
from daybook.api.server import create_app
from daybook.categories import CategoryCatalog
from daybook.observability import configure_logging
from daybook.timeline import CurrentBlockStore, DayStore, TimelineError

logger = logging.getLogger(__name__)


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def _root(args) -> Path:
    return Path(args.root).expanduser().resolve() if args.root else paths.data_dir()


def cmd_init(args):
    """Create the data root, the category catalog and a current block."""
    root = _root(args)
    root.mkdir(parents=True, exist_ok=True)
    recorded = DayStore(root).dates()
    categories = CategoryCatalog(root).load()
    current_store = CurrentBlockStore(root)
    current = current_store.get()
    if current is None:
        current = current_store.get_or_default()
        current_store.save(current)

    print_header("Daybook - Setup")
    print(f"  ✓ data root   {root}")
    print(f"  ✓ day records {len(recorded)}")
    print(f"  ✓ categories  {len(categories)}")
    print(f"  ✓ current     [{current.category_id}] {current.title or '-'}")


def cmd_day(args):
    """Print one day's blocks."""
    root = _root(args)
    day = date.fromisoformat(args.date) if args.date else datetime.now().astimezone().date()
    blocks = DayStore(root, treat_corrupt_as_empty=config.TREAT_CORRUPT_AS_EMPTY).read(day)
    if args.json:
        print(json.dumps([b.to_dict() for b in blocks], indent=2))
        return

    names = {c.id: c.name for c in CategoryCatalog(root).load()}
    print_header(f"{day.isoformat()} - {len(blocks)} block(s)")
    for block in blocks:
        category = names.get(block.category_id, f"#{block.category_id}")
        print(
            f"  {block.start.strftime('%H:%M:%S')} - {block.end.strftime('%H:%M:%S')}"
            f"  {category:<16} {block.title}"
        )


def cmd_analysis(args):
    """Print time per category over a date range."""
    root = _root(args)
    start = date.fromisoformat(args.start)
    end = date.fromisoformat(args.end) if args.end else start
    analysis = build_analysis(
        DayStore(root, treat_corrupt_as_empty=config.TREAT_CORRUPT_AS_EMPTY),
        CategoryCatalog(root),
        start,
        end,
    )
    if args.json:
        print(json.dumps(analysis.to_dict(), indent=2))
        return

    print_header(f"Analysis {start.isoformat()} .. {end.isoformat()}")
    totals = {}
    for trend in analysis.trends:
        totals[trend.category_id] = totals.get(trend.category_id, 0) + trend.seconds
    for category in analysis.categories:
        seconds = totals.get(category.id, 0)
        share = analysis.percentages.get(category.id, 0.0)
        hours, minutes = seconds // 3600, seconds % 3600 // 60
        print(f"  {category.name:<16} {hours:>4}h {minutes:02d}m  {share:6.1%}")


def cmd_serve(args):
    """Run the API server."""
    app = create_app(data_root=_root(args))
    uvicorn.run(app, host=args.host, port=args.port)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Daybook - record the day as labelled time blocks")
    parser.add_argument("--root", help="Data root (default: $DAYBOOK_HOME/data)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init", help="Initialize the data root")

    p = subparsers.add_parser("day", help="Show one day's blocks")
    p.add_argument("date", nargs="?", help="YYYY-MM-DD (default: today)")
    p.add_argument("--json", action="store_true", help="Output JSON")

    p = subparsers.add_parser("analysis", help="Time per category over a date range")
    p.add_argument("start", help="YYYY-MM-DD")
    p.add_argument("end", nargs="?", help="YYYY-MM-DD (default: start)")
    p.add_argument("--json", action="store_true", help="Output JSON")

    p = subparsers.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default=config.HOST)
    p.add_argument("--port", "-p", type=int, default=config.PORT)

    args = parser.parse_args(argv)
    configure_logging(
        "DEBUG" if args.verbose else config.LOG_LEVEL,
        json_format=config.LOG_JSON,
        log_file=config.LOG_FILE,
    )

    commands = {
        "init": cmd_init,
        "day": cmd_day,
        "analysis": cmd_analysis,
        "serve": cmd_serve,
    }
    if not args.command:
        parser.print_help()
        return 1

    try:
        commands[args.command](args)
    except (TimelineError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
