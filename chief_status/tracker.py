#!/usr/bin/env python3
"""
chief-status: Southwest Chief Train Status Tracker TUI

A terminal user interface for tracking Amtrak's Southwest Chief (#3 westbound,
#4 eastbound) with auto-refresh. Positions are resolved against the canonical
route rather than trusting the source's own next-station field.

Usage:
    chief-status                          # Track both trains
    chief-status 3                        # Track the westbound train only
    chief-status --source transit         # Use the transit API instead of the timetable page
    chief-status --date 2026-10-17 --once # Resolve one service date and exit
    chief-status --compact                # Single-line output for status bars
    chief-status --json --once            # Machine-readable status records
    chief-status --notify                 # Desktop notifications on changes
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from time import sleep
from zoneinfo import ZoneInfo

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.logging import RichHandler
from rich.text import Text

from .api import FetchCache, fetch_runs, last_fetch_time, service_dates
from .config import (
    DEFAULT_SOURCE,
    DEFAULT_TIMEZONE,
    LOOKBACK_DAYS,
    REFRESH_INTERVAL,
    SOURCES,
    TRAIN_IDS,
    Config,
)
from .display import (
    build_compact_display,
    build_error_panel,
    build_header,
    build_not_found_panel,
    build_progress_bar,
    build_status_table,
)
from .engine import resolve_runs
from .models import TrainStatus, _now
from .notifications import NotificationState, check_and_notify

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chief-status",
        description="Track the Southwest Chief in real-time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s                          # Track both #3 and #4
    %(prog)s 4                        # Track the eastbound train only
    %(prog)s --source map             # Use the live map feed
    %(prog)s --date 2026-10-17        # Runs that started on or before that date
    %(prog)s --lookback 0             # Only runs that started today
    %(prog)s --compact                # Single-line output for status bars
    %(prog)s --json --once            # Print status records as JSON

By default the runs that started today, yesterday, and two days ago are all
checked, since a trip takes over two days end to end.
        """
    )
    parser.add_argument(
        "train_ids",
        nargs="*",
        metavar="TRAIN",
        help="Train number(s) to track: 3 (westbound) and/or 4 (eastbound). Default: both"
    )
    parser.add_argument(
        "--source", "-s",
        choices=SOURCES,
        default=DEFAULT_SOURCE,
        help=f"Upstream source to read (default: {DEFAULT_SOURCE})"
    )
    parser.add_argument(
        "--date",
        dest="service_date",
        type=_parse_date,
        metavar="YYYY-MM-DD",
        help="Latest service date to check (default: today)"
    )
    parser.add_argument(
        "--lookback",
        type=int,
        default=LOOKBACK_DAYS,
        metavar="DAYS",
        help=f"Also check runs that started this many days earlier (default: {LOOKBACK_DAYS})"
    )
    parser.add_argument(
        "-r", "--refresh",
        type=int,
        default=REFRESH_INTERVAL,
        help=f"Refresh interval in seconds (default: {REFRESH_INTERVAL})"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Display once and exit (no auto-refresh)"
    )
    parser.add_argument(
        "--compact", "-c",
        action="store_true",
        help="Compact single-line output (for status bars, tmux, etc.)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print status records as JSON"
    )
    parser.add_argument(
        "--notify",
        action="store_true",
        help="Send notifications on next-station changes, arrivals, and railcam approaches"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log fetch and resolution details"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    train_ids = list(dict.fromkeys(args.train_ids)) or list(TRAIN_IDS)
    return Config(
        train_ids=train_ids,
        source=args.source,
        service_date=args.service_date,
        lookback_days=max(args.lookback, 0),
        refresh_interval=max(args.refresh, 1),
        compact_mode=args.compact,
        json_output=args.json,
        notify=args.notify,
        verbose=args.verbose,
    )


def setup_logging(verbose: bool, console: Console | None = None) -> None:
    """Route log records through rich so they don't tear the live display."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def latest_service_date(config: Config, now: datetime) -> date:
    """The newest service date to check; "today" is reckoned on Mountain time."""
    if config.service_date:
        return config.service_date
    return now.astimezone(ZoneInfo(DEFAULT_TIMEZONE)).date()


def resolve_all(config: Config, cache: FetchCache, now: datetime | None = None) -> dict[str, list[TrainStatus]]:
    """Fetch and resolve every tracked train. One train failing never blocks the other."""
    now = now or _now()
    days = service_dates(latest_service_date(config, now), config.lookback_days)
    results = {}
    for train_id in config.train_ids:
        runs = fetch_runs(config.source, train_id, days, cache)
        results[train_id] = resolve_runs(runs, train_id, config.source, now)
        logger.debug("Train #%s: %d instance(s)", train_id, len(results[train_id]))
    return results


def results_as_json(results: dict[str, list[TrainStatus]]) -> str:
    records = [status.to_dict() for statuses in results.values() for status in statuses]
    return json.dumps(records, indent=2)


def build_compact_lines(results: dict[str, list[TrainStatus]], cache: FetchCache) -> Group:
    """One line per tracked train: its current instance."""
    fetched = last_fetch_time(cache)
    lines = []
    for train_id, statuses in results.items():
        current = next((s for s in statuses if s.is_next), None)
        if current is None:
            lines.append(Text(f"🚂 Southwest Chief #{train_id}: no data", style="yellow"))
        else:
            lines.append(build_compact_display(current, fetched))
    return Group(*lines)


def build_display(results: dict[str, list[TrainStatus]], config: Config, cache: FetchCache,
                  now: datetime | None = None) -> Layout | Group:
    """Build the full TUI display or the compact display."""
    if config.compact_mode:
        return build_compact_lines(results, cache)

    all_statuses = [s for statuses in results.values() for s in statuses]
    layout = Layout()
    sections = [Layout(name="header", size=4)]
    for train_id in results:
        sections.append(Layout(name=f"train-{train_id}"))
    layout.split(*sections)

    layout["header"].update(build_header(
        all_statuses,
        config.source,
        now=now,
        last_fetch_time=last_fetch_time(cache),
        last_error=cache.last_error,
        refresh_interval=config.refresh_interval,
    ))

    for train_id, statuses in results.items():
        section = layout[f"train-{train_id}"]
        if not statuses:
            if cache.last_error:
                days = service_dates(latest_service_date(config, now or _now()), config.lookback_days)
                if config.source == "map":
                    days = days[-1:]  # one live snapshot
                section.update(build_error_panel(cache.last_error, config.source, days))
            else:
                section.update(build_not_found_panel(train_id, config.source))
            continue
        current = next((s for s in statuses if s.is_next), statuses[-1])
        section.split(
            Layout(name=f"progress-{train_id}", size=3),
            Layout(name=f"table-{train_id}"),
        )
        layout[f"progress-{train_id}"].update(build_progress_bar(current))
        layout[f"table-{train_id}"].update(build_status_table(train_id, statuses, now))

    return layout


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    unknown = [t for t in args.train_ids if t not in TRAIN_IDS]
    if unknown:
        parser.error(f"unknown train number(s): {', '.join(unknown)} (track 3 and/or 4)")
    config = config_from_args(args)

    console = Console()
    setup_logging(config.verbose, console)

    cache = FetchCache()
    notify_state = NotificationState()

    def refresh() -> dict[str, list[TrainStatus]]:
        results = resolve_all(config, cache)
        if config.notify:
            check_and_notify([s for statuses in results.values() for s in statuses], notify_state)
        return results

    if config.json_output:
        results = refresh()
        console.print_json(results_as_json(results))
        if args.once:
            return
        try:
            while True:
                sleep(config.refresh_interval)
                console.print_json(results_as_json(refresh()))
        except KeyboardInterrupt:
            pass
        return

    if args.once:
        console.print(build_display(refresh(), config, cache))
        return

    if config.compact_mode:
        try:
            while True:
                console.clear()
                console.print(build_display(refresh(), config, cache))
                sleep(config.refresh_interval)
        except KeyboardInterrupt:
            pass
        return

    console.print("[dim]Fetching train data...[/]")
    try:
        with Live(
            build_display(refresh(), config, cache),
            console=console,
            refresh_per_second=1,
            screen=True
        ) as live:
            while True:
                sleep(config.refresh_interval)
                live.update(build_display(refresh(), config, cache))
    except KeyboardInterrupt:
        console.print("\n[dim]Tracking stopped.[/]")
        sys.exit(0)


if __name__ == "__main__":
    main()
