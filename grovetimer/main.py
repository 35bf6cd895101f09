"""GroveTimer application entry point.

Supports two modes:
  - Service mode (default): runs the timer and serves the HTTP API
  - CLI mode: prints statistics or writes an export, then exits

Usage:
    python -m grovetimer.main                    # service mode (same as --serve)
    python -m grovetimer.main --daily            # print today's stats
    python -m grovetimer.main --weekly           # print this week's stats
    python -m grovetimer.main --monthly          # print this month's stats
    python -m grovetimer.main --overall          # print lifetime stats
    python -m grovetimer.main --export out.json  # write all data as JSON
    python -m grovetimer.main --report out.docx  # write this week's Word report
"""

import argparse
import logging

from grovetimer.core.config import get_default_config_path, load_config, resolve_database_path
from grovetimer.persistence.ledger import SessionLedger
from grovetimer.persistence.store import SqliteStateStore
from grovetimer.reporting.exporter import ReportExporter, export_all_data, write_json_export
from grovetimer.reporting.formatter import TextFormatter
from grovetimer.reporting.statistics import StatisticsAggregator


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="grovetimer",
        description="GroveTimer: focus timer with session statistics",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config.json (defaults to the platform data directory)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--daily", action="store_true", help="Print today's stats and exit")
    group.add_argument("--weekly", action="store_true", help="Print this week's stats and exit")
    group.add_argument("--monthly", action="store_true", help="Print this month's stats and exit")
    group.add_argument("--overall", action="store_true", help="Print lifetime stats and exit")
    group.add_argument("--export", metavar="PATH", help="Write all sessions and stats as JSON")
    group.add_argument("--report", metavar="PATH", help="Write this week's report as .docx")
    group.add_argument(
        "--serve",
        action="store_true",
        help="Run the timer service and HTTP API (the default)",
    )
    return parser


def _load_statistics(config: dict) -> StatisticsAggregator:
    """Snapshot the persisted ledger; an open draft is left untouched."""
    store = SqliteStateStore(resolve_database_path(config))
    store.init_db()
    try:
        ledger = SessionLedger(store)
        return StatisticsAggregator.from_ledger(ledger)
    finally:
        store.close()


def _print_daily_stats(config: dict) -> None:
    stats = _load_statistics(config)
    print(TextFormatter.format_status_line(stats.daily_stats(), stats.overall_stats()))
    print()
    print(TextFormatter.format_daily(stats.daily_stats()))


def _print_weekly_stats(config: dict) -> None:
    print(TextFormatter.format_weekly(_load_statistics(config).weekly_stats()))


def _print_monthly_stats(config: dict) -> None:
    print(TextFormatter.format_monthly(_load_statistics(config).monthly_stats()))


def _print_overall_stats(config: dict) -> None:
    print(TextFormatter.format_overall(_load_statistics(config).overall_stats()))


def _write_export(config: dict, output_path: str) -> None:
    stats = _load_statistics(config)
    path = write_json_export(export_all_data(stats.sessions, stats.today), output_path)
    print(f"Exported {len(stats.sessions)} sessions to {path}")


def _write_report(config: dict, output_path: str) -> None:
    stats = _load_statistics(config)
    user_name = (config.get("report") or {}).get("user_name", "")
    path = ReportExporter().export_weekly(
        stats.weekly_stats(), stats.overall_stats(), user_name, output_path
    )
    print(f"Report written to {path}")


def main(args: list[str] | None = None) -> None:
    """Entry point for GroveTimer.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    config_path = parsed.config or get_default_config_path()
    config = load_config(str(config_path))

    if parsed.daily:
        _print_daily_stats(config)
    elif parsed.weekly:
        _print_weekly_stats(config)
    elif parsed.monthly:
        _print_monthly_stats(config)
    elif parsed.overall:
        _print_overall_stats(config)
    elif parsed.export:
        _write_export(config, parsed.export)
    elif parsed.report:
        _write_report(config, parsed.report)
    else:
        from grovetimer.ui.app import GroveTimerApp

        app = GroveTimerApp(str(config_path))
        app.start()


if __name__ == "__main__":
    main()
