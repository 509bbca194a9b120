"""
Command Line Interface

Usage:
    track-analytics provision
    track-analytics load data/spotify.csv
    track-analytics list --tier advanced
    track-analytics query top_viewed_per_artist --format csv
    track-analytics run-all
    track-analytics optimize artist_youtube_top_streams --column artist

Every command exits 0 on success. Failures print ``<ErrorKind>: <message>``
on stderr and exit non-zero.
"""

import argparse
import json
import sys
from typing import List, Optional

import polars as pl
import structlog

from track_analytics.catalog import Tier, default_catalog, run, run_all
from track_analytics.config import get_settings
from track_analytics.config.logging import bind_command, configure_logging
from track_analytics.database import check_database_health, connect, create_db_engine, provision
from track_analytics.exceptions import TrackAnalyticsError
from track_analytics.ingestion import CsvFileConfig, CsvLoader, LoadStatus
from track_analytics.optimization import compare, within_tolerance

logger = structlog.get_logger(__name__)


def cmd_provision(args, engine) -> int:
    with connect(engine) as conn:
        provision(conn)
    print("Table provisioned")
    return 0


def cmd_load(args, engine) -> int:
    config = CsvFileConfig.from_settings(args.file)
    if args.no_validate:
        config.validate = False
    with connect(engine) as conn:
        result = CsvLoader().load(config, conn)
    if result.status == LoadStatus.FAILED:
        print(f"LoadError: {result.error_message}", file=sys.stderr)
        return 1
    print(f"Loaded {result.rows_loaded} rows from {result.file_path}")
    return 0


def cmd_list(args, engine) -> int:
    for entry in default_catalog.list(args.tier):
        print(f"{entry.tier.value:<9} {entry.name:<28} {entry.intent}")
    return 0


def cmd_query(args, engine) -> int:
    entry = default_catalog.get(args.name)
    with connect(engine) as conn:
        frame = run(entry, conn)
    _print_frame(frame, args.format)
    return 0


def cmd_run_all(args, engine) -> int:
    with connect(engine) as conn:
        outcomes = run_all(conn, args.tier)
    failed = 0
    for outcome in outcomes:
        if outcome.succeeded:
            print(f"ok   {outcome.entry.name:<28} {outcome.frame.height:>8} rows {outcome.duration_ms:>10.2f} ms")
        else:
            failed += 1
            print(f"{outcome.error.kind}: {outcome.error}", file=sys.stderr)
    return 1 if failed else 0


def cmd_optimize(args, engine) -> int:
    entry = default_catalog.get(args.name)
    column = args.column or get_settings().optimization.default_column
    with connect(engine) as conn:
        report = compare(entry, column, conn, repeats=args.repeats)

    if args.json:
        print(json.dumps(report.model_dump(), indent=2))
        return 0

    state = "created" if report.index_created else "already present, creation skipped"
    print(f"entry     {report.entry}")
    print(f"index     {report.index_name} on {report.column} ({state})")
    for label, measurement in (("baseline", report.baseline), ("indexed", report.indexed)):
        print(
            f"{label:<9} planning_ms={measurement.planning_ms:.3f} "
            f"execution_ms={measurement.execution_ms:.3f}"
        )
    speedup = f"{report.speedup:.2f}x" if report.speedup is not None else "n/a"
    print(f"speedup   {speedup}")
    if not within_tolerance(report):
        print("note      indexed run was slower than baseline beyond tolerance")
    return 0


def cmd_health(args, engine) -> int:
    status = check_database_health(engine)
    print(json.dumps(status))
    return 0 if status["status"] == "healthy" else 1


def _print_frame(frame: pl.DataFrame, fmt: str) -> None:
    if fmt == "csv":
        sys.stdout.write(frame.write_csv())
    elif fmt == "json":
        print(frame.write_json())
    else:
        with pl.Config(tbl_rows=-1, tbl_cols=-1, fmt_str_lengths=60):
            print(frame)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="track-analytics",
        description="Spotify track query practice and index experiments",
    )
    parser.add_argument("--database-url", help="SQLAlchemy URL (overrides DATABASE_URL)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")

    commands = parser.add_subparsers(dest="command", required=True)
    tiers = [tier.value for tier in Tier]

    commands.add_parser("provision", help="Drop and recreate the track table").set_defaults(handler=cmd_provision)

    load = commands.add_parser("load", help="Bulk load a CSV dataset")
    load.add_argument("file", help="Path to the delimited dataset")
    load.add_argument("--no-validate", action="store_true", help="Skip data quality checks")
    load.set_defaults(handler=cmd_load)

    listing = commands.add_parser("list", help="List catalog entries")
    listing.add_argument("--tier", choices=tiers)
    listing.set_defaults(handler=cmd_list)

    query = commands.add_parser("query", help="Run one catalog entry")
    query.add_argument("name")
    query.add_argument("--format", choices=["table", "csv", "json"], default="table")
    query.set_defaults(handler=cmd_query)

    run_all_parser = commands.add_parser("run-all", help="Run every catalog entry")
    run_all_parser.add_argument("--tier", choices=tiers)
    run_all_parser.set_defaults(handler=cmd_run_all)

    optimize = commands.add_parser("optimize", help="Compare an entry before and after an index")
    optimize.add_argument("name")
    optimize.add_argument("--column", help="Column to index (default from settings)")
    optimize.add_argument("--repeats", type=int, help="Measurements per run")
    optimize.add_argument("--json", action="store_true", help="Print the report as JSON")
    optimize.set_defaults(handler=cmd_optimize)

    commands.add_parser("health", help="Check the database connection").set_defaults(handler=cmd_health)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    bind_command(args.command, entry=getattr(args, "name", None))

    engine = None
    try:
        engine = create_db_engine(args.database_url)
        return args.handler(args, engine)
    except TrackAnalyticsError as e:
        logger.debug("Command failed", command=args.command, error_kind=e.kind, **e.details)
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1
    finally:
        if engine is not None:
            engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
