"""Command line entry point: ``stop-search --force metropolitan -o stops.csv``."""
import argparse
import logging
import sys

import pandas as pd

from stop_search.client import PoliceApiClient
from stop_search.config import load_settings, setup_logging
from stop_search.errors import InvalidArgument, RetrievalFailed, StopSearchError
from stop_search.export import ABSENT_MARKER, summarise, write_table
from stop_search.periods import check_count, generate_window
from stop_search.polygon import read_boundary
from stop_search.retrieve import check_force_id, list_forces, resolve_start, retrieve_area, retrieve_force

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="stop-search",
        description="Download police stop & search records for an area or a force.",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--area", metavar="GEOJSON", help="Boundary polygon file (GeoJSON)")
    target.add_argument("--force", metavar="ID", help="Force id, see --list-forces")
    target.add_argument("--list-forces", action="store_true", help="Print force names and ids and exit")
    parser.add_argument("--month", type=int, help="Starting month, 1-12 (default: latest available)")
    parser.add_argument("--year", type=int, help="Starting year (default: latest available)")
    parser.add_argument("--months-back", type=int, help="Number of months to fetch, counting back from the start")
    parser.add_argument("-o", "--output", default="stop_search.csv", help="CSV file to write")
    parser.add_argument("--strict", action="store_true", help="Fail on malformed records instead of skipping them")
    parser.add_argument("--index", action="store_true", help="Include a row index column in the CSV")
    parser.add_argument("--absence-marker", default=ABSENT_MARKER, help="Text written for fields a record does not have")
    parser.add_argument("--max-points", type=int, help="Simplify the boundary to at most this many vertices")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    return parser


def _print_summary(table):
    summary = summarise(table)
    if summary.empty:
        print("No data fetched, so no summary to show.")
        return
    pd.set_option("display.max_columns", None)
    pd.set_option("display.width", 200)
    print("Summary Report (per month):")
    print(summary.to_string(index=False))


def run(args):
    settings = load_settings(args.env_file)
    client = PoliceApiClient(settings)

    if args.list_forces:
        for name, force_id in list_forces(client):
            print(f"{force_id}\t{name}")
        return 0

    # everything checkable locally is checked before the first request
    months_back = check_count(args.months_back if args.months_back is not None else settings.months_back)
    if args.area:
        polygon = read_boundary(args.area)
        if args.max_points:
            polygon = polygon.simplified(args.max_points)
    else:
        force_id = check_force_id(args.force)

    start = resolve_start(client, month=args.month, year=args.year)
    window = generate_window(start, months_back)
    options = {"strict": args.strict or settings.strict_records}

    try:
        if args.area:
            table = retrieve_area(client, polygon, window, **options)
        else:
            table = retrieve_force(client, force_id, window, **options)
    except RetrievalFailed as e:
        logger.error(f"{e}")
        if len(e.table):
            partial = f"{args.output}.partial"
            write_table(e.table, partial, absence_marker=args.absence_marker, index=args.index)
            logger.error(f"Saved {len(e.completed)} completed months to {partial}")
        return 1

    write_table(table, args.output, absence_marker=args.absence_marker, index=args.index)
    _print_summary(table)
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_file)
    try:
        return run(args)
    except InvalidArgument as e:
        logger.error(f"{e}")
        return 2
    except StopSearchError as e:
        logger.error(f"{e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
