"""
run_report.py
-------------
Builds the Codford monthly crime report from the command line, without
starting the dashboard. Execute from the project root:

    python run_report.py

Optional flags:
    python run_report.py --date 2024-03     # a specific month
    python run_report.py --list-dates       # show available months
    python run_report.py --no-ai            # summary only, skip Gemini
    python run_report.py --out report.md    # write the report to a file
"""

import argparse
import sys
import time

import requests

from utils.boundary import BoundaryResolver
from utils.constants import MAX_POLY_POINTS
from utils.helpers import format_period, is_valid_period, pluralise
from utils.police_api import PoliceApiError, PolygonQueryEncoder
from utils.report import generate_crime_report, make_client
from utils.summary import build_summary


def build_markdown(period: str, summary: dict, narrative: str | None, boundary_note: str) -> str:
    lines = [
        f"# Codford crime report: {format_period(period)}",
        "",
        f"_{boundary_note}_",
        "",
        f"- Total crimes: {summary['total']:,}",
        f"- Most frequent category: {summary['most_frequent_category']}",
        "",
        "| Category | Incidents |",
        "|---|---|",
    ]
    lines += [
        f"| {row.name} | {row.value} |"
        for row in summary["by_category"].itertuples(index=False)
    ]
    if narrative:
        lines += ["", "---", "", narrative]
    return "\n".join(lines) + "\n"


def main():
    parser = argparse.ArgumentParser(description="Build the Codford monthly crime report")
    parser.add_argument(
        "--date", metavar="YYYY-MM",
        help="Reporting month (default: latest month published by police.uk)"
    )
    parser.add_argument(
        "--list-dates", action="store_true",
        help="List the months with published data and exit"
    )
    parser.add_argument(
        "--no-ai", action="store_true",
        help="Skip the Gemini narrative"
    )
    parser.add_argument(
        "--out", metavar="PATH",
        help="Write the markdown report to PATH instead of stdout"
    )
    parser.add_argument(
        "--max-points", type=int, default=MAX_POLY_POINTS, metavar="N",
        help=f"Polygon point cap for the police.uk search (default {MAX_POLY_POINTS})"
    )
    args = parser.parse_args()

    if args.date and not is_valid_period(args.date):
        print(f"Error: --date must be YYYY-MM, got '{args.date}'.")
        sys.exit(2)

    session = requests.Session()
    police  = PolygonQueryEncoder(session=session, max_points=args.max_points)

    if args.list_dates:
        for d in police.fetch_available_dates():
            print(f"  {d}  ({format_period(d)})")
        sys.exit(0)

    start = time.time()

    # Boundary
    print(f"\n{'='*60}")
    print("  [1] Resolving parish boundary")
    print(f"{'='*60}")
    boundary = BoundaryResolver(session=session).resolve()
    if boundary.is_fallback:
        boundary_note = "Approximate fallback boundary (ONS services unavailable)."
    else:
        boundary_note = (f"Boundary: ONS {boundary.endpoint.vintage}, "
                         f"matched on {boundary.matched_on}.")
    print(f"  {boundary_note}")

    # Crimes
    period = args.date or police.fetch_available_dates()[0]
    print(f"\n{'='*60}")
    print(f"  [2] Fetching crimes for {format_period(period)}")
    print(f"{'='*60}")
    try:
        records = police.fetch_crimes_in_boundary(boundary.feature, period)
    except (PoliceApiError, requests.RequestException) as e:
        print(f"\n  ✗ FAILED: {e}")
        sys.exit(1)

    summary = build_summary(records)
    print(f"  ✓ {pluralise(summary['total'], 'incident')} "
          f"(top category: {summary['most_frequent_category']})")

    # Narrative
    narrative = None
    if not args.no_ai:
        print(f"\n{'='*60}")
        print("  [3] Generating narrative")
        print(f"{'='*60}")
        client = make_client()
        if client is None:
            print("  GEMINI_API_KEY not set; skipping narrative.")
        else:
            narrative = generate_crime_report(client, period, summary, records)

    report = build_markdown(period, summary, narrative, boundary_note)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(report)
        print(f"\n  Report written to {args.out}")
    else:
        print()
        print(report)

    print(f"  Done in {round(time.time() - start, 1)}s")


if __name__ == "__main__":
    main()
