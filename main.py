"""
Market Insights CLI - KPI summary for a single marketing export

1. Load configuration and validate it
2. Read the export, decode and size-cap it
3. Parse rows and resolve label / traffic / conversion columns
4. Aggregate totals and the two rankings
5. Print the summary (text or JSON) and optionally export a workbook

Usage:
    python main.py --file <filepath> [--json] [--export <dir>] [--config <file>]

Examples:
    python main.py --file exports/landing_pages.csv
    python main.py --file exports/landing_pages.csv --json
    python main.py --file exports/landing_pages.csv --export output/
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from typing import TYPE_CHECKING

from market_insights.config import load_config, validate_config
from market_insights.excel_formatter import export_summary_workbook
from market_insights.ingestion import IngestionError, load_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from market_insights.aggregator import DashboardSummary, EnrichedRow


def log(message: str, level: str = "INFO") -> None:
    """Simple logging function."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{level}] {message}")


def _print_ranking(title: str, rows: Sequence[EnrichedRow]) -> None:
    print(f"\n{title}")
    print("-" * len(title))
    for rank, row in enumerate(rows, start=1):
        print(f"{rank:>2}. {row.label[:48]:<48} {row.traffic:>12,.0f} {row.conversions:>10,.0f} {row.rate:>8.2%}")


def print_summary(summary: DashboardSummary, min_rate_traffic: float) -> None:
    roles = summary.roles
    print(f"\nColumns: label={roles.label!r} traffic={roles.traffic!r} conversion={roles.conversion!r}")
    print(f"Rows:              {summary.row_count:,}")
    print(f"Total traffic:     {summary.total_traffic:,.2f}")
    print(f"Total conversions: {summary.total_conversions:,.2f}")
    print(f"Overall rate:      {summary.overall_rate:.2%}")

    _print_ranking("Top by volume", summary.top_by_volume)
    if summary.has_rate_ranking:
        _print_ranking(f"Top by rate (traffic >= {min_rate_traffic:g})", summary.top_by_rate)
    elif not summary.is_empty:
        print(f"\nTop by rate: not enough data (no row with traffic >= {min_rate_traffic:g})")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Market Insights - KPI summary for a marketing export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --file exports/pages.csv              # Print KPI summary
  python main.py --file exports/pages.csv --json       # Machine-readable summary
  python main.py --file exports/pages.csv --export out # Also write an .xlsx workbook
        """
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        required=True,
        help="Path to a .csv or .txt export"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON instead of text"
    )
    parser.add_argument(
        "--export", "-o",
        type=str,
        default=None,
        help="Directory to write a KPI workbook into (optional)"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Settings JSON file (optional, uses config/insights.json if present)"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    is_valid, errors = validate_config(config)
    if not is_valid:
        log(f"Configuration errors: {errors}", "ERROR")
        return 1

    try:
        upload = load_path(args.file, config)
    except IngestionError as e:
        log(str(e), "ERROR")
        return 1

    if upload.truncated:
        log(f"Input truncated to {config.max_input_chars:,} characters", "WARNING")

    if args.json:
        print(json.dumps(upload.summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        log(f"Loaded: {upload.name} ({upload.row_count} rows, {len(upload.headers)} columns)")
        print_summary(upload.summary, config.min_rate_traffic)

    if args.export:
        path = export_summary_workbook(
            upload.summary,
            output_path=args.export,
            name=upload.name,
            min_rate_traffic=config.min_rate_traffic,
        )
        log(f"Workbook written: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
