"""
Column Resolution Validation Script

Runs every export in a directory through ingestion and reports which columns
were picked for label, traffic and conversion. Use it on a folder of real
exports before tuning the candidate lists.

Usage:
    python scripts/validate_columns.py <directory> [--report report.csv]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.ingestion import ALLOWED_SUFFIXES, IngestionError, load_path

REPORT_COLUMNS = [
    "File",
    "Rows",
    "Label_Column",
    "Traffic_Column",
    "Conversion_Column",
    "Rate_Ranked_Rows",
    "Status",
]


def validate_directory(directory: Path | str) -> pd.DataFrame:
    """One report row per export file found directly in ``directory``."""
    records = []
    for path in sorted(Path(directory).iterdir()):
        if not path.is_file() or path.suffix.lower() not in ALLOWED_SUFFIXES:
            continue
        try:
            upload = load_path(path)
        except IngestionError as e:
            records.append({"File": path.name, "Rows": 0, "Rate_Ranked_Rows": 0, "Status": f"ERROR: {e}"})
            continue

        roles = upload.summary.roles
        if roles.traffic is None:
            status = "NO_TRAFFIC"
        elif roles.conversion is None:
            status = "NO_CONVERSION"
        else:
            status = "OK"
        records.append({
            "File": path.name,
            "Rows": upload.row_count,
            "Label_Column": roles.label,
            "Traffic_Column": roles.traffic,
            "Conversion_Column": roles.conversion,
            "Rate_Ranked_Rows": len(upload.summary.top_by_rate),
            "Status": status,
        })

    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def main() -> int:
    parser = argparse.ArgumentParser(description="Report resolved columns for a folder of exports")
    parser.add_argument("directory", type=str)
    parser.add_argument("--report", type=str, default=None, help="Write the report to this CSV")
    args = parser.parse_args()

    if not Path(args.directory).is_dir():
        print(f"[ERROR] Not a directory: {args.directory}")
        return 1

    report = validate_directory(args.directory)
    if report.empty:
        print("No .csv/.txt exports found.")
        return 1

    print("=" * 60)
    print("Column Resolution Report")
    print("=" * 60)
    print(report.to_string(index=False))

    ok = int((report["Status"] == "OK").sum())
    print(f"\n{ok}/{len(report)} files fully resolved")

    if args.report:
        report.to_csv(args.report, index=False)
        print(f"Report written: {args.report}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
