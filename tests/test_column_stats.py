"""
Unit tests for per-column numeric statistics.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.column_stats import ColumnStats, compute_numeric_stats
from market_insights.csv_parser import RawTable, parse_delimited


def test_numeric_columns_only():
    table = parse_delimited("Page,Sessions,Rate\n/a,100,5%\n/b,200,n/a")
    stats = compute_numeric_stats(table)
    assert stats == {"Sessions": ColumnStats(sum=300.0, max=200.0, min=100.0)}


def test_probe_only_checks_leading_rows():
    table = parse_delimited("Page,Sessions\na,10\nb,oops\nc,30")
    stats = compute_numeric_stats(table, probe_rows=1)
    assert stats["Sessions"] == ColumnStats(sum=40.0, max=30.0, min=10.0)
    assert "Page" not in stats


def test_formatted_numbers():
    table = parse_delimited('Spend\n"$1,200.50"\n$99.50')
    assert compute_numeric_stats(table)["Spend"].sum == 1300.0


def test_large_tables_skipped():
    table = parse_delimited("Sessions\n1\n2")
    assert compute_numeric_stats(table, max_rows=2) == {}


def test_empty_table():
    assert compute_numeric_stats(RawTable()) == {}
    assert compute_numeric_stats(parse_delimited("Sessions")) == {}


def test_to_dict():
    assert ColumnStats(sum=3.0, max=2.0, min=1.0).to_dict() == {"sum": 3.0, "max": 2.0, "min": 1.0}
