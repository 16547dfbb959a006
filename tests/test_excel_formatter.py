"""
Unit tests for the KPI workbook export.
"""

import sys
import zipfile
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.aggregator import DashboardSummary, aggregate
from market_insights.csv_parser import parse_delimited
from market_insights.excel_formatter import ExcelFormatter, export_summary_workbook

LANDING_PAGES = "Page,Sessions,Submissions\n/pricing,500,25\n/about,1000,5\n/contact,20,10\n"


def _sheet_names(path_or_file):
    with zipfile.ZipFile(path_or_file) as archive:
        workbook_xml = archive.read("xl/workbook.xml").decode("utf-8")
    return workbook_xml


def test_export_summary_workbook(tmp_path):
    summary = aggregate(parse_delimited(LANDING_PAGES))
    path = export_summary_workbook(summary, output_path=tmp_path, output_filename="pages.xlsx")

    assert path == tmp_path / "pages.xlsx"
    assert path.exists()
    workbook_xml = _sheet_names(path)
    for sheet in ("KPIs", "Top by Volume", "Top by Rate"):
        assert f'name="{sheet}"' in workbook_xml


def test_generated_filename(tmp_path):
    formatter = ExcelFormatter(tmp_path)
    path = formatter.create_summary_workbook(DashboardSummary(), name="Landing pages (Q3).csv")
    assert path.parent == tmp_path
    assert path.name.startswith("insights_Landing_pages_Q3_")
    assert path.suffix == ".xlsx"


def test_to_bytes_for_empty_summary():
    data = ExcelFormatter().to_bytes(DashboardSummary())
    assert data[:2] == b"PK"


def test_to_bytes_with_overflowing_totals():
    summary = aggregate(parse_delimited("Page,Sessions,Submissions\n/a,1e308,1e308\n/b,1e308,1e308"))
    data = ExcelFormatter().to_bytes(summary)
    assert data.startswith(b"PK")
