"""
Excel Formatter Module - Dashboard Summary Export

Creates a workbook with:
- KPIs (row count, totals, overall rate, resolved columns)
- Top by Volume
- Top by Rate
"""

from __future__ import annotations

import re
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any

import xlsxwriter
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

from market_insights.config import MIN_RATE_TRAFFIC, OUTPUT_PATH, OUTPUT_SETTINGS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from market_insights.aggregator import DashboardSummary, EnrichedRow

_RANKING_COLUMNS = ("Rank", "Label", "Traffic", "Conversions", "Rate")


class ExcelFormatter:
    """Writes DashboardSummary workbooks to disk or to memory."""

    def __init__(self, output_path: Path | str | None = None):
        self.output_path = Path(output_path) if output_path else OUTPUT_PATH
        self.workbook: Workbook | None = None
        self.formats: dict[str, Any] = {}

    def _generate_filename(self, name: str = "upload") -> str:
        timestamp = datetime.now().strftime(OUTPUT_SETTINGS["timestamp_format"])
        safe_name = re.sub(r"[^A-Za-z0-9_-]+", "_", Path(name).stem).strip("_") or "upload"
        return OUTPUT_SETTINGS["workbook_name_pattern"].format(name=safe_name, timestamp=timestamp)

    def _setup_formats(self) -> None:
        if self.workbook is None:
            return

        self.formats["header"] = self.workbook.add_format({
            "bold": True,
            "bg_color": OUTPUT_SETTINGS["header_color"],
            "font_color": "#FFFFFF",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
        })
        self.formats["label"] = self.workbook.add_format({"bold": True, "border": 1})
        self.formats["default"] = self.workbook.add_format({"border": 1})
        self.formats["integer"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["integer_format"],
            "border": 1,
        })
        self.formats["decimal"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["decimal_format"],
            "border": 1,
        })
        self.formats["percentage"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["percentage_format"],
            "border": 1,
        })
        self.formats["note"] = self.workbook.add_format({"italic": True, "font_color": "#666666"})

    def _number_format(self, value: float) -> Any:
        return self.formats["integer"] if float(value).is_integer() else self.formats["decimal"]

    def create_kpi_sheet(self, summary: DashboardSummary, sheet_name: str = "KPIs") -> Worksheet:
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)
        ws.write(0, 0, "Metric", self.formats["header"])
        ws.write(0, 1, "Value", self.formats["header"])

        kpis = [
            ("Rows", summary.row_count, self.formats["integer"]),
            ("Total Traffic", summary.total_traffic, self._number_format(summary.total_traffic)),
            ("Total Conversions", summary.total_conversions, self._number_format(summary.total_conversions)),
            ("Overall Rate", summary.overall_rate, self.formats["percentage"]),
        ]
        for row_idx, (name, value, cell_format) in enumerate(kpis, start=1):
            ws.write(row_idx, 0, name, self.formats["label"])
            ws.write_number(row_idx, 1, value, cell_format)

        # Column mapping audit trail
        start = len(kpis) + 2
        ws.write(start, 0, "Role", self.formats["header"])
        ws.write(start, 1, "Column", self.formats["header"])
        for offset, (role, column) in enumerate(summary.roles.as_dict().items(), start=1):
            ws.write(start + offset, 0, role, self.formats["label"])
            ws.write(start + offset, 1, column if column is not None else "(not found)", self.formats["default"])

        ws.set_column(0, 0, 20)
        ws.set_column(1, 1, 30)
        return ws

    def create_ranking_sheet(
        self,
        rows: Sequence[EnrichedRow],
        sheet_name: str,
        empty_message: str = "No rows",
    ) -> Worksheet:
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)
        for col_idx, col_name in enumerate(_RANKING_COLUMNS):
            ws.write(0, col_idx, col_name, self.formats["header"])

        if not rows:
            ws.write(1, 0, empty_message, self.formats["note"])

        max_label = len("Label")
        for rank, row in enumerate(rows, start=1):
            ws.write_number(rank, 0, rank, self.formats["integer"])
            ws.write_string(rank, 1, row.label, self.formats["default"])
            ws.write_number(rank, 2, row.traffic, self._number_format(row.traffic))
            ws.write_number(rank, 3, row.conversions, self._number_format(row.conversions))
            ws.write_number(rank, 4, row.rate, self.formats["percentage"])
            max_label = max(max_label, len(row.label))

        ws.set_column(0, 0, 8)
        ws.set_column(1, 1, min(max_label + 2, 60))
        ws.set_column(2, 4, 14)
        ws.freeze_panes(1, 0)
        return ws

    def _write(self, target: str | BytesIO, summary: DashboardSummary, min_rate_traffic: float) -> None:
        options = {"nan_inf_to_errors": True}
        if isinstance(target, BytesIO):
            options["in_memory"] = True
        self.workbook = xlsxwriter.Workbook(target, options)
        self._setup_formats()
        try:
            self.create_kpi_sheet(summary)
            self.create_ranking_sheet(summary.top_by_volume, "Top by Volume")
            self.create_ranking_sheet(
                summary.top_by_rate,
                "Top by Rate",
                empty_message=f"Not enough data: no row has at least {min_rate_traffic:g} traffic",
            )
        finally:
            self.workbook.close()
            self.workbook = None

    def create_summary_workbook(
        self,
        summary: DashboardSummary,
        name: str = "upload",
        output_filename: str | None = None,
        min_rate_traffic: float = MIN_RATE_TRAFFIC,
    ) -> Path:
        """Write the workbook under ``output_path`` and return its path."""
        self.output_path.mkdir(parents=True, exist_ok=True)
        output_path = self.output_path / (output_filename or self._generate_filename(name))
        self._write(str(output_path), summary, min_rate_traffic)
        return output_path

    def to_bytes(self, summary: DashboardSummary, min_rate_traffic: float = MIN_RATE_TRAFFIC) -> bytes:
        """Workbook contents for a download button."""
        buffer = BytesIO()
        self._write(buffer, summary, min_rate_traffic)
        return buffer.getvalue()


def export_summary_workbook(
    summary: DashboardSummary,
    output_path: Path | str | None = None,
    output_filename: str | None = None,
    name: str = "upload",
    min_rate_traffic: float = MIN_RATE_TRAFFIC,
) -> Path:
    """
    Convenience function to export a DashboardSummary workbook.

    Returns:
        Path to the created workbook.
    """
    formatter = ExcelFormatter(output_path)
    return formatter.create_summary_workbook(summary, name, output_filename, min_rate_traffic)
