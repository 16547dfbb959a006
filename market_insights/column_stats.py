"""
Per-column numeric statistics sent alongside the sample.

Gives the analyst exact totals for numeric columns even though it only sees
the first rows. A column counts as numeric when every one of its first few
cells parses; sums, max and min then cover every parseable cell.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from market_insights.config import STATS_MAX_ROWS, STATS_PROBE_ROWS
from market_insights.value_parser import parse_number_series

if TYPE_CHECKING:
    from market_insights.csv_parser import RawTable


@dataclass(frozen=True)
class ColumnStats:
    sum: float
    max: float
    min: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_numeric_stats(
    table: RawTable,
    max_rows: int = STATS_MAX_ROWS,
    probe_rows: int = STATS_PROBE_ROWS,
) -> dict[str, ColumnStats]:
    """
    Sum/max/min for each numeric column, keyed by header.

    Returns an empty dict for tables with no rows or at least ``max_rows`` rows.
    """
    if table.row_count == 0 or table.row_count >= max_rows:
        return {}

    frame = table.to_dataframe()
    stats: dict[str, ColumnStats] = {}

    for column in frame.columns:
        values = parse_number_series(frame[column])
        if values.head(probe_rows).isna().any():
            continue

        parsed = values.dropna()
        stats[column] = ColumnStats(
            sum=float(parsed.sum()),
            max=float(parsed.max()),
            min=float(parsed.min()),
        )

    return stats
