"""
KPI aggregation for the market insights dashboard.

Consumes a parsed RawTable and produces the DashboardSummary rendered as KPI
tiles and two ranked lists:
- Top by volume: highest traffic first
- Top by rate: highest conversion rate first, restricted to rows with enough
  traffic for the rate to mean something

Absent columns and unparseable cells degrade to zero; no input table makes
this module raise. Ties keep source row order.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from market_insights.column_roles import ColumnRoleAssignment, resolve_roles
from market_insights.config import DEFAULT_CONFIG, UNKNOWN_LABEL, InsightsConfig
from market_insights.logger import debug_watcher, get_logger
from market_insights.value_parser import parse_number

if TYPE_CHECKING:
    from market_insights.csv_parser import RawTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnrichedRow:
    """One data row with its resolved label and metrics."""

    label: str
    traffic: float = 0.0
    conversions: float = 0.0
    rate: float = 0.0


@dataclass(frozen=True)
class DashboardSummary:
    """Aggregate view of one upload. Rebuilt from scratch for every upload."""

    row_count: int = 0
    total_traffic: float = 0.0
    total_conversions: float = 0.0
    overall_rate: float = 0.0
    top_by_volume: tuple[EnrichedRow, ...] = ()
    top_by_rate: tuple[EnrichedRow, ...] = ()
    roles: ColumnRoleAssignment = field(default_factory=ColumnRoleAssignment)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    @property
    def has_rate_ranking(self) -> bool:
        """False when rows exist but none cleared the traffic floor (or there are none)."""
        return len(self.top_by_rate) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "totalTraffic": self.total_traffic,
            "totalConversions": self.total_conversions,
            "overallRate": self.overall_rate,
            "topByVolume": [asdict(row) for row in self.top_by_volume],
            "topByRate": [asdict(row) for row in self.top_by_rate],
            "columns": self.roles.as_dict(),
        }


def safe_rate(conversions: float, traffic: float) -> float:
    """conversions / traffic, or 0.0 when traffic is not positive or the ratio is not finite."""
    if traffic > 0:
        rate = conversions / traffic
        if math.isfinite(rate):
            return rate
    return 0.0


def _metric(row: dict[str, str], column: str | None) -> float:
    if column is None:
        return 0.0
    value = parse_number(row.get(column, ""))
    return value if value is not None else 0.0


def enrich_rows(table: RawTable, roles: ColumnRoleAssignment | None = None) -> list[EnrichedRow]:
    """
    Attach label, traffic, conversions and rate to every row of the table.

    Args:
        table: Parsed upload.
        roles: Pre-resolved columns; resolved from the table headers if omitted.
    """
    roles = roles or resolve_roles(table.headers)

    enriched = []
    for row in table.rows:
        label = row.get(roles.label, "") if roles.label is not None else ""
        traffic = _metric(row, roles.traffic)
        conversions = _metric(row, roles.conversion)
        enriched.append(
            EnrichedRow(
                label=label or UNKNOWN_LABEL,
                traffic=traffic,
                conversions=conversions,
                rate=safe_rate(conversions, traffic),
            )
        )
    return enriched


def _top(frame: pd.DataFrame, key: str, limit: int) -> list[int]:
    """Positions of the first `limit` rows by `key` descending; ties keep source order."""
    ordered = frame.sort_values(key, ascending=False, kind="stable")
    return [int(position) for position in ordered.index[:limit]]


@debug_watcher
def aggregate(table: RawTable, config: InsightsConfig | None = None) -> DashboardSummary:
    """
    Compute dashboard KPIs and rankings for a parsed upload.

    Args:
        table: Parsed upload.
        config: Ranking limits; defaults to DEFAULT_CONFIG.

    Returns:
        DashboardSummary. An empty table yields zero totals and empty rankings.
    """
    config = config or DEFAULT_CONFIG
    roles = resolve_roles(table.headers)
    rows = enrich_rows(table, roles)

    logger.debug(
        f"Resolved columns: label={roles.label!r}, traffic={roles.traffic!r}, "
        f"conversion={roles.conversion!r}"
    )
    if rows and roles.traffic is None:
        logger.warning(f"No traffic column among headers {list(table.headers)}")

    frame = pd.DataFrame(
        {
            "traffic": [row.traffic for row in rows],
            "conversions": [row.conversions for row in rows],
            "rate": [row.rate for row in rows],
        },
        dtype="float64",
    )

    total_traffic = float(frame["traffic"].sum())
    total_conversions = float(frame["conversions"].sum())

    by_volume = _top(frame, "traffic", config.top_n)
    eligible = frame[frame["traffic"] >= config.min_rate_traffic]
    by_rate = _top(eligible, "rate", config.top_n)

    return DashboardSummary(
        row_count=table.row_count,
        total_traffic=total_traffic,
        total_conversions=total_conversions,
        overall_rate=safe_rate(total_conversions, total_traffic),
        top_by_volume=tuple(rows[i] for i in by_volume),
        top_by_rate=tuple(rows[i] for i in by_rate),
        roles=roles,
    )
