"""
Visualization module for the market insights dashboard.

Renders KPI tiles and the two ranked lists from a DashboardSummary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd
import streamlit as st

from market_insights.config import MIN_RATE_TRAFFIC

if TYPE_CHECKING:
    from collections.abc import Sequence

    from market_insights.aggregator import DashboardSummary, EnrichedRow


def ranking_frame(rows: Sequence[EnrichedRow]) -> pd.DataFrame:
    """Display table for a ranked list; rank starts at 1."""
    return pd.DataFrame(
        {
            "Rank": range(1, len(rows) + 1),
            "Label": [row.label for row in rows],
            "Traffic": [row.traffic for row in rows],
            "Conversions": [row.conversions for row in rows],
            "Rate": [row.rate * 100 for row in rows],
        }
    )


def _render_ranking(rows: Sequence[EnrichedRow], bar_column: str) -> None:
    df = ranking_frame(rows)
    max_value = float(df[bar_column].max()) if not df.empty else 0.0
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            bar_column: st.column_config.ProgressColumn(
                bar_column,
                format="%.2f%%" if bar_column == "Rate" else "%.0f",
                min_value=0.0,
                max_value=max_value or 1.0,
            ),
        },
    )


def render_dashboard(summary: DashboardSummary, min_rate_traffic: float = MIN_RATE_TRAFFIC) -> None:
    """
    Render the market insights dashboard.

    Displays:
    - KPI tiles (rows, traffic, conversions, overall conversion rate)
    - Top pages by traffic
    - Top pages by conversion rate (traffic floor applied)
    """
    if summary.is_empty:
        st.warning("No data rows found in this file.")
        return

    roles = summary.roles
    if roles.traffic is None:
        st.error(
            "Couldn't find the right columns. Expected a traffic column such as "
            "Sessions, Visits or Views."
        )
    elif roles.conversion is None:
        st.warning("No conversion column found (Submissions, Conversions, Contacts). Rates show as 0.")

    # --- KPI Row ---
    st.subheader("Key Performance Indicators")
    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Rows", f"{summary.row_count:,}")
    with col2:
        st.metric("Total Traffic", f"{summary.total_traffic:,.0f}")
    with col3:
        st.metric("Total Conversions", f"{summary.total_conversions:,.0f}")
    with col4:
        st.metric("Overall Rate", f"{summary.overall_rate:.2%}")

    st.caption(
        f"Label: {roles.label or '(none)'} | Traffic: {roles.traffic or '(none)'} | "
        f"Conversions: {roles.conversion or '(none)'}"
    )
    st.divider()

    left, right = st.columns(2)

    with left:
        st.subheader("Top by Volume")
        _render_ranking(summary.top_by_volume, "Traffic")

    with right:
        st.subheader("Top by Conversion Rate")
        if summary.has_rate_ranking:
            _render_ranking(summary.top_by_rate, "Rate")
            st.caption(f"Only rows with at least {min_rate_traffic:g} traffic are ranked by rate.")
        else:
            st.info(
                f"Not enough data: no row has at least {min_rate_traffic:g} traffic, "
                "so rates would be noise."
            )
