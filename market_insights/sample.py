"""Bounded, escaped text sample of a parsed upload for the generative analyst."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from market_insights.config import SAMPLE_MAX_CHARS, SAMPLE_MAX_ROWS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from market_insights.csv_parser import RawTable


def _escape_line(cells: Iterable[str]) -> str:
    # JSON string escaping quotes every cell, so embedded commas/newlines stay unambiguous
    return ",".join(json.dumps(cell, ensure_ascii=False) for cell in cells)


def build_sample_csv(
    table: RawTable,
    max_rows: int = SAMPLE_MAX_ROWS,
    max_chars: int = SAMPLE_MAX_CHARS,
) -> str:
    """
    Serialize the header row plus up to ``max_rows`` data rows.

    Rows are written in header order and joined with newlines; the result is
    cut at ``max_chars`` characters. Empty string for a table without headers.
    """
    if not table.headers:
        return ""

    lines = [_escape_line(table.headers)]
    for row in table.rows[:max_rows]:
        lines.append(_escape_line(row.get(header, "") for header in table.headers))

    return "\n".join(lines)[:max_chars]
