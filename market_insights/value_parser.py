"""
Numeric parsing for metric cells in marketing exports.

Exports format numbers for humans: "$1,234.50", "12%", "1,000". Currency
signs, percent signs and thousands separators are stripped; the remaining
text must be a plain decimal literal. Percent values keep their face value
("12%" -> 12.0). Anything else yields None so the aggregator can fall back
to zero.
"""

from __future__ import annotations

import math
import re

import pandas as pd

_STRIP_CHARS = re.compile(r"[$%,]")
# Same shapes a browser's Number() accepts for decimal text; ASCII digits only
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_number(raw: str | None) -> float | None:
    """
    Parse a metric cell.

    Examples:
        "$1,234.50" -> 1234.5
        "12%" -> 12.0
        "" / "n/a" / "NaN" / "Infinity" -> None
    """
    if raw is None:
        return None

    text = str(raw)
    if not text.strip():
        return None

    cleaned = _STRIP_CHARS.sub("", text).strip()
    if not cleaned or not _DECIMAL_LITERAL.fullmatch(cleaned):
        return None

    value = float(cleaned)
    if not math.isfinite(value):
        return None
    return value


def parse_number_series(series: pd.Series) -> pd.Series:
    """Vectorised wrapper; unparseable cells become NaN."""
    return pd.to_numeric(series.map(parse_number), errors="coerce")
