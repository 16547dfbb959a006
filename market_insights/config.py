"""
Configuration Module - Centralized Configuration Hub

Contains all tunable parameters for the market insights engine:
- Directory paths
- Ranking and sampling limits used by the aggregator
- Upload/ingestion ceilings
- Workbook output formats
"""

from __future__ import annotations

import json
import warnings
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any


# ============================================================================
# DIRECTORY PATHS
# ============================================================================

# Project root directory (parent of market_insights/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

OUTPUT_PATH = PROJECT_ROOT / "output"
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "insights.json"


# ============================================================================
# RANKING LIMITS
# ============================================================================
# TOP_N applies to both ranked lists on the dashboard.
# Rows with traffic below MIN_RATE_TRAFFIC never enter the rate ranking, so a
# page with 3 visits and 2 submissions does not outrank real campaigns.

TOP_N = 6
MIN_RATE_TRAFFIC = 25

UNKNOWN_LABEL = "(unknown)"


# ============================================================================
# SAMPLE / INPUT CEILINGS
# ============================================================================
# The bounded sample is what gets handed to the generative analyst.
# MAX_INPUT_CHARS is applied by the caller before parsing (~2MB of text).

SAMPLE_MAX_ROWS = 200
SAMPLE_MAX_CHARS = 50_000
MAX_INPUT_CHARS = 2_000_000
MAX_UPLOADS = 10

# Per-column numeric stats are skipped for large files; a column is numeric
# when its first STATS_PROBE_ROWS cells all parse.
STATS_MAX_ROWS = 5000
STATS_PROBE_ROWS = 10

CSV_ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]


# ============================================================================
# OUTPUT FORMAT SETTINGS
# ============================================================================

OUTPUT_SETTINGS = {
    "workbook_name_pattern": "insights_{name}_{timestamp}.xlsx",
    "timestamp_format": "%Y%m%d_%H%M%S",
    "percentage_format": "0.00%",
    "integer_format": "#,##0",
    "decimal_format": "#,##0.00",
    "header_color": "#1E3A5F",
}


# ============================================================================
# CONFIG OBJECT
# ============================================================================

@dataclass(frozen=True)
class InsightsConfig:
    """Tunables passed into the aggregator and the ingestion pipeline."""

    top_n: int = TOP_N
    min_rate_traffic: float = MIN_RATE_TRAFFIC
    sample_max_rows: int = SAMPLE_MAX_ROWS
    sample_max_chars: int = SAMPLE_MAX_CHARS
    max_input_chars: int = MAX_INPUT_CHARS
    max_uploads: int = MAX_UPLOADS
    stats_max_rows: int = STATS_MAX_ROWS
    stats_probe_rows: int = STATS_PROBE_ROWS

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = InsightsConfig()


def _load_settings_from_json(path: Path) -> dict[str, Any]:
    """Read the ``settings`` block of a JSON config file; empty on any problem."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        warnings.warn(f"Failed to load settings from {path}: {e}. Using defaults.")
        return {}

    settings = data.get("settings") if isinstance(data, dict) else None
    if not isinstance(settings, dict):
        warnings.warn(f"No 'settings' object in {path}. Using defaults.")
        return {}
    return settings


def load_config(path: Path | str | None = None) -> InsightsConfig:
    """
    Build the effective configuration.

    JSON values (``{"settings": {...}}``) take precedence over the defaults.
    Unknown keys and non-numeric values are ignored with a warning.

    Args:
        path: Config file. Defaults to ``config/insights.json``.

    Returns:
        InsightsConfig with overrides applied.
    """
    settings = _load_settings_from_json(Path(path) if path else CONFIG_FILE)
    known = {f.name for f in fields(InsightsConfig)}

    overrides: dict[str, Any] = {}
    for key, value in settings.items():
        if key not in known:
            warnings.warn(f"Unknown setting '{key}' ignored.")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            warnings.warn(f"Setting '{key}' must be numeric, got {value!r}. Using default.")
            continue
        overrides[key] = value if key == "min_rate_traffic" else int(value)

    return replace(DEFAULT_CONFIG, **overrides)


def validate_config(config: InsightsConfig | None = None) -> tuple[bool, list[str]]:
    """
    Validate configuration settings.

    Returns:
        Tuple of (is_valid, list_of_errors).
    """
    config = config or DEFAULT_CONFIG
    errors = []

    if config.top_n < 1:
        errors.append(f"top_n must be at least 1: {config.top_n}")
    if config.min_rate_traffic < 0:
        errors.append(f"min_rate_traffic cannot be negative: {config.min_rate_traffic}")
    if config.sample_max_rows < 0:
        errors.append(f"sample_max_rows cannot be negative: {config.sample_max_rows}")

    for name in ("sample_max_chars", "max_input_chars", "max_uploads", "stats_max_rows", "stats_probe_rows"):
        value = getattr(config, name)
        if value < 1:
            errors.append(f"{name} must be positive: {value}")

    return len(errors) == 0, errors


if __name__ == "__main__":
    print("=" * 60)
    print("Configuration Validation")
    print("=" * 60)

    effective = load_config()
    is_valid, errors = validate_config(effective)

    if is_valid:
        print("[OK] Configuration is valid")
    else:
        print("[ERROR] Configuration has errors:")
        for error in errors:
            print(f"  - {error}")

    print(f"\nConfig file: {CONFIG_FILE}")
    for key, value in effective.to_dict().items():
        print(f"  {key}: {value}")
