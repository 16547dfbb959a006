"""
Unit tests for configuration loading and validation.
"""

import json
import sys
import warnings
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.config import DEFAULT_CONFIG, InsightsConfig, load_config, validate_config


def _write(tmp_path, data):
    path = tmp_path / "insights.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_defaults():
    assert DEFAULT_CONFIG.top_n == 6
    assert DEFAULT_CONFIG.min_rate_traffic == 25
    assert DEFAULT_CONFIG.sample_max_rows == 200
    assert DEFAULT_CONFIG.sample_max_chars == 50_000
    assert DEFAULT_CONFIG.max_input_chars == 2_000_000
    assert DEFAULT_CONFIG.max_uploads == 10


def test_default_config_is_valid():
    assert validate_config() == (True, [])


def test_missing_file_uses_defaults(tmp_path):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert load_config(tmp_path / "nope.json") == DEFAULT_CONFIG


def test_overrides(tmp_path):
    config = load_config(_write(tmp_path, {"settings": {"top_n": 3, "min_rate_traffic": 12.5}}))
    assert config.top_n == 3
    assert config.min_rate_traffic == 12.5
    assert config.sample_max_rows == DEFAULT_CONFIG.sample_max_rows


def test_unknown_and_bad_values_ignored(tmp_path):
    path = _write(tmp_path, {"settings": {"colour": "blue", "top_n": "ten", "max_uploads": 4}})
    with pytest.warns(UserWarning):
        config = load_config(path)
    assert config.top_n == DEFAULT_CONFIG.top_n
    assert config.max_uploads == 4


def test_invalid_json_falls_back(tmp_path):
    with pytest.warns(UserWarning):
        assert load_config(_write(tmp_path, "{not json")) == DEFAULT_CONFIG


def test_missing_settings_block(tmp_path):
    with pytest.warns(UserWarning):
        assert load_config(_write(tmp_path, {"top_n": 2})) == DEFAULT_CONFIG


def test_validate_config_errors():
    is_valid, errors = validate_config(InsightsConfig(top_n=0, min_rate_traffic=-1, max_uploads=0))
    assert not is_valid
    assert len(errors) == 3
