"""
Unit tests for logger naming and the debug_watcher entry line.
"""

import logging
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.csv_parser import parse_delimited
from market_insights.logger import debug_watcher, describe_call, get_logger


class TestGetLogger:
    def test_module_dunder_name_not_doubled(self):
        assert get_logger("market_insights.aggregator").name == "market_insights.aggregator"

    def test_bare_name_is_prefixed(self):
        assert get_logger("app").name == "market_insights.app"
        assert get_logger("__main__").name == "market_insights.__main__"

    def test_root(self):
        assert get_logger().name == "market_insights"
        assert get_logger("market_insights") is get_logger()


class TestDescribeCall:
    def test_long_string_is_bounded(self):
        text = "Page,Sessions\n" + "/a,1\n" * 200_000
        described = describe_call((text,), {})
        assert len(described) < 120
        assert described.startswith("'Page,Sessions")

    def test_objects_show_type_only(self):
        table = parse_delimited("Page,Sessions\n" + "/a,1\n" * 1000)
        assert describe_call((table,), {}) == "<RawTable>"

    def test_bytes_show_length(self):
        assert describe_call((b"abc",), {}) == "<bytes len=3>"

    def test_kwargs_and_scalars(self):
        assert describe_call(("a.csv", 3), {"brand_notes": None}) == "'a.csv', 3, brand_notes=None"


def test_debug_watcher_entry_line_is_short(caplog):
    @debug_watcher
    def consume(text):
        return len(text)

    caplog.set_level(logging.DEBUG, logger="market_insights")
    assert consume("x" * 1_000_000) == 1_000_000

    entries = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Starting consume")]
    assert len(entries) == 1
    assert len(entries[0]) < 200


def test_debug_watcher_reraises(caplog):
    @debug_watcher
    def explode():
        raise ValueError("bad input")

    caplog.set_level(logging.DEBUG, logger="market_insights")
    with pytest.raises(ValueError):
        explode()
    assert any("Exception in explode" in r.getMessage() for r in caplog.records)
