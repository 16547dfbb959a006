"""
Unit tests for the bounded analyst sample.
"""

import json
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.csv_parser import RawTable, parse_delimited
from market_insights.sample import build_sample_csv


def test_cells_are_json_escaped():
    table = parse_delimited('a,b\n"x,1","say ""hi"""')
    assert build_sample_csv(table) == '"a","b"\n"x,1","say \\"hi\\""'


def test_embedded_newline_stays_on_one_line():
    table = parse_delimited('h\n"line1\nline2"')
    lines = build_sample_csv(table).split("\n")
    assert lines == ['"h"', '"line1\\nline2"']
    assert json.loads(lines[1]) == "line1\nline2"


def test_non_ascii_kept():
    table = parse_delimited("Page\ncafé")
    assert build_sample_csv(table) == '"Page"\n"café"'


def test_row_limit():
    table = parse_delimited("n\n" + "\n".join(str(i) for i in range(5)))
    sample = build_sample_csv(table, max_rows=2)
    assert sample.split("\n") == ['"n"', '"0"', '"1"']


def test_default_row_limit_is_200():
    table = parse_delimited("n\n" + "\n".join(str(i) for i in range(250)))
    assert len(build_sample_csv(table).split("\n")) == 201


def test_char_limit():
    table = parse_delimited("n\n" + "\n".join("x" * 50 for _ in range(20)))
    sample = build_sample_csv(table, max_chars=100)
    assert len(sample) == 100
    assert sample.startswith('"n"\n"xxx')


def test_empty_table():
    assert build_sample_csv(RawTable()) == ""


def test_sample_is_deterministic():
    table = parse_delimited("Page,Sessions\n/a,1\n/b,2")
    assert build_sample_csv(table) == build_sample_csv(table)
