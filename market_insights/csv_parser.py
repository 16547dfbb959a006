"""
Delimited-text parser for marketing exports.

Turns the raw text of a CSV export (HubSpot, GA, ad platforms) into an ordered
header list plus one mapping per data row. Quoted fields may contain commas,
newlines and doubled quotes; ``\\r\\n``, ``\\r`` and ``\\n`` all end a row.

The parser never raises. Unbalanced quoting simply lets the open field absorb
the rest of the text.

Known behavior: headers are not deduplicated, so when two columns share a
name the later column's value wins in every row mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

QUOTE = '"'
DELIMITER = ","


@dataclass(frozen=True)
class RawTable:
    """Parsed upload: headers in source order plus positional row mappings."""

    headers: tuple[str, ...] = ()
    rows: tuple[dict[str, str], ...] = field(default_factory=tuple)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.headers

    def to_dataframe(self) -> pd.DataFrame:
        """DataFrame view of the rows (object dtype, one column per distinct header)."""
        columns = list(dict.fromkeys(self.headers))
        return pd.DataFrame(list(self.rows), columns=columns)


def _scan_records(text: str) -> list[list[str]]:
    """Split text into records of untrimmed fields with a single left-to-right pass."""
    records: list[list[str]] = []
    record: list[str] = []
    chars: list[str] = []
    in_quotes = False
    # Set once a quote opens the current field, so `""` alone still yields a field
    field_started = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and text[i + 1] == QUOTE:
                # Escaped quote inside a quoted field
                chars.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
            field_started = True
        elif in_quotes:
            chars.append(ch)
        elif ch == DELIMITER:
            record.append("".join(chars))
            chars = []
            field_started = False
        elif ch == "\r" or ch == "\n":
            record.append("".join(chars))
            chars = []
            records.append(record)
            record = []
            field_started = False
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
        else:
            chars.append(ch)
        i += 1

    if chars or record or field_started:
        record.append("".join(chars))
        records.append(record)

    return records


def _is_blank_line(record: list[str]) -> bool:
    return len(record) == 1 and record[0] == ""


def parse_delimited(text: str) -> RawTable:
    """
    Parse delimited text into a RawTable.

    The first surviving record becomes the (trimmed) header list. Each later
    record is mapped positionally onto the headers: missing trailing cells
    become ``""`` and surplus cells are ignored. Cells are trimmed only here,
    never during scanning. Blank lines after the first record and rows whose
    mapped cells are all empty are dropped.

    Args:
        text: Full decoded text of the upload (already size-capped by the caller).

    Returns:
        RawTable; empty when the text holds no records.
    """
    records = [
        record
        for index, record in enumerate(_scan_records(text))
        if index == 0 or not _is_blank_line(record)
    ]
    if not records:
        return RawTable()

    headers = tuple(cell.strip() for cell in records[0])
    width = len(headers)

    rows: list[dict[str, str]] = []
    for record in records[1:]:
        values = [record[i].strip() if i < len(record) else "" for i in range(width)]
        if all(value == "" for value in values):
            continue
        rows.append(dict(zip(headers, values)))

    return RawTable(headers=headers, rows=tuple(rows))
