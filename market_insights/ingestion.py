"""
Upload ingestion.

Turns uploaded export files into processed uploads: decode bytes to text,
apply the input-size ceiling, parse, aggregate, and build the bounded sample
and column stats that accompany a request to the generative analyst.

Per-file failures never abort a batch: the upload is marked ``error`` and
the rest carry on.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from market_insights.aggregator import DashboardSummary, aggregate
from market_insights.column_stats import ColumnStats, compute_numeric_stats
from market_insights.config import CSV_ENCODINGS, DEFAULT_CONFIG, InsightsConfig
from market_insights.csv_parser import RawTable, parse_delimited
from market_insights.logger import debug_watcher, get_logger
from market_insights.sample import build_sample_csv

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = get_logger(__name__)

ALLOWED_SUFFIXES = (".csv", ".txt")

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETE = "complete"
STATUS_ERROR = "error"


class IngestionError(ValueError):
    """Raised when an upload cannot be turned into text."""


class UploadLimitError(IngestionError):
    """Raised when a batch would exceed the per-session upload limit."""


@dataclass
class UploadedFile:
    """One uploaded export and everything derived from it."""

    name: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: str = STATUS_PENDING
    table: RawTable = field(default_factory=RawTable)
    summary: DashboardSummary = field(default_factory=DashboardSummary)
    sample_csv: str = ""
    numeric_stats: dict[str, ColumnStats] = field(default_factory=dict)
    truncated: bool = False
    error: str | None = None

    @property
    def headers(self) -> tuple[str, ...]:
        return self.table.headers

    @property
    def row_count(self) -> int:
        return self.table.row_count

    @property
    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETE


def decode_bytes(data: bytes, encodings: Sequence[str] | None = None) -> str:
    """
    Decode upload bytes, trying each encoding in turn.

    Raises:
        IngestionError: If no encoding can decode the data.
    """
    for encoding in encodings or CSV_ENCODINGS:
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Decode with {encoding} failed: {e}")
            continue
    raise IngestionError("Could not decode file as text")


def truncate_text(text: str, max_chars: int) -> tuple[str, bool]:
    """Cut text to ``max_chars``; returns the text and whether it was cut."""
    if len(text) <= max_chars:
        return text, False
    return text[:max_chars], True


@debug_watcher
def process_text(name: str, text: str, config: InsightsConfig | None = None) -> UploadedFile:
    """
    Parse and aggregate already-decoded text.

    Raises:
        IngestionError: If the text is empty or whitespace only.
    """
    config = config or DEFAULT_CONFIG
    upload = UploadedFile(name=name, status=STATUS_PROCESSING)

    if not text.strip():
        raise IngestionError(f"Empty file: {name}")

    text, upload.truncated = truncate_text(text, config.max_input_chars)
    if upload.truncated:
        logger.warning(f"{name} truncated to {config.max_input_chars:,} characters before parsing")

    upload.table = parse_delimited(text)
    upload.summary = aggregate(upload.table, config)
    upload.sample_csv = build_sample_csv(upload.table, config.sample_max_rows, config.sample_max_chars)
    upload.numeric_stats = compute_numeric_stats(
        upload.table, config.stats_max_rows, config.stats_probe_rows
    )
    upload.status = STATUS_COMPLETE

    logger.info(f"Processed: {name} ({upload.row_count} rows, {len(upload.headers)} columns)")
    return upload


def process_upload(name: str, data: bytes, config: InsightsConfig | None = None) -> UploadedFile:
    """
    Decode and process one uploaded file; failures come back as an ``error`` upload.
    """
    try:
        return process_text(name, decode_bytes(data), config)
    except IngestionError as e:
        logger.warning(f"Failed to load {name}: {e}")
        return UploadedFile(name=name, status=STATUS_ERROR, error=str(e))


def process_uploads(
    files: Iterable[tuple[str, bytes]],
    config: InsightsConfig | None = None,
    existing: int = 0,
) -> list[UploadedFile]:
    """
    Process a batch of ``(name, bytes)`` uploads in order.

    Args:
        files: Uploaded files.
        config: Effective configuration.
        existing: Uploads already held by the session, counted against the limit.

    Raises:
        UploadLimitError: If the batch would push the session past ``max_uploads``.
    """
    config = config or DEFAULT_CONFIG
    batch = list(files)
    if existing + len(batch) > config.max_uploads:
        raise UploadLimitError(
            f"At most {config.max_uploads} files per session "
            f"({existing} already uploaded, {len(batch)} selected)"
        )

    uploads = [process_upload(name, data, config) for name, data in batch]
    failed = sum(1 for upload in uploads if upload.status == STATUS_ERROR)
    logger.info(f"Upload batch complete: {len(uploads) - failed} processed, {failed} failed")
    return uploads


def load_path(path: Path | str, config: InsightsConfig | None = None) -> UploadedFile:
    """
    Process an export from disk.

    Raises:
        IngestionError: On unsupported suffix, unreadable or empty file.
    """
    file_path = Path(path)
    if file_path.suffix.lower() not in ALLOWED_SUFFIXES:
        raise IngestionError(f"Unsupported file format: {file_path.suffix}")

    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise IngestionError(f"Cannot read {file_path}: {e}") from e

    return process_text(file_path.name, decode_bytes(data), config)
