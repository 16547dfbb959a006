"""
Boundary to the generative analyst service.

The service itself is opaque: it takes a prompt plus a response schema and
returns structured JSON (or raises). This module builds the request payload
from processed uploads and validates the response into pydantic models.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from market_insights.logger import debug_watcher, get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from market_insights.ingestion import UploadedFile

logger = get_logger(__name__)


class AnalysisError(Exception):
    """
    Raised when a market analysis cannot be produced.

    Attributes:
        stage: "request" (nothing to send, or the service failed) or
            "response" (the service answered with an unusable payload).
        errors: Human-readable problems.
    """

    def __init__(self, stage: str, errors: list[str]) -> None:
        self.stage = stage
        self.errors = errors
        super().__init__(f"Market analysis failed at stage '{stage}': " + "; ".join(errors))


class AnalysisBackend(ABC):
    """The generative service: ``generate(prompt, schema) -> JSON``."""

    @abstractmethod
    def generate(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any] | str:
        """Return the structured response, or its JSON text."""


class LeadMagnetIdea(BaseModel):
    """One suggested lead magnet."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    title: str
    hook: str
    outline: tuple[str, ...]
    rationale: str


class MarketAnalysis(BaseModel):
    """Narrative analysis. Wire keys are camelCase, attributes snake_case."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    summary: str
    what_is_working: tuple[str, ...] = Field(alias="whatIsWorking")
    what_is_not_working: tuple[str, ...] = Field(alias="whatIsNotWorking")
    strategic_suggestions: tuple[LeadMagnetIdea, ...] = Field(alias="strategicSuggestions")


ANALYSIS_SCHEMA: dict[str, Any] = MarketAnalysis.model_json_schema(by_alias=True)


def build_analysis_payload(uploads: Sequence[UploadedFile]) -> list[dict[str, Any]]:
    """One entry per complete upload: headers, row count, bounded sample and column stats."""
    return [
        {
            "name": upload.name,
            "headers": list(upload.headers),
            "rowCount": upload.row_count,
            "sampleCsv": upload.sample_csv,
            "numericColumnStats": {
                column: stats.to_dict() for column, stats in upload.numeric_stats.items()
            },
        }
        for upload in uploads
        if upload.is_complete
    ]


def build_prompt(payload: list[dict[str, Any]], brand_notes: str | None = None) -> str:
    prompt = "Analyze marketing performance data: " + json.dumps(payload, ensure_ascii=False)
    if brand_notes:
        prompt += f"\n\nBrand context: {brand_notes}"
    return prompt


def _strip_markdown_fences(text: str) -> str:
    stripped = text.strip()
    match = re.match(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", stripped, re.DOTALL)
    if match:
        return match.group(1).strip()
    return stripped


def parse_analysis(response: dict[str, Any] | str) -> MarketAnalysis:
    """
    Validate a service response into a MarketAnalysis.

    Raises:
        AnalysisError: stage "response" on invalid JSON or schema violations.
    """
    if isinstance(response, str):
        try:
            response = json.loads(_strip_markdown_fences(response))
        except json.JSONDecodeError as e:
            raise AnalysisError("response", [f"Invalid JSON: {e}"]) from e

    if not isinstance(response, dict):
        raise AnalysisError("response", ["Response must be a JSON object"])

    try:
        return MarketAnalysis.model_validate(response)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise AnalysisError("response", errors) from exc


@debug_watcher
def request_market_analysis(
    uploads: Sequence[UploadedFile],
    backend: AnalysisBackend,
    brand_notes: str | None = None,
) -> MarketAnalysis:
    """
    Ask the generative service for a narrative analysis of the uploads.

    Raises:
        AnalysisError: When no upload is complete, the service fails, or the
            response does not match ANALYSIS_SCHEMA.
    """
    payload = build_analysis_payload(uploads)
    if not payload:
        raise AnalysisError("request", ["No processed uploads to analyze"])

    prompt = build_prompt(payload, brand_notes)
    logger.info(f"Requesting market analysis for {len(payload)} file(s), {len(prompt):,} prompt chars")

    try:
        response = backend.generate(prompt, ANALYSIS_SCHEMA)
    except Exception as e:
        raise AnalysisError("request", [f"{type(e).__name__}: {e}"]) from e

    return parse_analysis(response)
