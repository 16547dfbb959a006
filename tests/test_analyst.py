"""
Unit tests for the generative analyst boundary.
"""

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from market_insights.analyst import (
    ANALYSIS_SCHEMA,
    AnalysisBackend,
    AnalysisError,
    LeadMagnetIdea,
    MarketAnalysis,
    build_analysis_payload,
    build_prompt,
    parse_analysis,
    request_market_analysis,
)
from market_insights.ingestion import process_upload

EXPORT = b"Page,Sessions,Submissions\n/pricing,500,25\n/about,1000,5\n"

VALID_RESPONSE = {
    "summary": "Pricing converts best.",
    "whatIsWorking": ["/pricing"],
    "whatIsNotWorking": ["/about"],
    "strategicSuggestions": [
        {
            "id": "1",
            "title": "Pricing calculator",
            "hook": "Know your cost in 60 seconds",
            "outline": ["Inputs", "Results"],
            "rationale": "Pricing page has the highest rate.",
        }
    ],
}


class FakeBackend(AnalysisBackend):
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate(self, prompt, schema):
        self.calls.append((prompt, schema))
        if self.error is not None:
            raise self.error
        return self.response


def _uploads():
    return [process_upload("pages.csv", EXPORT), process_upload("empty.csv", b"")]


def test_payload_includes_complete_uploads_only():
    payload = build_analysis_payload(_uploads())
    assert len(payload) == 1
    entry = payload[0]
    assert entry["name"] == "pages.csv"
    assert entry["headers"] == ["Page", "Sessions", "Submissions"]
    assert entry["rowCount"] == 2
    assert entry["sampleCsv"].startswith('"Page"')
    assert entry["numericColumnStats"]["Sessions"] == {"sum": 1500.0, "max": 1000.0, "min": 500.0}
    json.dumps(payload)


def test_build_prompt():
    prompt = build_prompt([{"name": "pages.csv"}], brand_notes="B2B, formal")
    assert "pages.csv" in prompt
    assert prompt.endswith("Brand context: B2B, formal")


def test_request_market_analysis():
    backend = FakeBackend(response=VALID_RESPONSE)
    analysis = request_market_analysis(_uploads(), backend)

    assert analysis.summary == "Pricing converts best."
    assert analysis.what_is_working == ("/pricing",)
    assert analysis.strategic_suggestions == (
        LeadMagnetIdea(
            id="1",
            title="Pricing calculator",
            hook="Know your cost in 60 seconds",
            outline=("Inputs", "Results"),
            rationale="Pricing page has the highest rate.",
        ),
    )
    prompt, schema = backend.calls[0]
    assert schema is ANALYSIS_SCHEMA
    assert "/pricing" in prompt


def test_nothing_to_analyze():
    backend = FakeBackend(response=VALID_RESPONSE)
    with pytest.raises(AnalysisError) as exc_info:
        request_market_analysis([process_upload("empty.csv", b"")], backend)
    assert exc_info.value.stage == "request"
    assert backend.calls == []


def test_backend_failure_wrapped():
    backend = FakeBackend(error=RuntimeError("quota exceeded"))
    with pytest.raises(AnalysisError) as exc_info:
        request_market_analysis(_uploads(), backend)
    assert exc_info.value.stage == "request"
    assert "quota exceeded" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_fenced_json_text_response():
    text = "```json\n" + json.dumps(VALID_RESPONSE) + "\n```"
    assert parse_analysis(text).summary == "Pricing converts best."


def test_invalid_json_text():
    with pytest.raises(AnalysisError) as exc_info:
        parse_analysis("not json")
    assert exc_info.value.stage == "response"


def test_schema_violations_collected():
    bad = dict(VALID_RESPONSE, whatIsWorking="everything", strategicSuggestions=[{"id": "1"}])
    del bad["summary"]
    with pytest.raises(AnalysisError) as exc_info:
        parse_analysis(bad)
    errors = exc_info.value.errors
    assert exc_info.value.stage == "response"
    assert any(e.startswith("summary:") for e in errors)
    assert any(e.startswith("whatIsWorking:") for e in errors)
    assert any(e.startswith("strategicSuggestions.0.title:") for e in errors)
    assert any(e.startswith("strategicSuggestions.0.outline:") for e in errors)


def test_non_object_response():
    with pytest.raises(AnalysisError):
        parse_analysis(["summary"])


def test_schema_generated_from_model():
    assert ANALYSIS_SCHEMA["type"] == "object"
    assert set(ANALYSIS_SCHEMA["required"]) == {
        "summary",
        "whatIsWorking",
        "whatIsNotWorking",
        "strategicSuggestions",
    }
    idea_schema = ANALYSIS_SCHEMA["$defs"]["LeadMagnetIdea"]
    assert set(idea_schema["required"]) == {"id", "title", "hook", "outline", "rationale"}


def test_snake_case_names_accepted():
    analysis = MarketAnalysis(
        summary="ok",
        what_is_working=["a"],
        what_is_not_working=[],
        strategic_suggestions=[],
    )
    assert analysis.what_is_working == ("a",)
    assert analysis.model_dump(by_alias=True)["whatIsWorking"] == ("a",)


def test_analysis_is_frozen():
    analysis = parse_analysis(VALID_RESPONSE)
    with pytest.raises(ValidationError):
        analysis.summary = "changed"
