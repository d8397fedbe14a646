"""
Integration tests for the pipeline HTTP API.
"""

import base64
import re

import pytest
from fastapi.testclient import TestClient

from conftest import TEST_API_KEY, StubCompletionClient, extraction_reply
from zeronoise.app.dependencies import get_app_settings, get_pipeline
from zeronoise.app.main import create_app
from zeronoise.intelligence.audio.speech_synthesizer import SpeechResult
from zeronoise.intelligence.models.search import TokenUsage
from zeronoise.intelligence.pipeline import IntelligencePipeline


class StubSynthesizer:
    voices = ("VoiceA", "VoiceB")

    def missing_credentials(self):
        return []

    async def synthesize(self, request):
        return SpeechResult(
            audio=b"RIFF-test-audio",
            mime_type="audio/wav",
            transcript="Analyst: Welcome.\nCommentator: Thanks.",
            script_model="gemini-2.5-flash",
            token_usage=TokenUsage(prompt_tokens=300, completion_tokens=200, total_tokens=500),
        )


@pytest.fixture
def completion_client():
    return StubCompletionClient(replies={
        "test-extract": extraction_reply(3),
        "test-brief": "**Key Developments**\n- Agents everywhere",
        "test-email": "Hi team,\n\nAgents everywhere.",
        "test-report": "## Executive Summary\nAgents everywhere.",
    })


@pytest.fixture
def client(test_settings, completion_client):
    app = create_app()

    def pipeline_override():
        pipeline = IntelligencePipeline.from_settings(test_settings, completion_client=completion_client)
        pipeline.renderers["podcast"].synthesizers["gemini"] = StubSynthesizer()
        return pipeline

    app.dependency_overrides[get_app_settings] = lambda: test_settings
    app.dependency_overrides[get_pipeline] = pipeline_override
    return TestClient(app)


@pytest.fixture
def search_results(client):
    response = client.post("/pipeline/run", json={"transcript": "I follow AI coding tools", "queryCount": 3})
    return response.json()["searchResults"]


@pytest.mark.integration
class TestRunRoute:
    """Tests for POST /pipeline/run."""

    def test_end_to_end(self, client, completion_client):
        response = client.post("/pipeline/run", json={
            "transcript": "I follow AI coding tools like Cursor and Windsurf",
            "queryCount": 3,
            "searchContext": "medium",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["extractedQueries"]) == 3
        assert len(data["searchResults"]) == 3
        assert data["performance"]["successfulSearches"] == 3
        assert data["settings"]["searchContext"] == "medium"
        assert data["reportData"]["corpus"].startswith("QUERY: topic 1 latest updates")
        assert len(completion_client.search_calls) == 3

    def test_missing_transcript(self, client, completion_client):
        response = client.post("/pipeline/run", json={"queryCount": 3})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert completion_client.complete_calls == []

    def test_missing_credential_fails_fast(self, client, completion_client):
        completion_client.configured = False

        response = client.post("/pipeline/run", json={"transcript": "anything"})

        assert response.status_code == 500
        assert "OPENAI_API_KEY" in response.json()["error"]
        assert completion_client.search_calls == []
        assert completion_client.complete_calls == []

    def test_malformed_body(self, client):
        response = client.post("/pipeline/run", json={"transcript": "x", "searchContext": "extreme"})

        assert response.status_code == 400
        assert response.json()["success"] is False


@pytest.mark.integration
class TestFormatRoutes:
    """Tests for POST /pipeline/format/*."""

    def test_brief(self, client, completion_client, search_results):
        searches_before = len(completion_client.search_calls)
        response = client.post("/pipeline/format/brief", json={"searchResults": search_results})

        assert response.status_code == 200
        data = response.json()
        assert data["brief"].startswith("**Key Developments**")
        assert not re.match(r"^Subject:", data["brief"])
        assert data["performance"]["inputSearches"] == 3
        assert data["usage"]["briefTokens"] == 150
        assert len(completion_client.search_calls) == searches_before

    def test_email_has_subject(self, client, search_results):
        response = client.post("/pipeline/format/email", json={
            "searchResults": search_results,
            "recipient": "Engineering",
        })

        assert response.status_code == 200
        assert re.match(r"^Subject:", response.json()["emailBrief"])

    def test_report(self, client, search_results):
        response = client.post("/pipeline/format/report", json={
            "searchResults": search_results,
            "reportStyle": "executive",
        })

        assert response.status_code == 200
        assert response.json()["detailedReport"].startswith("## Executive Summary")

    def test_podcast(self, client, search_results):
        response = client.post("/pipeline/format/podcast", json={
            "searchResults": search_results,
            "podcastName": "Signal",
        })

        assert response.status_code == 200
        data = response.json()
        assert base64.b64decode(data["audioData"]) == b"RIFF-test-audio"
        assert data["audioSize"] == len(b"RIFF-test-audio")
        assert data["mimeType"] == "audio/wav"
        assert data["podcastName"] == "Signal"
        assert data["settings"]["ttsModel"] == "gemini"
        assert data["sourceText"].startswith("INTELLIGENCE: ")
        assert data["usage"] == {"podcastTokens": 500, "scriptModel": "gemini-2.5-flash"}

    def test_podcast_without_successful_results(self, client, search_results):
        failed = [dict(r, success=False, response="", error="boom") for r in search_results]
        response = client.post("/pipeline/format/podcast", json={"searchResults": failed})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_podcast_missing_elevenlabs_key(self, client, search_results):
        response = client.post("/pipeline/format/podcast", json={
            "searchResults": search_results,
            "ttsModel": "elevenlabs",
        })

        assert response.status_code == 500
        assert "_API_KEY" in response.json()["error"]

    def test_missing_search_results(self, client):
        response = client.post("/pipeline/format/brief", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Search results are required"


@pytest.mark.integration
class TestAuxiliaryRoutes:
    """Tests for search, formats and health."""

    def test_single_search(self, client):
        response = client.post("/pipeline/search", json={"query": "Cursor news", "intent": "updates"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["result"]["response"] == "Findings for Cursor news"

    def test_single_search_requires_query(self, client):
        response = client.post("/pipeline/search", json={"query": " "})
        assert response.status_code == 400

    def test_formats(self, client):
        response = client.get("/pipeline/formats")

        assert response.status_code == 200
        assert [f["format"] for f in response.json()["formats"]] == ["brief", "email", "report", "podcast"]

    def test_health(self, client, test_settings):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert test_settings.openai_api_key == TEST_API_KEY
        assert data["status"] == "healthy"
        assert data["services"]["Completion API"]["status"] == "available"
        assert data["services"]["Gemini API"]["status"] == "degraded"
