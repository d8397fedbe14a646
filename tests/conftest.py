"""
Pytest configuration and fixtures for Zero Noise tests.
"""

import json
import os
import re
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep real credentials out of the test run
for var in ("OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "ELEVENLABS_API_KEY"):
    os.environ.pop(var, None)

from zeronoise.config.settings import Settings
from zeronoise.intelligence.errors import UpstreamFailure
from zeronoise.intelligence.llm.completion_client import CompletionResult
from zeronoise.intelligence.models.search import Query, SearchOutcome, TokenUsage


TEST_API_KEY = "sk-test-" + "x" * 32

_QUERY_LINE = re.compile(r"^QUERY: (.*)$", re.MULTILINE)


def extraction_reply(count: int = 3) -> str:
    """A well-formed extraction reply wrapped in chatter, as models tend to return it."""
    queries = [
        {"query": f"topic {i + 1} latest updates", "intent": f"Track recent changes in topic {i + 1}"}
        for i in range(count)
    ]
    return "Here are the queries:\n" + json.dumps({"queries": queries}) + "\nLet me know!"


class StubCompletionClient:
    """
    Stand-in for CompletionClient.

    `replies` maps model name to a reply: a string, None (malformed 2xx),
    an exception to raise, or a callable taking the messages.
    Searches answer from `search_handler`, defaulting to a canned finding.
    """

    def __init__(self, replies=None, search_handler=None, configured=True):
        self.replies = replies or {}
        self.search_handler = search_handler
        self.configured = configured
        self.complete_calls = []
        self.search_calls = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def complete(self, model, messages, temperature=None, max_tokens=None):
        self.complete_calls.append({
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        reply = self.replies.get(model, f"{model} output")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(messages)
        return CompletionResult(
            content=reply,
            model=model,
            usage=TokenUsage(prompt_tokens=100, completion_tokens=50, total_tokens=150),
        )

    async def search(self, model, messages, search_context_size=None):
        prompt = messages[-1]["content"]
        match = _QUERY_LINE.search(prompt)
        query = match.group(1) if match else prompt
        self.search_calls.append({"model": model, "query": query, "context": search_context_size})

        if self.search_handler is not None:
            return await self.search_handler(query)
        return CompletionResult(
            content=f"Findings for {query}",
            model=model,
            usage=TokenUsage(prompt_tokens=20, completion_tokens=30, total_tokens=50),
        )


@pytest.fixture
def test_settings():
    """Settings with distinct model ids per stage, isolated from env and .env."""
    return Settings(
        _env_file=None,
        openai_api_key=TEST_API_KEY,
        gemini_api_key=None,
        elevenlabs_api_key=None,
        extraction_model="test-extract",
        search_model="test-search",
        brief_model="test-brief",
        email_model="test-email",
        report_model="test-report",
        report_fallback_model="test-report-mini",
        search_task_timeout_seconds=5.0,
    )


@pytest.fixture
def stub_client():
    return StubCompletionClient(replies={"test-extract": extraction_reply(3)})


@pytest.fixture
def sample_queries():
    return [
        Query(text="Cursor latest release notes", intent="Track new editor features"),
        Query(text="Windsurf funding news", intent="Follow company developments"),
        Query(text="Claude coding benchmarks", intent="Compare model performance"),
    ]


@pytest.fixture
def sample_outcomes():
    """Mixed outcomes: two successes around one failure."""
    return [
        SearchOutcome(
            query="Cursor latest release notes",
            intent="Track new editor features",
            response="Cursor shipped background agents.",
            duration_ms=1200,
            success=True,
        ),
        SearchOutcome(
            query="Windsurf funding news",
            intent="Follow company developments",
            duration_ms=800,
            success=False,
            error="Completion service returned 429 for test-search",
        ),
        SearchOutcome(
            query="Claude coding benchmarks",
            intent="Compare model performance",
            response="New SWE-bench results were published.",
            duration_ms=1500,
            success=True,
        ),
    ]


def upstream_failure(status: int = 503) -> UpstreamFailure:
    return UpstreamFailure(f"Completion service returned {status}", status=status)
