"""
Unit tests for query extraction and strict decoding.
"""

import pytest

from conftest import StubCompletionClient, extraction_reply
from zeronoise.intelligence.research.query_extractor import (
    FALLBACK_INTENT,
    FALLBACK_QUERY_CHARS,
    Decoded,
    Fallback,
    QueryExtractor,
    decode_queries,
    find_json_object,
)


@pytest.mark.unit
class TestFindJsonObject:
    """Tests for the balanced-brace scan."""

    def test_object_inside_chatter(self):
        text = 'Sure! {"queries": []} Hope that helps.'
        assert find_json_object(text) == '{"queries": []}'

    def test_nested_objects(self):
        text = 'x {"a": {"b": 1}} y'
        assert find_json_object(text) == '{"a": {"b": 1}}'

    def test_braces_inside_strings_ignored(self):
        text = '{"query": "what is {new}?", "intent": "x"}'
        assert find_json_object(text) == text

    def test_escaped_quote_in_string(self):
        text = r'{"query": "say \"hi\" }", "intent": ""}'
        assert find_json_object(text) == text

    def test_no_object(self):
        assert find_json_object("no json here") is None

    def test_unbalanced_then_balanced(self):
        text = '{ broken and then {"ok": true}'
        assert find_json_object(text) == '{"ok": true}'


@pytest.mark.unit
class TestDecodeQueries:
    """Tests for the tagged decode of model output."""

    def test_valid_reply(self):
        result = decode_queries(extraction_reply(2))
        assert isinstance(result, Decoded)
        assert [q.text for q in result.queries] == ["topic 1 latest updates", "topic 2 latest updates"]

    def test_missing_json(self):
        result = decode_queries("I could not think of anything.")
        assert isinstance(result, Fallback)
        assert result.reason == "no JSON object in response"

    def test_invalid_json(self):
        result = decode_queries("{queries: [oops]}")
        assert isinstance(result, Fallback)
        assert result.reason.startswith("invalid JSON")

    def test_missing_queries_array(self):
        result = decode_queries('{"items": []}')
        assert isinstance(result, Fallback)
        assert "queries" in result.reason

    def test_entries_without_query_skipped(self):
        raw = '{"queries": [{"intent": "no query"}, {"query": "  "}, {"query": "kept", "intent": "i"}]}'
        result = decode_queries(raw)
        assert isinstance(result, Decoded)
        assert len(result.queries) == 1
        assert result.queries[0].text == "kept"

    def test_no_usable_entries(self):
        result = decode_queries('{"queries": [{"intent": "only intent"}, "string"]}')
        assert isinstance(result, Fallback)
        assert result.reason == "'queries' array has no usable entries"

    def test_missing_intent_defaults_empty(self):
        result = decode_queries('{"queries": [{"query": "q"}]}')
        assert result.queries[0].intent == ""


@pytest.mark.unit
class TestQueryExtractor:
    """Tests for QueryExtractor.extract."""

    @pytest.mark.asyncio
    async def test_extracts_queries(self):
        client = StubCompletionClient(replies={"extract": extraction_reply(4)})
        extractor = QueryExtractor(client, model="extract")

        result = await extractor.extract("I follow AI coding tools", query_count=4)

        assert not result.used_fallback
        assert len(result.queries) == 4
        assert result.usage.total_tokens == 150
        assert len(client.complete_calls) == 1
        call = client.complete_calls[0]
        assert call["temperature"] == 0.6
        assert "I follow AI coding tools" in call["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_query_count_is_a_hint(self):
        client = StubCompletionClient(replies={"extract": extraction_reply(5)})
        extractor = QueryExtractor(client, model="extract")

        result = await extractor.extract("transcript", query_count=2)
        assert len(result.queries) == 5

        clamped = await extractor.extract("transcript", query_count=2, clamp=True)
        assert len(clamped.queries) == 2

    @pytest.mark.asyncio
    async def test_malformed_reply_degrades_to_fallback(self):
        transcript = "a" * 250
        client = StubCompletionClient(replies={"extract": "not json at all"})
        extractor = QueryExtractor(client, model="extract")

        result = await extractor.extract(transcript, query_count=3)

        assert result.used_fallback
        assert result.fallback_reason == "no JSON object in response"
        assert len(result.queries) == 1
        assert result.queries[0].text == transcript[:FALLBACK_QUERY_CHARS]
        assert result.queries[0].intent == FALLBACK_INTENT

    @pytest.mark.asyncio
    async def test_empty_content_degrades_to_fallback(self):
        client = StubCompletionClient(replies={"extract": None})
        extractor = QueryExtractor(client, model="extract")

        result = await extractor.extract("short transcript", query_count=3)

        assert result.used_fallback
        assert result.queries[0].text == "short transcript"
