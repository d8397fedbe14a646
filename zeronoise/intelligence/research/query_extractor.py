"""Query extractor - turns a transcript into recency-focused search intents."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import ValidationError

from ..llm.completion_client import CompletionClient
from ..models.search import Query, TokenUsage


logger = logging.getLogger(__name__)


FALLBACK_QUERY_CHARS = 100
FALLBACK_INTENT = "Find recent developments related to transcript topic"


@dataclass(frozen=True)
class Decoded:
    """Model output decoded into at least one usable query."""
    queries: list[Query]


@dataclass(frozen=True)
class Fallback:
    """Model output was unusable; `reason` says why."""
    reason: str


DecodeResult = Union[Decoded, Fallback]


@dataclass(frozen=True)
class ExtractionResult:
    """Queries plus whether they came from the degraded fallback path."""
    queries: list[Query]
    used_fallback: bool
    fallback_reason: Optional[str] = None
    raw_response: str = ""
    usage: Optional[TokenUsage] = None


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of `text`, or None.
    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def decode_queries(raw: str) -> DecodeResult:
    """Strictly decode a model reply into queries, or explain why not."""
    candidate = find_json_object(raw or "")
    if candidate is None:
        return Fallback("no JSON object in response")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        return Fallback(f"invalid JSON: {e.msg}")

    items = parsed.get("queries") if isinstance(parsed, dict) else None
    if not isinstance(items, list):
        return Fallback("response has no 'queries' array")

    queries = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = item.get("query")
        intent = item.get("intent", "")
        if not isinstance(text, str) or not text.strip():
            continue
        try:
            queries.append(Query(text=text.strip(), intent=str(intent or "").strip()))
        except ValidationError:
            continue

    if not queries:
        return Fallback("'queries' array has no usable entries")
    return Decoded(queries)


def fallback_query(transcript: str) -> Query:
    return Query(text=transcript[:FALLBACK_QUERY_CHARS], intent=FALLBACK_INTENT)


class QueryExtractor:
    """
    Extracts structured search queries from a free-form transcript.

    One completion call, no retries. An unusable reply degrades to a
    single query built from the transcript instead of failing.
    """

    EXTRACTION_PROMPT = """Analyze this conversation/transcript and extract {query_count} intelligence queries to help the user stay up-to-date on their interests.

CURRENT TIME: {now}

INPUT: {transcript}

INTELLIGENCE GATHERING FRAMEWORK:
1. Identify core topics and subtopics mentioned
2. Prioritize recency-focused query types:
   - Update Intelligence (what's changed recently?)
   - Trend Monitoring (what's emerging or shifting?)
   - Competitive Intelligence (how are options evolving?)
   - Development Tracking (what's new in implementation?)
   - Market Intelligence (latest movements and announcements)
3. Temporal focus:
   - What has changed in the past {timeframe}?
   - What are the latest developments?
   - What's emerging or trending now?

CREATE QUERIES THAT:
- Prioritize recent developments and changes
- Focus on "what's new" and "what's changed"
- Emphasize fresh intelligence over historical background

OUTPUT FORMAT (return only valid JSON):
{{
  "queries": [
    {{"query": "specific search string", "intent": "what we hope to find"}}
  ]
}}

EXAMPLE:
Input: "I'm interested in AI coding tools like Cursor and Windsurf"
Output: {{"queries": [{{"query": "Cursor Windsurf latest updates new features", "intent": "Track recent developments and feature releases in AI coding assistants"}}]}}"""

    def __init__(
        self,
        client: CompletionClient,
        model: str = "gpt-4.1-mini",
        temperature: float = 0.6,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def extract(
        self,
        transcript: str,
        query_count: int,
        search_timeframe: str = "3 month",
        clamp: bool = False,
    ) -> ExtractionResult:
        """
        Extract up to roughly `query_count` queries.

        `query_count` is a hint: the model may return more or fewer.
        Pass clamp=True to truncate to `query_count`.
        """
        prompt = self.EXTRACTION_PROMPT.format(
            query_count=query_count,
            now=datetime.now(timezone.utc).isoformat(),
            transcript=transcript,
            timeframe=search_timeframe,
        )

        result = await self.client.complete(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        raw = result.content or ""

        decoded = decode_queries(raw)
        if isinstance(decoded, Fallback):
            logger.warning(f"Query extraction degraded ({decoded.reason}), using fallback query")
            return ExtractionResult(
                queries=[fallback_query(transcript)],
                used_fallback=True,
                fallback_reason=decoded.reason,
                raw_response=raw,
                usage=result.usage,
            )

        queries = decoded.queries
        if clamp and query_count > 0:
            queries = queries[:query_count]

        logger.info(f"Extracted {len(queries)} queries: {[q.text for q in queries]}")
        return ExtractionResult(
            queries=queries,
            used_fallback=False,
            raw_response=raw,
            usage=result.usage,
        )
