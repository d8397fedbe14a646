"""
Search models for the intelligence pipeline.
Queries, per-query outcomes, and the aggregate every renderer reads from.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchContext(str, Enum):
    """How much web context the search service should pull in."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TokenUsage(WireModel):
    """Token counters reported by the completion service."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_response(cls, usage: Optional[dict]) -> Optional["TokenUsage"]:
        """Build from a raw `usage` block; None when the service reported nothing."""
        if not isinstance(usage, dict):
            return None
        prompt = usage.get("prompt_tokens") or 0
        completion = usage.get("completion_tokens") or 0
        total = usage.get("total_tokens") or (prompt + completion)
        return cls(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=total,
        )

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class Query(WireModel):
    """
    A structured search intent extracted from a transcript.
    Serialized as {"query": ..., "intent": ...}.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., alias="query", min_length=1)
    intent: str = ""


class SearchOutcome(WireModel):
    """
    Result of one isolated search task.
    Exactly one exists per submitted Query, successful or not.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    intent: str = ""
    response: str = ""
    token_usage: Optional[TokenUsage] = None
    duration_ms: int = 0
    success: bool
    error: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_usage(cls, data: Any) -> Any:
        # Older clients echo the raw completion `usage` block back to us
        if isinstance(data, dict) and "usage" in data and "tokenUsage" not in data:
            data = dict(data)
            data["tokenUsage"] = data.pop("usage")
        return data

    @classmethod
    def succeeded(
        cls,
        query: Query,
        response: str,
        duration_ms: int,
        token_usage: Optional[TokenUsage] = None,
    ) -> "SearchOutcome":
        return cls(
            query=query.text,
            intent=query.intent,
            response=response,
            token_usage=token_usage,
            duration_ms=duration_ms,
            success=True,
        )

    @classmethod
    def failed(cls, query: Query, error: str, duration_ms: int) -> "SearchOutcome":
        return cls(
            query=query.text,
            intent=query.intent,
            response="",
            duration_ms=duration_ms,
            success=False,
            error=error or "Unknown search error",
        )


class PipelineSettings(WireModel):
    """Caller-supplied run settings, echoed back untouched."""

    search_timeframe: str = "3 month"
    query_count: int = 6
    search_context: SearchContext = SearchContext.HIGH
    report_style: str = "detailed"


class Aggregate(WireModel):
    """
    Successful search outcomes in original order, plus the joined corpus
    that renderers feed to the model.
    """

    entries: list[SearchOutcome] = Field(default_factory=list)
    corpus: str = ""
    total_outcomes: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def dialogue_source(self) -> str:
        """Findings laid out for a spoken-dialogue writer."""
        return "\n\n".join(
            f"INTELLIGENCE: {entry.query}\nFINDINGS: {entry.response}"
            for entry in self.entries
        )
