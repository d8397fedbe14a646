"""Request-scoped stage timing and token accounting."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .models.search import SearchOutcome, TokenUsage


logger = logging.getLogger(__name__)


def elapsed_ms(started: float) -> int:
    """Milliseconds since a time.perf_counter() reading."""
    return int((time.perf_counter() - started) * 1000)


@dataclass
class StageTiming:
    """One timed stage."""
    name: str
    duration_ms: int


@dataclass
class PipelineTelemetry:
    """
    Records how long each stage took and how many tokens it spent.

    Created at pipeline entry and dropped once the response is built;
    never shared between requests.
    """
    stages: list[StageTiming] = field(default_factory=list)
    usage_by_stage: dict[str, TokenUsage] = field(default_factory=dict)
    started_at: float = field(default_factory=time.perf_counter)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time the enclosed block as stage `name`."""
        started = time.perf_counter()
        logger.info(f"Stage '{name}' started")
        try:
            yield
        finally:
            duration = elapsed_ms(started)
            self.stages.append(StageTiming(name=name, duration_ms=duration))
            logger.info(f"Stage '{name}' completed in {duration}ms")

    def add_usage(self, stage: str, usage: Optional[TokenUsage]):
        if usage is None:
            return
        current = self.usage_by_stage.get(stage, TokenUsage())
        self.usage_by_stage[stage] = current + usage

    def duration_of(self, name: str) -> int:
        return sum(s.duration_ms for s in self.stages if s.name == name)

    def tokens_of(self, name: str) -> int:
        usage = self.usage_by_stage.get(name)
        return usage.total_tokens if usage else 0

    @property
    def total_tokens(self) -> int:
        return sum(u.total_tokens for u in self.usage_by_stage.values())

    @property
    def total_ms(self) -> int:
        return elapsed_ms(self.started_at)

    def performance(self, outcomes: list[SearchOutcome]) -> dict:
        """Performance block for the pipeline response."""
        successful = sum(1 for o in outcomes if o.success)
        avg_search = (
            sum(o.duration_ms for o in outcomes) / len(outcomes) if outcomes else 0
        )
        return {
            "queryExtractionTime": self.duration_of("extraction"),
            "searchExecutionTime": self.duration_of("search"),
            "aggregationTime": self.duration_of("aggregation"),
            "totalPipelineTime": self.total_ms,
            "avgSearchTime": round(avg_search),
            "successfulSearches": successful,
            "totalSearches": len(outcomes),
            "stages": [
                {"stageName": s.name, "durationMs": s.duration_ms}
                for s in self.stages
            ],
        }

    def usage(self) -> dict:
        """Usage block for the pipeline response."""
        return {
            "totalTokens": self.total_tokens,
            "queryExtractionTokens": self.tokens_of("extraction"),
            "searchTokens": self.tokens_of("search"),
        }
