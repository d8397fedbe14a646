"""Data models for the intelligence pipeline."""

from .search import (
    Aggregate,
    PipelineSettings,
    Query,
    SearchContext,
    SearchOutcome,
    TokenUsage,
)
from .artifacts import PodcastArtifact, RenderArtifact, TextArtifact

__all__ = [
    # Search models
    "Query",
    "SearchOutcome",
    "TokenUsage",
    "SearchContext",
    "PipelineSettings",
    "Aggregate",
    # Artifacts
    "RenderArtifact",
    "TextArtifact",
    "PodcastArtifact",
]
