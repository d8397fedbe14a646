"""Render artifacts produced by the format renderers."""

from typing import Optional

from pydantic import Field

from .search import TokenUsage, WireModel


class RenderArtifact(WireModel):
    """Fields shared by every rendered output."""

    format: str
    model: Optional[str] = None
    render_duration_ms: int = 0
    token_usage: Optional[TokenUsage] = None

    # Inputs the artifact was rendered from
    input_entries: int = 0
    total_outcomes: int = 0

    # Set when the upstream reply was 2xx but had no usable content
    placeholder_used: bool = False


class TextArtifact(RenderArtifact):
    """Brief, email or detailed report."""

    text: str = ""

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class PodcastArtifact(RenderArtifact):
    """Synthesized two-host audio plus the dialogue it was spoken from."""

    audio: bytes = b""
    mime_type: str = "audio/wav"
    transcript: str = ""
    source_text: str = ""

    podcast_name: str = ""
    podcast_tagline: str = ""
    settings: dict = Field(default_factory=dict)

    @property
    def audio_size(self) -> int:
        return len(self.audio)
