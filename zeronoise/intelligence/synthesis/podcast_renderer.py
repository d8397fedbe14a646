"""Podcast renderer - two-host spoken briefing from the aggregate."""

import logging
import time
from typing import Optional

from ..audio.speech_synthesizer import DialogueRequest, GeminiPodcastSynthesizer, Host
from ..errors import EmptyInput, InputValidationError, MissingCredential
from ..models.artifacts import PodcastArtifact
from ..models.search import Aggregate
from ..telemetry import elapsed_ms


logger = logging.getLogger(__name__)


class PodcastRenderer:
    """
    Renders the aggregate as a two-host audio episode.

    Credentials for the chosen speech provider are checked first, then
    the aggregate must hold at least one successful result; only then is
    the speech service called.
    """

    FORMAT = "podcast"

    HOST_LABELS = ("Analyst", "Commentator")
    HOST_ROLES = ("Intelligence Analyst", "Expert Commentator")
    DIALOGUE_STRUCTURE = ["Opening", "Intelligence Brief", "Analysis", "Key Takeaways", "Conclusion"]
    DEFAULT_INSTRUCTIONS = (
        "Focus on recent developments and actionable intelligence. Make it engaging "
        "and informative for professionals staying current in their field."
    )

    def __init__(self, synthesizers: dict[str, GeminiPodcastSynthesizer]):
        self.synthesizers = synthesizers

    @property
    def providers(self) -> list[str]:
        return sorted(self.synthesizers)

    async def render(
        self,
        aggregate: Aggregate,
        podcast_name: str = "Zero Noise Intelligence Brief",
        podcast_tagline: str = "Latest intelligence and developments",
        tts_model: str = "gemini",
        word_count: int = 300,
        conversation_style: str = "engaging,informative,current",
        creativity: float = 0.7,
        user_instructions: Optional[str] = None,
    ) -> PodcastArtifact:
        synthesizer = self.synthesizers.get(tts_model)
        if synthesizer is None:
            raise InputValidationError(
                f"Unsupported ttsModel '{tts_model}'; expected one of {', '.join(self.providers)}"
            )

        missing = synthesizer.missing_credentials()
        if missing:
            raise MissingCredential(missing[0], f"required for {tts_model} podcast generation")

        if aggregate.is_empty:
            raise EmptyInput("No successful search results available for podcast generation")

        started = time.perf_counter()
        source_text = aggregate.dialogue_source
        hosts = [
            Host(label=label, role=role, voice=voice)
            for label, role, voice in zip(self.HOST_LABELS, self.HOST_ROLES, synthesizer.voices)
        ]
        style = [s.strip() for s in conversation_style.split(",") if s.strip()]

        logger.info(
            f"Generating podcast from {aggregate.entry_count} intelligence sources "
            f"({len(source_text)} chars, target {word_count} words, {tts_model})"
        )

        result = await synthesizer.synthesize(
            DialogueRequest(
                source_text=source_text,
                hosts=hosts,
                word_count=word_count,
                conversation_style=style,
                dialogue_structure=self.DIALOGUE_STRUCTURE,
                podcast_name=podcast_name,
                podcast_tagline=podcast_tagline,
                creativity=creativity,
                user_instructions=user_instructions or self.DEFAULT_INSTRUCTIONS,
            )
        )
        duration = elapsed_ms(started)

        logger.info(f"Podcast generated in {duration}ms ({len(result.audio)} bytes)")
        return PodcastArtifact(
            format=self.FORMAT,
            model=result.script_model,
            token_usage=result.token_usage,
            render_duration_ms=duration,
            input_entries=aggregate.entry_count,
            total_outcomes=aggregate.total_outcomes,
            audio=result.audio,
            mime_type=result.mime_type,
            transcript=result.transcript,
            source_text=source_text,
            podcast_name=podcast_name,
            podcast_tagline=podcast_tagline,
            settings={
                "ttsModel": tts_model,
                "wordCount": word_count,
                "conversationStyle": conversation_style,
            },
        )
