"""
Intelligence Pipeline - transcript to queries to searches to rendered formats.

Usage:
    python -m zeronoise.intelligence.pipeline --transcript "I follow AI coding tools"
    python -m zeronoise.intelligence.pipeline --transcript-file notes.txt --format brief --format email
"""

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config.settings import Settings, get_settings
from ..utils.logger import setup_logging
from .audio.speech_synthesizer import ElevenLabsPodcastSynthesizer, GeminiPodcastSynthesizer
from .errors import InputValidationError, MissingCredential
from .llm.cascade import ModelAttempt, ModelCascade
from .llm.completion_client import CompletionClient
from .models.artifacts import PodcastArtifact, RenderArtifact
from .models.search import Aggregate, PipelineSettings, Query, SearchOutcome
from .research.aggregator import ResultAggregator
from .research.query_extractor import ExtractionResult, QueryExtractor
from .research.search_executor import SearchExecutor
from .synthesis.brief_renderer import BriefRenderer
from .synthesis.email_renderer import EmailRenderer
from .synthesis.podcast_renderer import PodcastRenderer
from .synthesis.report_renderer import DetailedReportRenderer
from .telemetry import PipelineTelemetry


logger = logging.getLogger(__name__)


FORMATS = ["brief", "email", "report", "podcast"]


@dataclass
class PipelineResult:
    """Everything one pipeline run produced."""
    transcript: str
    settings: PipelineSettings
    extraction: ExtractionResult
    outcomes: list[SearchOutcome]
    aggregate: Aggregate
    telemetry: PipelineTelemetry

    @property
    def successful_searches(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    def to_response(self) -> dict:
        """JSON body for POST /pipeline/run."""
        return {
            "success": True,
            "transcript": self.transcript,
            "extractedQueries": [q.model_dump(by_alias=True) for q in self.extraction.queries],
            "searchResults": [
                o.model_dump(by_alias=True, exclude_none=True) for o in self.outcomes
            ],
            "reportData": {
                "corpus": self.aggregate.corpus,
                "successfulResults": self.aggregate.entry_count,
                "usedFallback": self.extraction.used_fallback,
                "fallbackReason": self.extraction.fallback_reason,
            },
            "performance": self.telemetry.performance(self.outcomes),
            "usage": self.telemetry.usage(),
            "settings": self.settings.model_dump(by_alias=True, mode="json"),
        }


class IntelligencePipeline:
    """
    Runs extraction, search and aggregation as one request, and renders
    any format on demand from a list of search outcomes.
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        extractor: QueryExtractor,
        executor: SearchExecutor,
        aggregator: Optional[ResultAggregator] = None,
        renderers: Optional[dict] = None,
    ):
        self.completion_client = completion_client
        self.extractor = extractor
        self.executor = executor
        self.aggregator = aggregator or ResultAggregator()
        self.renderers = renderers or {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        completion_client: Optional[CompletionClient] = None,
    ) -> "IntelligencePipeline":
        client = completion_client or CompletionClient(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
            retries=settings.http_retries,
        )
        script_cascade = ModelCascade.two_tier(
            ModelAttempt(model=settings.podcast_script_model),
            ModelAttempt(model=settings.podcast_script_fallback_model),
        )
        synthesizers = {
            "gemini": GeminiPodcastSynthesizer(
                settings.gemini_api_key,
                script_cascade=script_cascade,
                tts_model=settings.tts_model,
            ),
            "elevenlabs": ElevenLabsPodcastSynthesizer(
                settings.gemini_api_key,
                settings.elevenlabs_api_key,
                script_cascade=script_cascade,
                voices=(settings.elevenlabs_voice_analyst, settings.elevenlabs_voice_commentator),
            ),
        }
        return cls(
            completion_client=client,
            extractor=QueryExtractor(client, model=settings.extraction_model),
            executor=SearchExecutor(
                client,
                model=settings.search_model,
                max_concurrency=settings.search_concurrency,
                task_timeout=settings.search_task_timeout_seconds,
            ),
            renderers={
                "brief": BriefRenderer(client, model=settings.brief_model),
                "email": EmailRenderer(client, model=settings.email_model),
                "report": DetailedReportRenderer(
                    client,
                    model=settings.report_model,
                    fallback_model=settings.report_fallback_model,
                ),
                "podcast": PodcastRenderer(synthesizers),
            },
        )

    def require_completion_credential(self):
        if not self.completion_client.is_configured:
            raise MissingCredential("OPENAI_API_KEY", "OpenAI API key not configured")

    async def run(self, transcript: Optional[str], settings: PipelineSettings) -> PipelineResult:
        """Extract, search and aggregate. Raises before any network call on bad input or config."""
        if not isinstance(transcript, str) or not transcript.strip():
            raise InputValidationError("Transcript is required and must be a non-empty string")
        self.require_completion_credential()

        logger.info(
            f"Research pipeline started (transcript {len(transcript)} chars, "
            f"{settings.query_count} queries, {settings.search_timeframe}, "
            f"context {settings.search_context.value})"
        )
        telemetry = PipelineTelemetry()

        with telemetry.stage("extraction"):
            extraction = await self.extractor.extract(
                transcript,
                settings.query_count,
                search_timeframe=settings.search_timeframe,
            )
        telemetry.add_usage("extraction", extraction.usage)

        with telemetry.stage("search"):
            outcomes = await self.executor.execute(extraction.queries, settings)
        for outcome in outcomes:
            telemetry.add_usage("search", outcome.token_usage)

        with telemetry.stage("aggregation"):
            aggregate = self.aggregator.aggregate(outcomes)

        result = PipelineResult(
            transcript=transcript,
            settings=settings,
            extraction=extraction,
            outcomes=outcomes,
            aggregate=aggregate,
            telemetry=telemetry,
        )
        logger.info(
            f"Pipeline completed in {telemetry.total_ms}ms: "
            f"{result.successful_searches}/{len(outcomes)} searches, "
            f"{telemetry.total_tokens} tokens"
        )
        return result

    async def render(
        self,
        format: str,
        source: Union[Aggregate, list[SearchOutcome]],
        **options,
    ) -> RenderArtifact:
        """Render one format from an aggregate or from raw search outcomes."""
        renderer = self.renderers.get(format)
        if renderer is None:
            raise InputValidationError(f"Unknown format '{format}'; expected one of {', '.join(FORMATS)}")

        aggregate = source if isinstance(source, Aggregate) else self.aggregator.aggregate(source)
        return await renderer.render(aggregate, **options)

    async def search(self, query: Query, settings: PipelineSettings) -> SearchOutcome:
        """One ad-hoc search outside a run; failures come back in-band."""
        self.require_completion_credential()
        return await self.executor.search_single(query, settings)

    def catalogue(self) -> list[dict]:
        """Available formats and the models or providers behind each."""
        entries = []
        for name in FORMATS:
            renderer = self.renderers.get(name)
            if renderer is None:
                continue
            entry = {"format": name}
            if isinstance(renderer, PodcastRenderer):
                entry["providers"] = renderer.providers
            else:
                entry["label"] = renderer.LABEL
                entry["models"] = renderer.cascade.models
            entries.append(entry)
        return entries


def save_artifact(artifact: RenderArtifact, output_dir: Path) -> Path:
    """Write an artifact to disk; podcasts write audio plus a transcript."""
    if isinstance(artifact, PodcastArtifact):
        suffix = ".wav" if artifact.mime_type == "audio/wav" else ".mp3"
        audio_path = output_dir / f"podcast{suffix}"
        audio_path.write_bytes(artifact.audio)
        (output_dir / "podcast_transcript.txt").write_text(artifact.transcript)
        return audio_path

    path = output_dir / f"{artifact.format}.md"
    path.write_text(artifact.text)
    return path


async def run_cli(
    transcript: str,
    formats: list[str],
    pipeline_settings: PipelineSettings,
    output_dir: str = "./output",
    settings: Optional[Settings] = None,
) -> dict:
    settings = settings or get_settings()
    pipeline = IntelligencePipeline.from_settings(settings)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    result = await pipeline.run(transcript, pipeline_settings)
    response = result.to_response()
    (output_path / "pipeline.json").write_text(json.dumps(response, indent=2))

    artifacts = {}
    for fmt in formats:
        artifact = await pipeline.render(fmt, result.aggregate)
        artifacts[fmt] = str(save_artifact(artifact, output_path))

    performance = response["performance"]
    print("\n" + "=" * 60)
    print("PIPELINE COMPLETE")
    print("=" * 60)
    print(f"Queries: {len(result.extraction.queries)}"
          f"{' (fallback)' if result.extraction.used_fallback else ''}")
    print(f"Searches: {performance['successfulSearches']}/{performance['totalSearches']} successful")
    print(f"Time: {performance['totalPipelineTime']}ms")
    print(f"Tokens: {response['usage']['totalTokens']}")
    for fmt, path in artifacts.items():
        print(f"{fmt.title()}: {path}")
    print("=" * 60 + "\n")

    return {"response": response, "artifacts": artifacts}


def main():
    parser = argparse.ArgumentParser(description="Zero Noise Intelligence Pipeline")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--transcript", help="Transcript text")
    source.add_argument("--transcript-file", help="Path to a transcript file")
    parser.add_argument(
        "--format",
        action="append",
        choices=FORMATS,
        default=[],
        help="Format to render (repeatable)",
    )
    parser.add_argument("--queries", type=int, default=6, help="Number of queries to extract")
    parser.add_argument("--timeframe", default="3 month", help="Search timeframe")
    parser.add_argument(
        "--context",
        choices=["low", "medium", "high"],
        default="high",
        help="Search context size",
    )
    parser.add_argument("--output", default="./output", help="Output directory")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)

    transcript = args.transcript
    if args.transcript_file:
        transcript = Path(args.transcript_file).read_text()

    asyncio.run(
        run_cli(
            transcript,
            args.format,
            PipelineSettings(
                query_count=args.queries,
                search_timeframe=args.timeframe,
                search_context=args.context,
            ),
            output_dir=args.output,
            settings=settings,
        )
    )


if __name__ == "__main__":
    main()
