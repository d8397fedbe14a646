"""
Pipeline API - research run plus one endpoint per output format.

Format endpoints take the `searchResults` array from a previous run and
re-derive their own aggregate; they never extract or search.
"""

import base64
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from ...intelligence.errors import InputValidationError
from ...intelligence.models.artifacts import PodcastArtifact, TextArtifact
from ...intelligence.models.search import PipelineSettings, Query, SearchOutcome, WireModel
from ...intelligence.pipeline import IntelligencePipeline
from ..dependencies import get_pipeline

router = APIRouter()


class RunRequest(PipelineSettings):
    transcript: Optional[str] = None

    def pipeline_settings(self) -> PipelineSettings:
        return PipelineSettings(**self.model_dump(exclude={"transcript"}))


class SearchRequest(PipelineSettings):
    query: Optional[str] = None
    intent: str = ""


class FormatRequest(WireModel):
    search_results: Optional[list[SearchOutcome]] = None

    def outcomes(self) -> list[SearchOutcome]:
        if self.search_results is None:
            raise InputValidationError("Search results are required")
        return self.search_results


class EmailRequest(FormatRequest):
    recipient: str = "team"


class ReportRequest(FormatRequest):
    report_style: str = "comprehensive"


class PodcastRequest(FormatRequest):
    podcast_name: str = "Zero Noise Intelligence Brief"
    podcast_tagline: str = "Latest intelligence and developments"
    tts_model: str = "gemini"
    word_count: int = Field(default=300, ge=50, le=5000)
    conversation_style: str = "engaging,informative,current"
    creativity: float = Field(default=0.7, ge=0.0, le=1.0)
    user_instructions: Optional[str] = None


def text_response(field: str, timing_key: str, tokens_key: str, artifact: TextArtifact) -> dict:
    """Response body shared by the text formats."""
    usage = artifact.token_usage
    return {
        "success": True,
        field: artifact.text,
        "model": artifact.model,
        "placeholderUsed": artifact.placeholder_used,
        "performance": {
            timing_key: artifact.render_duration_ms,
            "inputSearches": artifact.input_entries,
            "totalSearches": artifact.total_outcomes,
            "wordCount": artifact.word_count,
        },
        "usage": {tokens_key: usage.total_tokens if usage else 0},
    }


@router.post("/run")
async def run_pipeline(
    request: RunRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    """Transcript to extracted queries, search outcomes and aggregate."""
    result = await pipeline.run(request.transcript, request.pipeline_settings())
    return result.to_response()


@router.post("/search")
async def search(
    request: SearchRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    """Run a single search outside a pipeline run."""
    if not request.query or not request.query.strip():
        raise InputValidationError("Query is required and must be a non-empty string")

    settings = PipelineSettings(**request.model_dump(exclude={"query", "intent"}))
    outcome = await pipeline.search(Query(query=request.query, intent=request.intent), settings)
    return {
        "success": outcome.success,
        "result": outcome.model_dump(by_alias=True, exclude_none=True),
    }


@router.get("/formats")
async def list_formats(pipeline: IntelligencePipeline = Depends(get_pipeline)):
    return {"formats": pipeline.catalogue()}


@router.post("/format/brief")
async def format_brief(
    request: FormatRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    artifact = await pipeline.render("brief", request.outcomes())
    return text_response("brief", "briefGenerationTime", "briefTokens", artifact)


@router.post("/format/email")
async def format_email(
    request: EmailRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    artifact = await pipeline.render("email", request.outcomes(), recipient=request.recipient)
    return text_response("emailBrief", "emailGenerationTime", "emailTokens", artifact)


@router.post("/format/report")
async def format_report(
    request: ReportRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    artifact = await pipeline.render("report", request.outcomes(), report_style=request.report_style)
    return text_response("detailedReport", "reportGenerationTime", "reportTokens", artifact)


@router.post("/format/podcast")
async def format_podcast(
    request: PodcastRequest,
    pipeline: IntelligencePipeline = Depends(get_pipeline),
):
    artifact: PodcastArtifact = await pipeline.render(
        "podcast",
        request.outcomes(),
        podcast_name=request.podcast_name,
        podcast_tagline=request.podcast_tagline,
        tts_model=request.tts_model,
        word_count=request.word_count,
        conversation_style=request.conversation_style,
        creativity=request.creativity,
        user_instructions=request.user_instructions,
    )
    return {
        "success": True,
        "audioData": base64.b64encode(artifact.audio).decode("ascii"),
        "audioSize": artifact.audio_size,
        "mimeType": artifact.mime_type,
        "transcript": artifact.transcript,
        "sourceText": artifact.source_text,
        "podcastName": artifact.podcast_name,
        "podcastTagline": artifact.podcast_tagline,
        "settings": artifact.settings,
        "performance": {
            "podcastGenerationTime": artifact.render_duration_ms,
            "inputSearches": artifact.input_entries,
            "totalSearches": artifact.total_outcomes,
        },
        "usage": {
            "podcastTokens": artifact.token_usage.total_tokens if artifact.token_usage else 0,
            "scriptModel": artifact.model,
        },
    }
