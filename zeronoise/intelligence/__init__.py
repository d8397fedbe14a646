"""
Intelligence pipeline: transcript -> queries -> concurrent searches ->
aggregate -> brief, email, report or podcast.
"""

from .errors import (
    ConfigurationError,
    EmptyInput,
    InputValidationError,
    MalformedUpstreamResponse,
    MissingCredential,
    PipelineError,
    UpstreamFailure,
)
from .pipeline import FORMATS, IntelligencePipeline, PipelineResult
from .telemetry import PipelineTelemetry

__all__ = [
    "IntelligencePipeline",
    "PipelineResult",
    "PipelineTelemetry",
    "FORMATS",
    "PipelineError",
    "ConfigurationError",
    "MissingCredential",
    "InputValidationError",
    "EmptyInput",
    "UpstreamFailure",
    "MalformedUpstreamResponse",
]
