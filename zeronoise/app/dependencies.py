"""FastAPI dependencies. Tests override these through app.dependency_overrides."""

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..intelligence.pipeline import IntelligencePipeline


def get_app_settings() -> Settings:
    return get_settings()


def get_pipeline(settings: Settings = Depends(get_app_settings)) -> IntelligencePipeline:
    """A fresh pipeline per request; telemetry never outlives it."""
    return IntelligencePipeline.from_settings(settings)
