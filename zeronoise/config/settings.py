"""
Configuration settings for the Zero Noise intelligence pipeline
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Completion service (OpenAI-compatible)
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"

    # Google Gemini (podcast dialogue + TTS)
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )

    # ElevenLabs (alternative podcast voices)
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_analyst: str = "pNInz6obpgDQGcFmaJgB"  # Adam
    elevenlabs_voice_commentator: str = "EXAVITQu4vr4xnSDxMaL"  # Bella

    # Models
    extraction_model: str = "gpt-4.1-mini"
    search_model: str = "gpt-4o-mini-search-preview"
    brief_model: str = "gpt-4.1-mini"
    email_model: str = "gpt-4.1-mini"
    report_model: str = "gpt-4o"
    report_fallback_model: str = "gpt-4o-mini"
    podcast_script_model: str = "gemini-2.5-flash"
    podcast_script_fallback_model: str = "gemini-2.0-flash"
    tts_model: str = "gemini-2.5-flash-preview-tts"

    # Transport
    request_timeout_seconds: float = 120.0
    http_retries: int = 2

    # Search fan-out
    search_concurrency: int = 8
    search_task_timeout_seconds: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    return Settings()
