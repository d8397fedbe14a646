"""
Startup Validation Module for the intelligence pipeline.

Checks the credentials each external service needs and reports which
features are available, degraded or unavailable.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum

from .settings import Settings

logger = logging.getLogger(__name__)


class ServiceStatus(Enum):
    """Status of a validated service."""
    AVAILABLE = "available"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


@dataclass
class ValidationResult:
    """Result of a single validation check."""
    service: str
    status: ServiceStatus
    message: str
    required: bool = True
    details: Optional[Dict[str, Any]] = None


@dataclass
class StartupValidation:
    """Complete startup validation results."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    services: Dict[str, ValidationResult] = field(default_factory=dict)

    def add_result(self, result: ValidationResult):
        """Add a validation result."""
        self.services[result.service] = result

        if result.status == ServiceStatus.UNAVAILABLE:
            if result.required:
                self.is_valid = False
                self.errors.append(f"[{result.service}] {result.message}")
            else:
                self.warnings.append(f"[{result.service}] {result.message}")
        elif result.status == ServiceStatus.DEGRADED:
            self.warnings.append(f"[{result.service}] {result.message}")

    def log_summary(self):
        """Log one line per service, then errors and warnings."""
        for service, result in self.services.items():
            logger.info(f"{service}: {result.status.value}")
        for error in self.errors:
            logger.error(error)
        for warning in self.warnings:
            logger.warning(warning)
        if self.is_valid:
            logger.info("Startup validation passed")
        else:
            logger.error("Startup validation failed - pipeline requests will be rejected")

    def to_dict(self) -> dict:
        return {
            "valid": self.is_valid,
            "services": {
                name: {"status": r.status.value, "message": r.message}
                for name, r in self.services.items()
            },
        }


def validate_completion_service(settings: Settings) -> ValidationResult:
    """The completion service powers extraction, search and text rendering."""
    if not settings.openai_api_key:
        return ValidationResult(
            service="Completion API",
            status=ServiceStatus.UNAVAILABLE,
            message="OPENAI_API_KEY not set. Extraction, search and text formats will not work.",
            required=True,
        )

    if len(settings.openai_api_key) < 20:
        return ValidationResult(
            service="Completion API",
            status=ServiceStatus.UNAVAILABLE,
            message="OPENAI_API_KEY appears to be invalid (too short).",
            required=True,
        )

    return ValidationResult(
        service="Completion API",
        status=ServiceStatus.AVAILABLE,
        message=f"Completion service configured ({settings.openai_base_url})",
        details={"search_model": settings.search_model},
    )


def validate_gemini(settings: Settings) -> ValidationResult:
    """Gemini writes and voices podcast dialogue."""
    if not settings.gemini_api_key:
        return ValidationResult(
            service="Gemini API",
            status=ServiceStatus.DEGRADED,
            message="GEMINI_API_KEY not set. Podcast generation disabled.",
            required=False,
        )

    return ValidationResult(
        service="Gemini API",
        status=ServiceStatus.AVAILABLE,
        message="Gemini API configured (podcast dialogue + TTS)",
        details={"tts_model": settings.tts_model},
    )


def validate_elevenlabs(settings: Settings) -> ValidationResult:
    """ElevenLabs is an optional podcast voice provider."""
    if not settings.elevenlabs_api_key:
        return ValidationResult(
            service="ElevenLabs",
            status=ServiceStatus.DEGRADED,
            message="ELEVENLABS_API_KEY not set. ElevenLabs voices unavailable.",
            required=False,
        )

    return ValidationResult(
        service="ElevenLabs",
        status=ServiceStatus.AVAILABLE,
        message="ElevenLabs configured",
    )


def run_startup_validation(settings: Settings, log_summary: bool = True) -> StartupValidation:
    """
    Run complete startup validation.

    Args:
        settings: Application settings to check
        log_summary: Log the validation summary

    Returns:
        StartupValidation with all results
    """
    validation = StartupValidation()

    validation.add_result(validate_completion_service(settings))
    validation.add_result(validate_gemini(settings))
    validation.add_result(validate_elevenlabs(settings))

    if log_summary:
        validation.log_summary()

    return validation
