"""
Error taxonomy for the intelligence pipeline.

Each error carries the HTTP status the API layer should answer with.
Search-task failures are never raised; they are recorded on the
SearchOutcome they belong to.
"""


class PipelineError(Exception):
    """Base class for errors that abort a pipeline or renderer request."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(PipelineError):
    """A required setting is missing; raised before any stage runs."""

    status_code = 500


class MissingCredential(ConfigurationError):
    """A required external API key is not configured."""

    def __init__(self, env_var: str, purpose: str = ""):
        detail = f" ({purpose})" if purpose else ""
        super().__init__(f"{env_var} not configured{detail}")
        self.env_var = env_var


class InputValidationError(PipelineError):
    """Request input is missing or malformed; no network calls were made."""

    status_code = 400


class EmptyInput(InputValidationError):
    """The aggregate holds no successful search results."""

    def __init__(self, message: str = "No successful search results available"):
        super().__init__(message)


class UpstreamFailure(PipelineError):
    """Completion or audio service failed after any fallback was exhausted."""

    status_code = 502

    def __init__(self, message: str, service: str = "completion", status: int = None):
        super().__init__(message)
        self.service = service
        self.status = status


class MalformedUpstreamResponse(UpstreamFailure):
    """
    The service answered 2xx without the expected payload.
    Text renderers substitute a placeholder instead of raising this;
    the podcast path raises it since there is nothing to voice.
    """
