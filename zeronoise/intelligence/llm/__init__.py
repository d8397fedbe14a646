"""Clients for the external completion service."""

from .completion_client import CompletionClient, CompletionResult, parse_completion
from .cascade import ModelAttempt, ModelCascade

__all__ = [
    "CompletionClient",
    "CompletionResult",
    "parse_completion",
    "ModelAttempt",
    "ModelCascade",
]
