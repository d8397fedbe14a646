"""Model-fallback cascade shared by every renderer."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from ..errors import UpstreamFailure


logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class ModelAttempt:
    """One (model, params) pair in a cascade."""
    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    system_prompt: Optional[str] = None


class ModelCascade:
    """
    Ordered list of model attempts.

    Attempts run in sequence; an UpstreamFailure moves on to the next
    attempt, anything else propagates. When every attempt fails the last
    UpstreamFailure is raised.
    """

    def __init__(self, attempts: list[ModelAttempt]):
        if not attempts:
            raise ValueError("A cascade needs at least one model attempt")
        self.attempts = list(attempts)

    @classmethod
    def single(cls, model: str, **params) -> "ModelCascade":
        return cls([ModelAttempt(model=model, **params)])

    @classmethod
    def two_tier(
        cls,
        primary: ModelAttempt,
        fallback: ModelAttempt,
    ) -> "ModelCascade":
        return cls([primary, fallback])

    @property
    def models(self) -> list[str]:
        return [a.model for a in self.attempts]

    async def run(self, call: Callable[[ModelAttempt], Awaitable[R]]) -> R:
        last_error: Optional[UpstreamFailure] = None

        for i, attempt in enumerate(self.attempts):
            try:
                return await call(attempt)
            except UpstreamFailure as e:
                last_error = e
                if i + 1 < len(self.attempts):
                    logger.warning(
                        f"{attempt.model} failed ({e.message}), "
                        f"falling back to {self.attempts[i + 1].model}"
                    )

        logger.error(f"All models failed: {', '.join(self.models)}")
        raise last_error
