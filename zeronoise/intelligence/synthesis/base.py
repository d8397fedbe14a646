"""Shared behaviour for the text renderers."""

import logging
import time

from ..errors import MissingCredential
from ..llm.cascade import ModelAttempt, ModelCascade
from ..llm.completion_client import CompletionClient, CompletionResult
from ..models.artifacts import TextArtifact
from ..models.search import Aggregate
from ..telemetry import elapsed_ms


logger = logging.getLogger(__name__)


PLACEHOLDER_TEXT = "[{label} unavailable: the model returned no content]"


class TextRenderer:
    """
    Renders an Aggregate into one text artifact through a model cascade.

    Subclasses set FORMAT, LABEL and build_prompt(). The completion
    credential is checked before any network call.
    """

    FORMAT = "text"
    LABEL = "Text"

    def __init__(self, client: CompletionClient, cascade: ModelCascade):
        self.client = client
        self.cascade = cascade

    def build_prompt(self, aggregate: Aggregate, **options) -> str:
        raise NotImplementedError

    async def render(self, aggregate: Aggregate, **options) -> TextArtifact:
        if not self.client.is_configured:
            raise MissingCredential("OPENAI_API_KEY", f"required for {self.FORMAT} rendering")

        started = time.perf_counter()
        prompt = self.build_prompt(aggregate, **options)
        logger.info(
            f"Generating {self.FORMAT} from {aggregate.entry_count} successful searches..."
        )

        async def call(attempt: ModelAttempt) -> CompletionResult:
            messages = []
            if attempt.system_prompt:
                messages.append({"role": "system", "content": attempt.system_prompt})
            messages.append({"role": "user", "content": prompt})
            return await self.client.complete(
                model=attempt.model,
                messages=messages,
                temperature=attempt.temperature,
                max_tokens=attempt.max_tokens,
            )

        result = await self.cascade.run(call)
        text, placeholder_used = self._content_or_placeholder(result)
        duration = elapsed_ms(started)

        logger.info(f"{self.LABEL} generated in {duration}ms ({len(text)} chars)")
        return TextArtifact(
            format=self.FORMAT,
            model=result.model,
            text=text,
            render_duration_ms=duration,
            token_usage=result.usage,
            input_entries=aggregate.entry_count,
            total_outcomes=aggregate.total_outcomes,
            placeholder_used=placeholder_used,
        )

    def _content_or_placeholder(self, result: CompletionResult) -> tuple[str, bool]:
        if result.is_malformed:
            logger.warning(f"{self.LABEL}: upstream reply had no content, using placeholder")
            return PLACEHOLDER_TEXT.format(label=self.LABEL), True
        return result.content, False


def corpus_or_notice(aggregate: Aggregate) -> str:
    """Corpus text, or a notice the model can work with when nothing succeeded."""
    if aggregate.is_empty:
        return "(No successful search results were available.)"
    return aggregate.corpus
