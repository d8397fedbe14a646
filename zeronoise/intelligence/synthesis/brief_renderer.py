"""Brief renderer - a short intelligence brief readable in two minutes."""

from ..llm.cascade import ModelCascade
from ..llm.completion_client import CompletionClient
from ..models.search import Aggregate
from .base import TextRenderer, corpus_or_notice


class BriefRenderer(TextRenderer):
    """Concise brief, max ~300 words, under four fixed headers."""

    FORMAT = "brief"
    LABEL = "Brief"
    WORD_BUDGET = 300
    SECTIONS = ["Key Developments", "Current Status", "Notable Changes", "Next Steps"]

    BRIEF_PROMPT = """Create a concise intelligence brief from these search results. Focus on the most important recent developments and key insights.

INTELLIGENCE RESULTS:
{corpus}

BRIEF FORMAT:
- **Key Developments**: 2-3 most significant recent findings
- **Current Status**: What's happening now
- **Notable Changes**: What's new or different
- **Next Steps**: What to watch for

BRIEF REQUIREMENTS:
- Keep it concise (max {words} words)
- Lead with the most impactful information
- Use bullet points for easy scanning
- Emphasize recency and changes
- Do not write an email: no subject line, greeting or sign-off

Generate a focused intelligence brief that someone could read in under 2 minutes."""

    def __init__(self, client: CompletionClient, model: str = "gpt-4.1-mini"):
        super().__init__(client, ModelCascade.single(model, temperature=0.2))

    def build_prompt(self, aggregate: Aggregate, **options) -> str:
        return self.BRIEF_PROMPT.format(
            corpus=corpus_or_notice(aggregate),
            words=self.WORD_BUDGET,
        )
