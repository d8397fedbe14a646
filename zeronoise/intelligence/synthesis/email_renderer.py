"""Email renderer - stakeholder-ready email digest."""

import re

from ..llm.cascade import ModelCascade
from ..llm.completion_client import CompletionClient
from ..models.artifacts import TextArtifact
from ..models.search import Aggregate
from .base import TextRenderer, corpus_or_notice


# "Subject: x", "**Subject:** x" or "**Subject**: x" on a single line
SUBJECT_LINE = re.compile(r"^\s*(?:\*\*)?\s*subject\s*(?:\*\*)?\s*:\s*(?:\*\*)?\s*(.*)$", re.IGNORECASE)


class EmailRenderer(TextRenderer):
    """
    Complete email (subject line + body with headings), max ~500 words,
    addressed to a named recipient.
    """

    FORMAT = "email"
    LABEL = "Email brief"
    WORD_BUDGET = 500

    EMAIL_PROMPT = """Create a professional email brief from these intelligence results, addressed to: {recipient}.

INTELLIGENCE RESULTS:
{corpus}

EMAIL STRUCTURE:
- First line exactly in the form "Subject: <concise, attention-grabbing subject>"
- Greeting addressed to {recipient}
- Brief opening paragraph explaining the purpose
- Key findings organized under clear headings
- Actionable insights or recommendations
- Professional closing

EMAIL REQUIREMENTS:
- Professional business tone
- Easy to scan and read on mobile
- Highlight the most important information first
- Use clear headings and bullet points
- Keep to {words} words maximum
- Focus on recent developments and changes"""

    def __init__(self, client: CompletionClient, model: str = "gpt-4.1-mini"):
        super().__init__(client, ModelCascade.single(model, temperature=0.3))

    def build_prompt(self, aggregate: Aggregate, recipient: str = "team", **options) -> str:
        return self.EMAIL_PROMPT.format(
            corpus=corpus_or_notice(aggregate),
            recipient=recipient or "team",
            words=self.WORD_BUDGET,
        )

    async def render(self, aggregate: Aggregate, recipient: str = "team", **options) -> TextArtifact:
        artifact = await super().render(aggregate, recipient=recipient, **options)
        text = ensure_subject_line(artifact.text, recipient or "team")
        if text != artifact.text:
            artifact = artifact.model_copy(update={"text": text})
        return artifact


def ensure_subject_line(text: str, recipient: str) -> str:
    """
    Make the first line a plain `Subject: ...` line.

    A bolded or oddly cased subject on the first non-blank line is
    rewritten; otherwise a default subject is prepended.
    """
    body = text.strip()
    first, _, rest = body.partition("\n")
    match = SUBJECT_LINE.match(first)
    if match is None:
        return f"Subject: Intelligence update for {recipient}\n\n{body}"

    subject = match.group(1).strip().strip("*").strip() or f"Intelligence update for {recipient}"
    return f"Subject: {subject}\n{rest}" if rest else f"Subject: {subject}"
