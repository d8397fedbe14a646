"""Detailed report renderer - long-form strategic research report."""

from ..llm.cascade import ModelAttempt, ModelCascade
from ..llm.completion_client import CompletionClient
from ..models.search import Aggregate
from .base import TextRenderer, corpus_or_notice


class DetailedReportRenderer(TextRenderer):
    """
    Comprehensive 1500-2000 word report with a fixed outline.

    Tries the capable model first and falls back once to the cheaper
    model on any upstream failure.
    """

    FORMAT = "report"
    LABEL = "Detailed report"
    SECTIONS = [
        "Executive Summary",
        "Detailed Analysis",
        "Strategic Implications",
        "Recommendations",
        "Source Bibliography",
    ]

    PRIMARY_SYSTEM_PROMPT = (
        "You are a senior partner at a strategy consultancy specializing in strategic "
        "intelligence and market analysis. You excel at connecting disparate trends "
        "into coherent strategic narratives."
    )
    FALLBACK_SYSTEM_PROMPT = (
        "You are a senior strategic analyst creating comprehensive intelligence reports "
        "for executive audiences."
    )

    REPORT_PROMPT = """Create a comprehensive research report from these intelligence results. This should be a detailed, well-structured analysis suitable for strategic decision-making.

REPORT STYLE: {style}

INTELLIGENCE RESULTS:
{corpus}

REPORT STRUCTURE:

## Executive Summary
- Overview of key findings and their significance
- Primary trends and developments identified

## Detailed Analysis
### Recent Developments
### Market Intelligence
### Technical Analysis
### Expert Insights

## Strategic Implications
- What these developments mean for stakeholders
- Opportunities and risks identified

## Recommendations
- Immediate action items
- Medium-term strategic moves
- Areas requiring continued monitoring

## Source Bibliography
- Categorized list of all sources
- Recency and reliability indicators

REPORT REQUIREMENTS:
- {min_words}-{max_words} words
- In-depth analysis with supporting evidence
- Clear structure with numbered sections
- Proper attribution and source citation"""

    MIN_WORDS = 1500
    MAX_WORDS = 2000

    def __init__(
        self,
        client: CompletionClient,
        model: str = "gpt-4o",
        fallback_model: str = "gpt-4o-mini",
        max_tokens: int = 6000,
    ):
        cascade = ModelCascade.two_tier(
            ModelAttempt(
                model=model,
                temperature=0.2,
                max_tokens=max_tokens,
                system_prompt=self.PRIMARY_SYSTEM_PROMPT,
            ),
            ModelAttempt(
                model=fallback_model,
                temperature=0.2,
                max_tokens=max_tokens,
                system_prompt=self.FALLBACK_SYSTEM_PROMPT,
            ),
        )
        super().__init__(client, cascade)

    def build_prompt(self, aggregate: Aggregate, report_style: str = "comprehensive", **options) -> str:
        return self.REPORT_PROMPT.format(
            style=report_style or "comprehensive",
            corpus=corpus_or_notice(aggregate),
            min_words=self.MIN_WORDS,
            max_words=self.MAX_WORDS,
        )
