"""Search executor - runs every query as an isolated search task."""

import logging
import time
from typing import Optional

from ..concurrency import fan_out_join
from ..llm.completion_client import CompletionClient
from ..models.search import PipelineSettings, Query, SearchOutcome
from ..telemetry import elapsed_ms


logger = logging.getLogger(__name__)


class SearchExecutor:
    """
    Executes queries against the search-augmented completion service.

    All queries are launched together and joined; a failing search becomes
    a SearchOutcome with success=False and never affects its siblings.
    Outcomes come back in query order, one per query.
    """

    SEARCH_PROMPT = """Conduct intelligence gathering to surface the most recent developments for this query.

QUERY: {query}
INTENT: {intent}

RECENCY-FOCUSED INTELLIGENCE PRINCIPLES:

1. PRIORITIZE FRESH SOURCES:
   - Breaking news and recent announcements
   - Latest releases, updates, and launches
   - Recent expert commentary and analysis

2. TEMPORAL PRIORITY:
   - STRONGLY prioritize information from the last {timeframe}
   - Surface what's changed, what's new, what's different
   - Identify emerging patterns and trends

3. INTELLIGENCE EXTRACTION:
   - Latest developments and announcements
   - Current expert opinions and reactions
   - Recent data points and evidence
   - Emerging challenges or opportunities

4. RECENCY FILTERS:
   - Favor: recent posts, latest updates, current discussions
   - Avoid: outdated information, stale content

Return the freshest intelligence with clear recency indicators and source attribution."""

    def __init__(
        self,
        client: CompletionClient,
        model: str = "gpt-4o-mini-search-preview",
        max_concurrency: Optional[int] = 8,
        task_timeout: Optional[float] = 60.0,
    ):
        self.client = client
        self.model = model
        self.max_concurrency = max_concurrency
        self.task_timeout = task_timeout

    async def execute(
        self,
        queries: list[Query],
        settings: PipelineSettings,
    ) -> list[SearchOutcome]:
        """Run all queries and wait for every one of them to settle."""
        logger.info(f"Starting {len(queries)} parallel searches")
        started = time.perf_counter()

        async def search_one(query: Query) -> SearchOutcome:
            return await self._search(query, settings)

        outcomes = await fan_out_join(
            queries,
            search_one,
            on_error=self._failed_outcome,
            max_concurrency=self.max_concurrency,
            timeout=self.task_timeout,
        )

        successful = sum(1 for o in outcomes if o.success)
        logger.info(
            f"All searches completed in {elapsed_ms(started)}ms "
            f"({successful}/{len(outcomes)} successful)"
        )
        return outcomes

    async def search_single(self, query: Query, settings: PipelineSettings) -> SearchOutcome:
        """One isolated search, outside a pipeline run."""
        outcomes = await self.execute([query], settings)
        return outcomes[0]

    async def _search(self, query: Query, settings: PipelineSettings) -> SearchOutcome:
        started = time.perf_counter()
        prompt = self.SEARCH_PROMPT.format(
            query=query.text,
            intent=query.intent,
            timeframe=settings.search_timeframe,
        )

        result = await self.client.search(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            search_context_size=settings.search_context,
        )
        duration = elapsed_ms(started)
        response = result.content or ""

        logger.info(f"Search '{query.text[:60]}' completed in {duration}ms ({len(response)} chars)")
        return SearchOutcome.succeeded(
            query,
            response=response,
            duration_ms=duration,
            token_usage=result.usage,
        )

    @staticmethod
    def _failed_outcome(query: Query, error: BaseException, duration_ms: int) -> SearchOutcome:
        logger.error(f"Search '{query.text[:60]}' failed after {duration_ms}ms: {error}")
        return SearchOutcome.failed(query, error=str(error), duration_ms=duration_ms)
