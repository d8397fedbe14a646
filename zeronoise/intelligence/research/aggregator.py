"""Result aggregator - joins successful search outcomes into a rendering corpus."""

import logging

from ..models.search import Aggregate, SearchOutcome


logger = logging.getLogger(__name__)


def format_block(outcome: SearchOutcome) -> str:
    return f"QUERY: {outcome.query}\nINTENT: {outcome.intent}\nRESULT:\n{outcome.response}\n---"


class ResultAggregator:
    """
    Filters search outcomes down to the successful ones, in order,
    and joins them into the corpus every renderer reads.

    Pure: no network calls, and no failure mode beyond an empty result.
    """

    def aggregate(self, outcomes: list[SearchOutcome]) -> Aggregate:
        entries = [o for o in outcomes if o.success]
        corpus = "\n\n".join(format_block(o) for o in entries)

        logger.info(f"Aggregated {len(entries)}/{len(outcomes)} successful search results")
        return Aggregate(entries=entries, corpus=corpus, total_outcomes=len(outcomes))
