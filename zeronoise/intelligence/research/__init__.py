"""Query extraction, concurrent search and aggregation."""

from .query_extractor import (
    Decoded,
    ExtractionResult,
    Fallback,
    QueryExtractor,
    decode_queries,
    find_json_object,
)
from .search_executor import SearchExecutor
from .aggregator import ResultAggregator

__all__ = [
    "QueryExtractor",
    "ExtractionResult",
    "Decoded",
    "Fallback",
    "decode_queries",
    "find_json_object",
    "SearchExecutor",
    "ResultAggregator",
]
