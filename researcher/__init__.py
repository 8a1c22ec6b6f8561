"""
Researcher - search-aggregation proxy

Runs a web search and enriches every result with the cleaned, truncated
text of its page, returned as a single JSON payload.

Main components:
- search: provider, fetcher, extractor, caches and the aggregator
- utils: URL helpers
- config: centralized configuration
"""

__version__ = "1.0.0"

from .search.aggregator import SearchAggregator
from .search.models import SearchResponse, EnrichedResult

__all__ = [
    "SearchAggregator",
    "SearchResponse",
    "EnrichedResult",
    "__version__",
]
