"""
Search and page enrichment

This package contains everything needed to:
- Query the upstream search engine
- Fetch the result pages
- Extract the readable text of those pages
- Cache search responses and page texts
"""

from .aggregator import SearchAggregator
from .cache import TTLCache
from .errors import (
    ResearcherError,
    SearchProviderError,
    PageContentError,
    FetchError,
    DecodeError,
    ParseError,
)
from .extractor import ContentExtractor
from .fetcher import ContentFetcher
from .models import RawResult, EnrichedResult, SearchResponse, FetchedPage
from .provider import SearchProvider, DuckDuckGoProvider

__all__ = [
    "SearchAggregator",
    "TTLCache",
    "ContentExtractor",
    "ContentFetcher",
    "SearchProvider",
    "DuckDuckGoProvider",
    "RawResult",
    "EnrichedResult",
    "SearchResponse",
    "FetchedPage",
    "ResearcherError",
    "SearchProviderError",
    "PageContentError",
    "FetchError",
    "DecodeError",
    "ParseError",
]
