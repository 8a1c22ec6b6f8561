import asyncio
import logging
from typing import Optional

from .cache import TTLCache
from .errors import PageContentError, SearchProviderError
from .extractor import ContentExtractor, content_extractor
from .fetcher import ContentFetcher
from .models import EnrichedResult, RawResult, SearchResponse
from .provider import DuckDuckGoProvider, SearchProvider
from ..config.settings import settings
from ..utils.urls import derive_source_name

logger = logging.getLogger(__name__)


def search_cache_key(query: str, num_results: int) -> str:
    # max_content_length is deliberately not part of the key
    return f"{query}:{num_results}"


class SearchAggregator:
    """
    Runs a search and enriches every hit with the text of its page.

    Page fetches run concurrently, at most ``max_concurrent_fetches`` at a
    time per search. Both the assembled responses and the extracted page
    texts are cached; the caches are passed in so that several aggregators
    (or tests) can share or isolate them.
    """

    def __init__(
        self,
        provider: Optional[SearchProvider] = None,
        fetcher: Optional[ContentFetcher] = None,
        extractor: Optional[ContentExtractor] = None,
        search_cache: Optional[TTLCache[SearchResponse]] = None,
        page_cache: Optional[TTLCache[str]] = None,
        max_concurrent_fetches: Optional[int] = None,
    ):
        self.provider = provider or DuckDuckGoProvider()
        self.fetcher = fetcher or ContentFetcher()
        self.extractor = extractor or content_extractor
        self.search_cache: TTLCache[SearchResponse] = (
            search_cache if search_cache is not None else TTLCache("search")
        )
        self.page_cache: TTLCache[str] = (
            page_cache if page_cache is not None else TTLCache("page")
        )
        self.max_concurrent_fetches = (
            max_concurrent_fetches
            if max_concurrent_fetches is not None
            else settings.config.content_extraction.max_concurrent_fetches
        )

    async def search(
        self,
        query: str,
        num_results: int = 10,
        max_content_length: int = 8000,
    ) -> SearchResponse:
        """
        Search and enrich the results with page content.

        Args:
            query: The search query, already validated as non-empty.
            num_results: Upper bound on the number of results.
            max_content_length: Maximum length of each page text.

        Returns:
            The results in provider order. A page that could not be fetched
            carries its snippet as content.

        Raises:
            SearchProviderError: The search provider failed.
        """
        cache_key = search_cache_key(query, num_results)
        cached = self.search_cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for: '{query}'")
            return cached

        logger.info(f"Searching for '{query}' (num_results={num_results})")
        try:
            raw_results = await self.provider.search(query, num_results)
        except SearchProviderError as e:
            logger.error(f"Search failed for '{query}': {e}")
            raise SearchProviderError(f"search failed: {e}") from e

        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)
        enriched = await asyncio.gather(*[
            self._enrich(result, semaphore, max_content_length)
            for result in raw_results
        ])

        response = SearchResponse(results=tuple(enriched))
        self.search_cache.put(cache_key, response)

        logger.info(f"Returning {len(enriched)} results for '{query}'")
        return response

    async def fetch_page_content(self, url: str, max_content_length: int = 8000) -> str:
        """Fetch a single page and return its extracted text.

        Raises:
            PageContentError: The page could not be fetched, decoded or parsed.
        """
        page = await self.fetcher.fetch(url)
        return await asyncio.to_thread(
            self.extractor.extract, page.content, page.content_type, max_content_length
        )

    async def _enrich(
        self,
        result: RawResult,
        semaphore: asyncio.Semaphore,
        max_content_length: int,
    ) -> EnrichedResult:
        content = self.page_cache.get(result.url)

        if content is None:
            try:
                async with semaphore:
                    page = await self.fetcher.fetch(result.url)
                content = await asyncio.to_thread(
                    self.extractor.extract, page.content, page.content_type, max_content_length
                )
            except PageContentError as e:
                logger.warning(f"Falling back to snippet for {result.url}: {e}")
                content = result.snippet
            else:
                self.page_cache.put(result.url, content)

        return EnrichedResult(
            title=result.title,
            snippet=result.snippet,
            url=result.url,
            content=content,
            source_name=derive_source_name(result.title, result.url),
        )

    async def close(self):
        """Release HTTP clients"""
        logger.info("Cleaning up search aggregator resources.")
        await self.fetcher.close()
        await self.provider.close()
