import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from .errors import SearchProviderError
from .fetcher import browser_user_agent
from .models import RawResult
from ..config.settings import settings
from ..utils.urls import resolve_url

logger = logging.getLogger(__name__)


class SearchProvider(ABC):
    """Turns a query into an ordered list of search hits"""

    @abstractmethod
    async def search(self, query: str, max_results: int) -> List[RawResult]:
        """Return at most ``max_results`` hits, best first.

        Raises:
            SearchProviderError: The engine could not be reached or answered
                with an error status.
        """

    async def close(self):
        pass


class DuckDuckGoProvider(SearchProvider):
    """Scrapes the JavaScript-free DuckDuckGo results page"""

    def __init__(
        self,
        search_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        config = settings.config.search
        self.search_url = search_url or config.search_url
        self.timeout = httpx.Timeout(config.timeout if timeout is None else timeout)
        self.headers = {'User-Agent': browser_user_agent()}

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

    async def search(self, query: str, max_results: int) -> List[RawResult]:
        try:
            response = await self._client.get(
                self.search_url,
                params={'q': query},
                headers=self.headers,
            )
        except httpx.HTTPError as e:
            raise SearchProviderError(f"failed to perform search request: {e}") from e

        if response.status_code >= 300:
            raise SearchProviderError(f"search request failed with status: {response.status_code}")

        results = self.parse_results(response.text, max_results)
        logger.debug(f"DuckDuckGo returned {len(results)} results for '{query}'")
        return results

    @staticmethod
    def parse_results(html_content: str, max_results: int) -> List[RawResult]:
        """Parse DuckDuckGo HTML results"""
        soup = BeautifulSoup(html_content, 'lxml')
        results: List[RawResult] = []

        for block in soup.select('.result'):
            if len(results) >= max_results:
                break

            link = block.select_one('.result__url')
            raw_url = link.get('href') if link is not None else None
            if not raw_url:
                continue

            url = resolve_url(raw_url)
            if not url:
                continue

            title_tag = block.select_one('.result__title')
            snippet_tag = block.select_one('.result__snippet')
            results.append(RawResult(
                title=title_tag.get_text().strip() if title_tag is not None else "",
                snippet=snippet_tag.get_text().strip() if snippet_tag is not None else "",
                url=url
            ))

        return results

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
