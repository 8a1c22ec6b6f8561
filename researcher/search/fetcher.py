import httpx
import logging
from typing import Dict, Optional
from fake_useragent import UserAgent

from .errors import FetchError
from .models import FetchedPage
from ..config.settings import settings, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


def browser_user_agent() -> str:
    """Configured User-Agent, or a random real browser one"""
    if settings.config.search.user_agent:
        return settings.config.search.user_agent
    return UserAgent(fallback=DEFAULT_USER_AGENT).random


class ContentFetcher:
    """Downloads result pages over a shared httpx client"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_content_size: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        extraction = settings.config.content_extraction
        self.timeout = httpx.Timeout(extraction.fetch_timeout if timeout is None else timeout)
        self.max_content_size = extraction.max_page_bytes if max_content_size is None else max_content_size

        # Default headers to avoid bot detection
        self.default_headers: Dict[str, str] = {
            'User-Agent': browser_user_agent(),
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
        }

        # Headers go on each request so injected clients send them too
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch ``url``, failing on transport errors and any status >= 300

        The body is read incrementally and cut off at ``max_content_size``.
        """
        try:
            async with self._client.stream("GET", url, headers=self.default_headers) as response:
                if response.status_code >= 300:
                    raise FetchError(f"status code error: {response.status_code}")

                content = await self._read_capped(response, url)
                final_url = str(response.url)
                content_type = response.headers.get('Content-Type', '')
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"failed to fetch {url}: {e}") from e

        return FetchedPage(url=final_url, content=content, content_type=content_type)

    async def _read_capped(self, response: httpx.Response, url: str) -> bytes:
        chunks = []
        size = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size >= self.max_content_size:
                break

        content = b"".join(chunks)
        if len(content) > self.max_content_size:
            content = content[:self.max_content_size]
            logger.warning(f"Content truncated for {url}")
        return content

    async def close(self):
        """Close the HTTP client if this fetcher created it"""
        if self._owns_client:
            await self._client.aclose()
