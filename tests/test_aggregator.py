"""Tests for the search-and-enrich pipeline."""

import json

import pytest

from researcher.search.aggregator import SearchAggregator, search_cache_key
from researcher.search.cache import TTLCache
from researcher.search.errors import FetchError, SearchProviderError

from .fakes import FakeClock, FakeFetcher, FakeProvider, make_results


def build(provider, fetcher, **kwargs):
    return SearchAggregator(
        provider=provider,
        fetcher=fetcher,
        search_cache=kwargs.pop("search_cache", TTLCache("search")),
        page_cache=kwargs.pop("page_cache", TTLCache("page")),
        max_concurrent_fetches=kwargs.pop("max_concurrent_fetches", 5),
    )


def test_cache_key_uses_query_and_num_results():
    assert search_cache_key("python asyncio", 5) == "python asyncio:5"


@pytest.mark.asyncio
class TestSearch:

    async def test_results_are_enriched_with_page_text(self, aggregator, provider):
        response = await aggregator.search("python", 3, 8000)

        assert provider.calls == [("python", 3)]
        assert [r.url for r in response.results] == [r.url for r in provider.results]
        first = response.results[0]
        assert first.title == "Result number 0"
        assert first.snippet == "snippet 0"
        assert first.content == "content of https://www.site0.com/page"
        assert first.source_name == "site0"

    async def test_serialized_shape(self, aggregator):
        response = await aggregator.search("python", 1, 8000)

        payload = response.to_dict()
        assert list(payload) == ["results"]
        assert set(payload["results"][0]) == {"title", "snippet", "url", "content", "sourceName"}

    async def test_empty_results_serialize_as_empty_list(self):
        aggregator = build(FakeProvider(results=[]), FakeFetcher())

        response = await aggregator.search("nothing", 10, 8000)

        assert response.results == ()
        assert response.to_dict() == {"results": []}
        assert json.loads(response.model_dump_json(by_alias=True)) == {"results": []}

    async def test_order_preserved_when_fetches_finish_out_of_order(self):
        results = make_results(6)
        # Earlier results are slower, so completion order is the reverse
        delays = {r.url: 0.06 - i * 0.01 for i, r in enumerate(results)}
        fetcher = FakeFetcher(delays=delays)
        aggregator = build(FakeProvider(results=results), fetcher)

        response = await aggregator.search("ordering", 6, 8000)

        assert [r.url for r in response.results] == [r.url for r in results]
        assert [r.content for r in response.results] == [f"content of {r.url}" for r in results]

    async def test_fan_out_never_exceeds_five_fetches(self):
        fetcher = FakeFetcher(default_delay=0.02)
        aggregator = build(FakeProvider(results=make_results(25)), fetcher)

        response = await aggregator.search("many", 25, 8000)

        assert len(response.results) == 25
        assert len(fetcher.calls) == 25
        assert fetcher.max_in_flight == 5

    async def test_custom_concurrency_bound(self):
        fetcher = FakeFetcher(default_delay=0.02)
        aggregator = build(FakeProvider(results=make_results(10)), fetcher, max_concurrent_fetches=2)

        await aggregator.search("many", 10, 8000)

        assert fetcher.max_in_flight == 2

    async def test_failed_fetch_falls_back_to_snippet(self):
        results = make_results(4)
        fetcher = FakeFetcher(failures=[results[1].url, results[3].url])
        aggregator = build(FakeProvider(results=results), fetcher)

        response = await aggregator.search("flaky", 4, 8000)

        assert len(response.results) == 4
        assert response.results[1].content == "snippet 1"
        assert response.results[3].content == "snippet 3"
        assert response.results[0].content == f"content of {results[0].url}"

    async def test_undecodable_page_falls_back_to_snippet(self):
        results = make_results(1)
        fetcher = FakeFetcher(content_types={results[0].url: "text/html; charset=no-such-charset"})
        aggregator = build(FakeProvider(results=results), fetcher)

        response = await aggregator.search("bad charset", 1, 8000)

        assert response.results[0].content == "snippet 0"
        assert aggregator.page_cache.get(results[0].url) is None

    async def test_content_is_truncated(self):
        results = make_results(1)
        fetcher = FakeFetcher(pages={results[0].url: "alpha beta gamma"})
        aggregator = build(FakeProvider(results=results), fetcher)

        response = await aggregator.search("short", 1, 9)

        assert response.results[0].content == "alpha"

    async def test_provider_failure_aborts_the_call(self):
        fetcher = FakeFetcher()
        aggregator = build(FakeProvider(error="search request failed with status: 503"), fetcher)

        with pytest.raises(SearchProviderError, match="search failed: search request failed with status: 503"):
            await aggregator.search("down", 5, 8000)

        assert fetcher.calls == []
        assert len(aggregator.search_cache) == 0


@pytest.mark.asyncio
class TestCaching:

    async def test_repeated_search_is_served_from_cache(self, aggregator, provider, fetcher):
        first = await aggregator.search("python", 3, 8000)
        second = await aggregator.search("python", 3, 8000)

        assert second is first
        assert second.model_dump_json(by_alias=True) == first.model_dump_json(by_alias=True)
        assert len(provider.calls) == 1
        assert len(fetcher.calls) == 3

    async def test_cached_response_cannot_be_altered_by_callers(self, aggregator, provider):
        first = await aggregator.search("q", 3, 100)

        with pytest.raises(AttributeError):
            first.results.clear()
        first.to_dict()["results"].clear()

        second = await aggregator.search("q", 3, 100)
        assert len(second.results) == 3
        assert len(provider.calls) == 1

    async def test_different_num_results_is_a_different_entry(self, aggregator, provider, fetcher):
        await aggregator.search("python", 3, 8000)
        await aggregator.search("python", 2, 8000)

        assert provider.calls == [("python", 3), ("python", 2)]
        # Page texts are reused
        assert len(fetcher.calls) == 3

    async def test_max_content_length_is_not_part_of_the_key(self):
        results = make_results(1)
        long_text = " ".join(["word"] * 1000)
        fetcher = FakeFetcher(pages={results[0].url: long_text})
        provider = FakeProvider(results=results)
        aggregator = build(provider, fetcher)

        first = await aggregator.search("x", 5, 1000)
        second = await aggregator.search("x", 5, 9000)

        assert second is first
        assert len(second.results[0].content) <= 1000
        assert len(provider.calls) == 1

    async def test_page_cache_shared_between_queries(self):
        results = make_results(2)
        fetcher = FakeFetcher()
        aggregator = build(FakeProvider(results=results), fetcher)

        await aggregator.search("first query", 2, 8000)
        response = await aggregator.search("second query", 2, 8000)

        assert fetcher.calls == [r.url for r in results]
        assert response.results[1].content == f"content of {results[1].url}"

    async def test_failed_pages_are_retried_on_next_search(self):
        results = make_results(1)
        fetcher = FakeFetcher(failures=[results[0].url])
        aggregator = build(FakeProvider(results=results), fetcher)

        await aggregator.search("q", 1, 8000)
        fetcher.failures.clear()
        response = await aggregator.search("q", 2, 8000)

        assert fetcher.calls == [results[0].url, results[0].url]
        assert response.results[0].content == f"content of {results[0].url}"

    async def test_expired_response_triggers_a_new_search(self):
        clock = FakeClock()
        provider = FakeProvider()
        aggregator = build(
            provider,
            FakeFetcher(),
            search_cache=TTLCache("search", ttl=60, clock=clock),
            page_cache=TTLCache("page", ttl=60, clock=clock),
        )

        await aggregator.search("python", 3, 8000)
        clock.advance(59)
        await aggregator.search("python", 3, 8000)
        assert len(provider.calls) == 1

        clock.advance(1)
        await aggregator.search("python", 3, 8000)
        assert len(provider.calls) == 2

    async def test_separate_aggregators_do_not_share_caches(self):
        provider = FakeProvider()
        first = build(provider, FakeFetcher())
        second = build(provider, FakeFetcher())

        await first.search("python", 3, 8000)
        await second.search("python", 3, 8000)

        assert len(provider.calls) == 2


@pytest.mark.asyncio
class TestFetchPageContent:

    async def test_returns_extracted_text(self, aggregator):
        url = "https://example.com/article"
        aggregator.fetcher.pages[url] = "alpha beta gamma"

        assert await aggregator.fetch_page_content(url, 9) == "alpha"
        assert await aggregator.fetch_page_content(url) == "alpha beta gamma"

    async def test_bypasses_the_page_cache(self, aggregator, fetcher):
        url = "https://example.com/article"
        aggregator.page_cache.put(url, "stale")

        content = await aggregator.fetch_page_content(url)

        assert content == f"content of {url}"
        assert fetcher.calls == [url]

    async def test_errors_propagate(self, aggregator, fetcher):
        url = "https://example.com/broken"
        fetcher.failures.add(url)

        with pytest.raises(FetchError):
            await aggregator.fetch_page_content(url)


@pytest.mark.asyncio
async def test_close_releases_collaborators(aggregator, provider, fetcher):
    await aggregator.close()

    assert provider.closed
    assert fetcher.closed
