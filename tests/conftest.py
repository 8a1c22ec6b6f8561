"""Shared fixtures for the search pipeline tests."""

import pytest

from researcher.search.aggregator import SearchAggregator
from researcher.search.cache import TTLCache

from .fakes import FakeFetcher, FakeProvider


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def aggregator(provider, fetcher):
    return SearchAggregator(
        provider=provider,
        fetcher=fetcher,
        search_cache=TTLCache("search"),
        page_cache=TTLCache("page"),
        max_concurrent_fetches=5,
    )
