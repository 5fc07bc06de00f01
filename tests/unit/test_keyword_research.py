"""Unit tests for keyword research over SEMrush and stored results."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from contentlab.collectors.semrush import KeywordData
from contentlab.core.exceptions import InvalidRequestError, KeywordSourceError, PersistenceError
from contentlab.services import KeywordResearchService


def _keywords(count: int) -> list[KeywordData]:
    return [KeywordData(keyword=f"keyword {i}", volume=100 * i) for i in range(count)]


@pytest.fixture
def collector():
    collector = MagicMock()
    collector.fetch_keywords = AsyncMock(return_value=_keywords(40))
    return collector


@pytest.fixture
def store():
    store = MagicMock()
    store.get.return_value = []
    store.replace.return_value = 40
    return store


class TestKeywordResearch:
    """Test the read-through search."""

    @pytest.mark.asyncio
    async def test_served_from_store_when_enough_rows(self, collector, store):
        """At least limit stored rows skip SEMrush."""
        store.get.return_value = _keywords(12)
        service = KeywordResearchService(collector, store)

        result = await service.research(keyword="crm", limit=10, topic_area="Sales")

        assert result.from_cache is True
        assert len(result.keywords) == 10
        assert result.cache_key == "phrase-related-crm"
        store.get.assert_called_once_with("phrase-related-crm", "Sales")
        collector.fetch_keywords.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetches_and_replaces_when_too_few(self, collector, store):
        """Fewer stored rows than the limit trigger a fetch and replace."""
        store.get.return_value = _keywords(5)
        service = KeywordResearchService(collector, store)

        result = await service.research(domain="https://www.example.com/blog", limit=10)

        assert result.from_cache is False
        assert len(result.keywords) == 10
        assert result.total_fetched == 40
        assert result.inserted_count == 40
        request = collector.fetch_keywords.call_args[0][0]
        assert request.domain == "example.com"
        store.replace.assert_called_once_with("domain-example.com", "general", _keywords(40))

    @pytest.mark.asyncio
    async def test_no_results_message(self, collector, store):
        """An empty fetch explains itself and leaves the store alone."""
        collector.fetch_keywords.return_value = []
        service = KeywordResearchService(collector, store)

        result = await service.research(keyword="zzzz")

        assert result.keywords == []
        assert "zzzz" in result.message
        store.replace.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_still_returns_keywords(self, collector, store):
        """Failing to store fresh rows does not fail the search."""
        store.replace.side_effect = PersistenceError("keywords_insert", "db down")
        service = KeywordResearchService(collector, store)

        result = await service.research(keyword="crm", limit=20)

        assert len(result.keywords) == 20
        assert result.inserted_count == 0

    @pytest.mark.asyncio
    async def test_without_store(self, collector):
        """Without a store every search goes to SEMrush."""
        service = KeywordResearchService(collector)

        result = await service.research(keyword="crm", limit=100)

        assert len(result.keywords) == 40
        assert result.from_cache is False

    @pytest.mark.asyncio
    async def test_source_error_propagates(self, collector, store):
        """SEMrush failures reach the caller."""
        collector.fetch_keywords.side_effect = KeywordSourceError("ERROR 132")
        service = KeywordResearchService(collector, store)

        with pytest.raises(KeywordSourceError):
            await service.research(keyword="crm")

    @pytest.mark.asyncio
    async def test_invalid_request(self, collector, store):
        """A search without keyword or domain is rejected before any lookup."""
        service = KeywordResearchService(collector, store)

        with pytest.raises(InvalidRequestError):
            await service.research()

        store.get.assert_not_called()
