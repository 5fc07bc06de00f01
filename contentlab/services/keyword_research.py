"""
Keyword research with stored results.

Serves a keyword search from the ``semrush_keywords`` table when enough rows
are stored for the same search and topic area; otherwise fetches from SEMrush
and replaces the stored group.

Standalone usage:
    async with SemrushCollector() as collector:
        service = KeywordResearchService(collector, KeywordStore(get_supabase()))
        result = await service.research(keyword="desk booking", limit=50)
        print(result.from_cache, len(result.keywords))
"""

from typing import Optional

import structlog
from pydantic import BaseModel, Field

from contentlab.collectors.semrush import (
    KeywordData,
    SemrushCollector,
    no_data_message,
    validate_request,
)
from contentlab.core.exceptions import PersistenceError
from contentlab.library.keyword_store import KeywordStore

logger = structlog.get_logger(__name__)


class KeywordResearchResult(BaseModel):
    """Outcome of a keyword search."""

    keywords: list[KeywordData] = Field(default_factory=list, description="Up to limit keywords")
    cache_key: str = Field(..., description="Search cache key")
    from_cache: bool = Field(False, description="Served from stored keywords")
    total_fetched: int = Field(0, description="Rows returned by SEMrush")
    inserted_count: int = Field(0, description="Rows stored after the fetch")
    message: Optional[str] = Field(None, description="Explanation when nothing was found")


class KeywordResearchService:
    """Read-through keyword search over SEMrush and the keyword store."""

    def __init__(self, collector: SemrushCollector, store: Optional[KeywordStore] = None):
        """
        Initialize the service.

        Args:
            collector: Open SEMrush collector.
            store: Keyword store. Without one every search goes to SEMrush.
        """
        self._collector = collector
        self._store = store

    async def research(
        self,
        keyword: Optional[str] = "",
        domain: Optional[str] = "",
        limit: int = 100,
        topic_area: Optional[str] = None,
    ) -> KeywordResearchResult:
        """
        Search keywords, preferring stored results.

        Stored rows are used only when at least ``limit`` of them exist.
        A failure to store fresh results is logged and does not fail the
        search.

        Raises:
            InvalidRequestError: If neither keyword nor domain is valid.
            KeywordSourceError: On SEMrush failure.
            PersistenceError: If stored keywords cannot be read.
        """
        request = validate_request(keyword, domain, limit, topic_area)

        if self._store is not None:
            stored = self._store.get(request.cache_key, request.topic_area)
            if len(stored) >= request.limit:
                logger.info(
                    "keyword_research_from_cache",
                    cache_key=request.cache_key,
                    stored=len(stored),
                )
                return KeywordResearchResult(
                    keywords=stored[: request.limit],
                    cache_key=request.cache_key,
                    from_cache=True,
                )

        fetched = await self._collector.fetch_keywords(request)
        if not fetched:
            return KeywordResearchResult(
                cache_key=request.cache_key,
                message=no_data_message(request.keyword, request.domain),
            )

        inserted = 0
        if self._store is not None:
            try:
                inserted = self._store.replace(request.cache_key, request.topic_area, fetched)
            except PersistenceError as e:
                logger.warning(
                    "keyword_research_store_failed",
                    cache_key=request.cache_key,
                    error=e.message,
                )

        return KeywordResearchResult(
            keywords=fetched[: request.limit],
            cache_key=request.cache_key,
            total_fetched=len(fetched),
            inserted_count=inserted,
        )
