"""Stored SEMrush keyword results.

Keyword rows live in the Supabase ``semrush_keywords`` table, grouped by the
search cache key (``phrase-related-<keyword>``, ``domain-<domain>``) and topic
area. A group is replaced as a whole whenever fresh results are fetched.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

import structlog
from pydantic import BaseModel, Field

from contentlab.collectors.semrush import KeywordData
from contentlab.core.exceptions import PersistenceError

logger = structlog.get_logger(__name__)

TABLE_NAME = "semrush_keywords"


class KeywordCacheGroup(BaseModel):
    """Summary of the stored rows sharing one cache key."""

    cache_key: str = Field(..., description="Search cache key")
    topic_area: str = Field("general", description="Topic area of the first stored row")
    keyword_count: int = Field(0, description="Number of stored keywords")
    created_at: Optional[datetime] = Field(None, description="Newest row timestamp")


def _keyword_from_row(row: dict[str, Any]) -> KeywordData:
    data = {key: row[key] for key in ("keyword", "volume", "difficulty", "cpc", "trend")
            if row.get(key) is not None}
    return KeywordData.model_validate(data)


class KeywordStore:
    """
    Supabase-backed keyword result store.

    Usage:
        store = KeywordStore(get_supabase())
        cached = store.get("phrase-related-crm", "general")
        store.replace("phrase-related-crm", "general", fresh_keywords)
    """

    def __init__(self, supabase: Any):
        self._supabase = supabase

    def _table(self):
        return self._supabase.table(TABLE_NAME)

    def get(self, cache_key: str, topic_area: str) -> list[KeywordData]:
        """
        Load the stored keywords of one group.

        Raises:
            PersistenceError: If the query fails.
        """
        try:
            response = (
                self._table()
                .select("*")
                .eq("cache_key", cache_key)
                .eq("topic_area", topic_area)
                .execute()
            )
        except Exception as e:
            logger.error("keyword_store_get_failed", cache_key=cache_key, error=str(e))
            raise PersistenceError("keywords_get", f"Failed to load stored keywords: {e}") from e

        return [_keyword_from_row(row) for row in response.data or []]

    def replace(
        self,
        cache_key: str,
        topic_area: str,
        keywords: Iterable[KeywordData],
    ) -> int:
        """
        Delete a group and store a fresh set of keywords under it.

        Returns:
            Number of rows inserted.

        Raises:
            PersistenceError: If the delete or insert fails.
        """
        rows = [
            {**keyword.model_dump(), "cache_key": cache_key, "topic_area": topic_area}
            for keyword in keywords
        ]

        try:
            self._table().delete().eq("cache_key", cache_key).eq("topic_area", topic_area).execute()
        except Exception as e:
            logger.error("keyword_store_delete_failed", cache_key=cache_key, error=str(e))
            raise PersistenceError("keywords_delete", f"Failed to clear stored keywords: {e}") from e

        if not rows:
            return 0

        try:
            response = self._table().insert(rows).execute()
        except Exception as e:
            logger.error("keyword_store_insert_failed", cache_key=cache_key, rows=len(rows), error=str(e))
            raise PersistenceError(
                "keywords_insert",
                f"Failed to store keywords: {e}",
                {"rows": len(rows)},
            ) from e

        inserted = len(response.data or [])
        logger.info(
            "keyword_store_replaced",
            cache_key=cache_key,
            topic_area=topic_area,
            inserted=inserted,
        )
        return inserted

    def list_groups(self) -> list[KeywordCacheGroup]:
        """
        Summarize stored keywords by cache key, newest group first.

        Raises:
            PersistenceError: If the query fails.
        """
        try:
            response = self._table().select("*").order("created_at", desc=True).execute()
        except Exception as e:
            logger.error("keyword_store_list_failed", error=str(e))
            raise PersistenceError("keywords_list", f"Failed to load stored keywords: {e}") from e

        groups: dict[str, KeywordCacheGroup] = {}
        for row in response.data or []:
            key = row.get("cache_key") or ""
            group = groups.get(key)
            if group is None:
                group = groups[key] = KeywordCacheGroup(
                    cache_key=key,
                    topic_area=row.get("topic_area") or "general",
                    created_at=row.get("created_at"),
                )
            group.keyword_count += 1
        return list(groups.values())

    def delete_group(self, cache_key: str) -> int:
        """
        Delete every stored keyword under a cache key.

        Returns:
            Number of rows deleted.

        Raises:
            PersistenceError: If the delete fails.
        """
        try:
            response = self._table().delete().eq("cache_key", cache_key).execute()
        except Exception as e:
            logger.error("keyword_store_delete_failed", cache_key=cache_key, error=str(e))
            raise PersistenceError("keywords_delete", f"Failed to delete stored keywords: {e}") from e

        deleted = len(response.data or [])
        logger.info("keyword_group_deleted", cache_key=cache_key, deleted=deleted)
        return deleted
