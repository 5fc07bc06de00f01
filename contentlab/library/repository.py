"""Content library persistence.

Stores generated content in the Supabase ``content_library`` table, one row
per content string. Storage failures raise PersistenceError; the caller keeps
its in-memory ContentBundle so the save can be retried without regenerating.
Every successful write publishes ContentUpdated on the event bus.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

import structlog
from pydantic import BaseModel, Field, model_validator

from contentlab.core.events import ContentUpdated, EventBus, get_event_bus
from contentlab.core.exceptions import ContentNotFoundError, PersistenceError
from contentlab.library.cache import (
    ContentCache,
    content_cache_key,
    content_detail_cache_key,
)
from contentlab.monitoring.metrics import record_library_write
from contentlab.normalization.schema import ContentBundle, EmailMessage

logger = structlog.get_logger(__name__)

TABLE_NAME = "content_library"
TITLE_MAX_LENGTH = 80


# =============================================================================
# Models
# =============================================================================


class ContentType(str, Enum):
    """Kind of content stored in a library row."""

    PILLAR = "pillar"
    SUPPORT = "support"
    META = "meta"
    SOCIAL = "social"
    EMAIL = "email"
    MISC = "misc"


class ContentItemCreate(BaseModel):
    """Row to insert into the content library."""

    title: str = Field("", description="Display title; derived from content when blank")
    content: str = Field(..., min_length=1, description="Content body")
    content_type: ContentType = Field(ContentType.MISC, description="Content kind")
    topic_area: Optional[str] = Field(None, description="Topic area the content belongs to")
    keywords: list[str] = Field(default_factory=list, description="Associated keywords")
    is_saved: bool = Field(True, description="Saved by the user (vs. auto-stored)")

    @model_validator(mode="after")
    def default_title(self) -> "ContentItemCreate":
        if not self.title.strip():
            self.title = make_title(self.content)
        return self


class ContentRecord(BaseModel):
    """Stored content library row."""

    id: str
    title: str = ""
    content: str = ""
    content_type: ContentType = ContentType.MISC
    topic_area: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    is_saved: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ContentRecord":
        """Build a record from a Supabase row, tolerating unknown types."""
        data = dict(row)
        data["id"] = str(data.get("id", ""))
        data["keywords"] = data.get("keywords") or []
        if data.get("content_type") not in {t.value for t in ContentType}:
            data["content_type"] = ContentType.MISC
        return cls.model_validate(data)


# =============================================================================
# Helpers
# =============================================================================


def make_title(content: str) -> str:
    """Derive a title: the content, truncated to 80 characters plus '...'."""
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


def render_email(email: EmailMessage) -> str:
    """Render an email as stored text."""
    if email.subject and email.body:
        return f"Subject: {email.subject}\n\n{email.body}"
    if email.subject:
        return f"Subject: {email.subject}"
    return email.body


def bundle_to_items(
    bundle: ContentBundle,
    keywords: Iterable[str] = (),
    is_saved: bool = True,
) -> list[ContentItemCreate]:
    """Split a bundle into one library row per content string."""
    keywords = list(keywords)
    topic_area = bundle.topic_area or None

    pairs: list[tuple[ContentType, str]] = []
    pairs += [(ContentType.PILLAR, text) for text in bundle.pillar_content]
    pairs += [(ContentType.SUPPORT, text) for text in bundle.support_content]
    pairs += [(ContentType.META, text) for text in bundle.meta_tags]
    pairs += [(ContentType.SOCIAL, text) for text in bundle.social_media_posts]
    pairs += [(ContentType.EMAIL, render_email(email)) for email in bundle.email_series]

    return [
        ContentItemCreate(
            title=make_title(text),
            content=text,
            content_type=content_type,
            topic_area=topic_area,
            keywords=keywords,
            is_saved=is_saved,
        )
        for content_type, text in pairs
        if text.strip()
    ]


def _matches(record: ContentRecord, term: str) -> bool:
    if term in record.title.lower():
        return True
    if record.topic_area and term in record.topic_area.lower():
        return True
    return any(term in keyword.lower() for keyword in record.keywords)


# =============================================================================
# Repository
# =============================================================================


class ContentLibrary:
    """
    Supabase-backed content library.

    Usage:
        library = ContentLibrary(get_supabase())
        records = library.save_bundle(result.bundles[0], keywords=["crm"])
        items = library.list_items(content_type=ContentType.PILLAR, search="crm")
    """

    def __init__(
        self,
        supabase: Any,
        event_bus: Optional[EventBus] = None,
        cache: Optional[ContentCache] = None,
    ):
        """
        Initialize the library.

        Args:
            supabase: Supabase client.
            event_bus: Bus for ContentUpdated events. Defaults to the global bus.
            cache: Optional listing cache. It is attached to the event bus so
                writes invalidate it.
        """
        self._supabase = supabase
        self._bus = event_bus or get_event_bus()
        self._cache = cache
        if cache is not None:
            cache.attach(self._bus)

    @property
    def cache(self) -> Optional[ContentCache]:
        return self._cache

    def _table(self):
        return self._supabase.table(TABLE_NAME)

    def _notify(self, content_ids: list[str], topic_area: Optional[str] = None) -> None:
        self._bus.publish(ContentUpdated(content_ids=tuple(content_ids), topic_area=topic_area))

    def _insert(self, rows: list[dict[str, Any]]) -> list[ContentRecord]:
        try:
            response = self._table().insert(rows).execute()
        except Exception as e:
            record_library_write("error")
            logger.error("content_library_insert_failed", rows=len(rows), error=str(e))
            raise PersistenceError(
                "insert",
                f"Failed to store content: {e}",
                {"rows": len(rows)},
            ) from e

        record_library_write("success")
        return [ContentRecord.from_row(row) for row in response.data or []]

    def save_item(self, item: ContentItemCreate) -> ContentRecord:
        """
        Insert a single row.

        Raises:
            PersistenceError: If the insert fails or returns no row.
        """
        records = self._insert([item.model_dump(mode="json")])
        if not records:
            raise PersistenceError("insert", "Insert returned no data")

        record = records[0]
        logger.info(
            "content_item_saved",
            content_id=record.id,
            content_type=record.content_type.value,
        )
        self._notify([record.id], record.topic_area)
        return record

    def save_bundle(
        self,
        bundle: ContentBundle,
        keywords: Iterable[str] = (),
        is_saved: bool = True,
    ) -> list[ContentRecord]:
        """
        Store every content string of a bundle as its own row.

        Args:
            bundle: Normalized content bundle.
            keywords: Keywords attached to each row.
            is_saved: Whether the rows count as user-saved.

        Returns:
            Stored records. Empty if the bundle carries no content.

        Raises:
            PersistenceError: If the insert fails.
        """
        items = bundle_to_items(bundle, keywords, is_saved)
        if not items:
            logger.info("content_bundle_empty", topic_area=bundle.topic_area)
            return []

        records = self._insert([item.model_dump(mode="json") for item in items])
        logger.info(
            "content_bundle_saved",
            topic_area=bundle.topic_area,
            rows=len(records),
        )
        self._notify([record.id for record in records], bundle.topic_area or None)
        return records

    def list_items(
        self,
        content_type: Optional[ContentType | str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
        topic_area: Optional[str] = None,
    ) -> list[ContentRecord]:
        """
        List rows, newest first.

        Args:
            content_type: Only rows of this type.
            search: Case-insensitive match on title, topic area or any keyword.
            limit: Maximum rows returned.
            offset: Rows skipped.
            topic_area: Only rows stored under exactly this topic area.

        Raises:
            PersistenceError: If the query fails.
        """
        if content_type is not None:
            content_type = ContentType(content_type)
        term = (search or "").strip().lower()
        topic_area = (topic_area or "").strip() or None

        cache_key = ":".join([
            content_cache_key(topic_area) if topic_area else "content_*",
            content_type.value if content_type else "*",
            term,
            str(limit),
            str(offset),
        ])
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            query = self._table().select("*")
            if content_type is not None:
                query = query.eq("content_type", content_type.value)
            if topic_area is not None:
                query = query.eq("topic_area", topic_area)
            query = query.order("created_at", desc=True)
            if not term:
                query = query.range(offset, offset + limit - 1)
            response = query.execute()
        except Exception as e:
            logger.error("content_library_list_failed", error=str(e))
            raise PersistenceError("list", f"Failed to load content library: {e}") from e

        records = [ContentRecord.from_row(row) for row in response.data or []]
        if term:
            records = [record for record in records if _matches(record, term)]
            records = records[offset: offset + limit]

        if self._cache is not None:
            self._cache.store(cache_key, records)
        return records

    def get_item(self, content_id: str) -> ContentRecord:
        """
        Fetch a single row.

        Raises:
            ContentNotFoundError: If no row has this id.
            PersistenceError: If the query fails.
        """
        cache_key = content_detail_cache_key([content_id])
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            response = self._table().select("*").eq("id", content_id).limit(1).execute()
        except Exception as e:
            logger.error("content_library_get_failed", content_id=content_id, error=str(e))
            raise PersistenceError("get", f"Failed to load content: {e}") from e

        if not response.data:
            raise ContentNotFoundError(content_id)

        record = ContentRecord.from_row(response.data[0])
        if self._cache is not None:
            self._cache.store(cache_key, record)
        return record

    def delete_item(self, content_id: str) -> None:
        """
        Delete a row.

        Raises:
            ContentNotFoundError: If no row has this id.
            PersistenceError: If the delete fails.
        """
        try:
            response = self._table().delete().eq("id", content_id).execute()
        except Exception as e:
            record_library_write("error")
            logger.error("content_library_delete_failed", content_id=content_id, error=str(e))
            raise PersistenceError("delete", f"Failed to delete content: {e}") from e

        if not response.data:
            raise ContentNotFoundError(content_id)

        record_library_write("success")
        logger.info("content_item_deleted", content_id=content_id)
        self._notify([content_id])
