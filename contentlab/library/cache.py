"""TTL cache for content library reads.

Entries expire after ``library_cache_ttl_seconds`` (5 minutes by default).
A cache attached to an EventBus is cleared whenever ContentUpdated is
published, so listings never outlive a write made through ContentLibrary.
"""

import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import structlog

from contentlab.config.settings import get_settings
from contentlab.core.events import ContentUpdated, EventBus, Subscription

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    expires_at: float


def content_cache_key(topic_area: str) -> str:
    """Cache key for the content items of a topic area."""
    slug = re.sub(r"\s+", "_", topic_area.lower())
    return f"content_{slug}"


def content_detail_cache_key(content_ids: Iterable[str]) -> str:
    """Cache key for a set of content records, independent of order."""
    return f"content_detail_{'_'.join(sorted(content_ids))}"


class ContentCache:
    """
    In-process TTL cache keyed by string.

    Usage:
        cache = ContentCache(ttl_seconds=300)
        cache.attach(get_event_bus())
        items = cache.get("content_hybrid_work")
        if items is None:
            items = library.list_items(search="hybrid work")
            cache.store("content_hybrid_work", items)
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime. Defaults to settings.
            clock: Time source (injectable for tests).
        """
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else get_settings().library_cache_ttl_seconds
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._subscription: Optional[Subscription] = None

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.data

    def store(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store data under a key with an expiry."""
        now = self._clock()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(data=data, timestamp=now, expires_at=now + ttl)

    def clear(self, key: str) -> None:
        """Remove one entry."""
        with self._lock:
            self._entries.pop(key, None)

    def clear_all(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def attach(self, bus: EventBus) -> Subscription:
        """Clear the cache on every ContentUpdated published on ``bus``."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
        self._subscription = bus.subscribe(ContentUpdated, self._on_content_updated)
        return self._subscription

    def detach(self) -> None:
        """Stop listening for ContentUpdated."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_content_updated(self, event: ContentUpdated) -> None:
        logger.debug(
            "content_cache_invalidated",
            content_ids=list(event.content_ids),
            entries=len(self),
        )
        self.clear_all()
