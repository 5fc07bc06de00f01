"""Content library: Supabase persistence, a TTL listing cache and stored keywords."""

from contentlab.library.cache import (
    ContentCache,
    content_cache_key,
    content_detail_cache_key,
)
from contentlab.library.keyword_store import KeywordCacheGroup, KeywordStore
from contentlab.library.repository import (
    ContentItemCreate,
    ContentLibrary,
    ContentRecord,
    ContentType,
    bundle_to_items,
    make_title,
    render_email,
)

__all__ = [
    "ContentCache",
    "content_cache_key",
    "content_detail_cache_key",
    "KeywordCacheGroup",
    "KeywordStore",
    "ContentItemCreate",
    "ContentLibrary",
    "ContentRecord",
    "ContentType",
    "bundle_to_items",
    "make_title",
    "render_email",
]
