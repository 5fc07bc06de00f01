"""FastAPI dependency injection providers.

This module provides dependency functions for injecting services into route handlers.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from supabase import create_client, Client

from contentlab.collectors.semrush import SemrushCollector
from contentlab.config.settings import get_settings
from contentlab.core.events import get_event_bus
from contentlab.core.exceptions import ConfigurationError
from contentlab.library.cache import ContentCache
from contentlab.library.keyword_store import KeywordStore
from contentlab.library.repository import ContentLibrary
from contentlab.normalization.pipeline import NormalizationPipeline
from contentlab.services.content_generator import ContentSuggestionGenerator
from contentlab.services.keyword_research import KeywordResearchService
from contentlab.webhooks.client import N8nWebhookClient
from contentlab.webhooks.resolver import load_webhook_urls

# Global instances for singleton pattern
_supabase_client: Optional[Client] = None
_content_library: Optional[ContentLibrary] = None
_pipeline: Optional[NormalizationPipeline] = None


def get_supabase() -> Client:
    """
    Get Supabase client instance.

    Uses a singleton pattern to reuse the same client across requests.

    Returns:
        Authenticated Supabase client.

    Raises:
        ConfigurationError: If Supabase credentials are not configured.
    """
    global _supabase_client

    if _supabase_client is None:
        settings = get_settings()
        if not settings.supabase_configured:
            raise ConfigurationError("Supabase is not configured", "supabase_url")
        _supabase_client = create_client(
            settings.supabase_url,
            settings.supabase_key.get_secret_value(),
        )

    return _supabase_client


def get_optional_supabase() -> Optional[Client]:
    """Get the Supabase client, or None when it is not configured."""
    if not get_settings().supabase_configured:
        return None
    return get_supabase()


def get_normalization_pipeline() -> NormalizationPipeline:
    """Get the shared normalization pipeline."""
    global _pipeline

    if _pipeline is None:
        _pipeline = NormalizationPipeline()

    return _pipeline


def get_content_library(supabase: Client = Depends(get_supabase)) -> ContentLibrary:
    """
    Get the content library.

    The library owns a TTL listing cache that is cleared on every
    ContentUpdated event.
    """
    global _content_library

    if _content_library is None:
        _content_library = ContentLibrary(
            supabase,
            event_bus=get_event_bus(),
            cache=ContentCache(),
        )

    return _content_library


async def get_webhook_client(
    supabase: Optional[Client] = Depends(get_optional_supabase),
    pipeline: NormalizationPipeline = Depends(get_normalization_pipeline),
) -> AsyncGenerator[N8nWebhookClient, None]:
    """Yield a webhook client with URLs from settings and stored configs."""
    async with N8nWebhookClient(
        urls=load_webhook_urls(supabase),
        pipeline=pipeline,
    ) as client:
        yield client


async def get_semrush_collector() -> AsyncGenerator[SemrushCollector, None]:
    """Yield a SEMrush collector; ConfigurationError if no API key is set."""
    async with SemrushCollector() as collector:
        yield collector


def get_keyword_store(supabase: Client = Depends(get_supabase)) -> KeywordStore:
    """Get the stored keyword table; ConfigurationError without Supabase."""
    return KeywordStore(supabase)


def get_keyword_research(
    collector: SemrushCollector = Depends(get_semrush_collector),
    supabase: Optional[Client] = Depends(get_optional_supabase),
) -> KeywordResearchService:
    """Get keyword research; results are stored only when Supabase is configured."""
    store = KeywordStore(supabase) if supabase is not None else None
    return KeywordResearchService(collector, store)


def get_content_generator(
    pipeline: NormalizationPipeline = Depends(get_normalization_pipeline),
) -> ContentSuggestionGenerator:
    """Get an OpenAI content suggestion generator."""
    return ContentSuggestionGenerator(pipeline=pipeline)


def reset_dependencies() -> None:
    """
    Reset all global dependency instances.

    Useful for testing or application shutdown.
    """
    global _supabase_client, _content_library, _pipeline
    if _content_library is not None and _content_library.cache is not None:
        _content_library.cache.detach()
    _supabase_client = None
    _content_library = None
    _pipeline = None
