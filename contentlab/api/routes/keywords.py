"""Keyword research endpoints for the ContentLab API."""

import structlog
from fastapi import APIRouter, Depends, Response

from contentlab.api.dependencies import get_keyword_research, get_keyword_store
from contentlab.api.models import (
    ErrorResponse,
    KeywordCacheResponse,
    KeywordSearchBody,
    KeywordSearchResponse,
)
from contentlab.library.keyword_store import KeywordStore
from contentlab.services.keyword_research import KeywordResearchService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/keywords", tags=["Keywords"])


@router.post(
    "/search",
    response_model=KeywordSearchResponse,
    summary="Search keywords",
    description="Fetch related keywords for a phrase, or organic keywords for a domain.",
    responses={
        400: {"model": ErrorResponse, "description": "Neither keyword nor valid domain"},
        500: {"model": ErrorResponse, "description": "Stored keywords could not be read"},
        502: {"model": ErrorResponse, "description": "SEMrush request failed"},
        503: {"model": ErrorResponse, "description": "SEMrush not configured"},
    },
)
async def search_keywords(
    request: KeywordSearchBody,
    research: KeywordResearchService = Depends(get_keyword_research),
) -> KeywordSearchResponse:
    """
    Search SEMrush keywords.

    Stored results for the same search and topic area are returned when at
    least `limit` of them exist; otherwise SEMrush is queried and the stored
    group is replaced.

    **Parameters:**
    - **keyword**: Seed phrase (uses the phrase_related report)
    - **domain**: Domain or URL (uses the domain_organic report when no keyword)
    - **limit**: Maximum keywords returned
    - **topic_area**: Topic the stored keywords are grouped under
    """
    result = await research.research(
        keyword=request.keyword,
        domain=request.domain,
        limit=request.limit,
        topic_area=request.topic_area,
    )

    return KeywordSearchResponse(
        keywords=result.keywords,
        total=len(result.keywords),
        message=result.message,
        cache_key=result.cache_key,
        from_cache=result.from_cache,
        total_fetched=result.total_fetched,
        inserted_count=result.inserted_count,
    )


@router.get(
    "/cache",
    response_model=KeywordCacheResponse,
    summary="List stored keyword groups",
    description="Stored SEMrush results grouped by search cache key.",
    responses={503: {"model": ErrorResponse, "description": "Supabase not configured"}},
)
async def list_keyword_cache(
    store: KeywordStore = Depends(get_keyword_store),
) -> KeywordCacheResponse:
    """List stored keyword groups, newest first."""
    groups = store.list_groups()
    return KeywordCacheResponse(groups=groups, total=len(groups))


@router.delete(
    "/cache/{cache_key}",
    status_code=204,
    summary="Delete a stored keyword group",
    responses={503: {"model": ErrorResponse, "description": "Supabase not configured"}},
)
async def delete_keyword_cache(
    cache_key: str,
    store: KeywordStore = Depends(get_keyword_store),
) -> Response:
    """Delete every stored keyword under a cache key."""
    deleted = store.delete_group(cache_key)
    logger.info("keyword_cache_cleared", cache_key=cache_key, deleted=deleted)
    return Response(status_code=204)
