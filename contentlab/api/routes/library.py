"""Content library endpoints for the ContentLab API.

Provides CRUD operations over stored content.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response

from contentlab.api.dependencies import get_content_library
from contentlab.api.models import ContentListResponse, ErrorResponse, SaveBundleRequest
from contentlab.library.repository import (
    ContentItemCreate,
    ContentLibrary,
    ContentRecord,
    ContentType,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/library", tags=["Library"])


@router.get(
    "",
    response_model=ContentListResponse,
    summary="List library content",
    description="List stored content, newest first.",
)
async def list_content(
    content_type: Optional[ContentType] = Query(None, description="Filter by content type"),
    search: Optional[str] = Query(None, description="Match title, topic area or keyword"),
    topic_area: Optional[str] = Query(None, description="Only content stored under this topic area"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    library: ContentLibrary = Depends(get_content_library),
) -> ContentListResponse:
    """List content with optional type filter and search."""
    items = library.list_items(
        content_type=content_type,
        search=search,
        topic_area=topic_area,
        limit=limit,
        offset=offset,
    )
    return ContentListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=ContentRecord,
    status_code=201,
    summary="Add content",
    description="Store a single content item.",
    responses={500: {"model": ErrorResponse, "description": "Storage failed"}},
)
async def create_content(
    item: ContentItemCreate,
    library: ContentLibrary = Depends(get_content_library),
) -> ContentRecord:
    """Store one item; the title is derived from the content when blank."""
    return library.save_item(item)


@router.post(
    "/bundles",
    response_model=list[ContentRecord],
    status_code=201,
    summary="Save a content bundle",
    description="Store every piece of a normalized bundle as its own library row.",
    responses={500: {"model": ErrorResponse, "description": "Storage failed"}},
)
async def save_bundle(
    request: SaveBundleRequest,
    library: ContentLibrary = Depends(get_content_library),
) -> list[ContentRecord]:
    """Split a bundle into pillar, support, meta, social and email rows."""
    return library.save_bundle(
        request.bundle,
        keywords=request.keywords,
        is_saved=request.is_saved,
    )


@router.get(
    "/{content_id}",
    response_model=ContentRecord,
    summary="Get content",
    responses={404: {"model": ErrorResponse, "description": "Content not found"}},
)
async def get_content(
    content_id: str,
    library: ContentLibrary = Depends(get_content_library),
) -> ContentRecord:
    """Fetch one library record."""
    return library.get_item(content_id)


@router.delete(
    "/{content_id}",
    status_code=204,
    summary="Delete content",
    responses={404: {"model": ErrorResponse, "description": "Content not found"}},
)
async def delete_content(
    content_id: str,
    library: ContentLibrary = Depends(get_content_library),
) -> Response:
    """Delete one library record."""
    library.delete_item(content_id)
    logger.info("content_deleted_via_api", content_id=content_id)
    return Response(status_code=204)
