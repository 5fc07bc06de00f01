"""Request and response models for the ContentLab API."""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from contentlab.collectors.semrush import KeywordData
from contentlab.library.keyword_store import KeywordCacheGroup
from contentlab.library.repository import ContentRecord
from contentlab.normalization.schema import (
    ContentBundle,
    NormalizationResult,
    PayloadKind,
)
from contentlab.webhooks.resolver import RequestType, WebhookType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Content Models
# =============================================================================


class NormalizeRequest(BaseModel):
    """Payload to run through the normalization pipeline."""

    payload: Any = Field(
        ...,
        description="Raw response text, or an already-parsed JSON value",
    )
    topic_area: str = Field(default="", description="Default topic area for bundles")
    title: str = Field(default="", description="Default title for bundles")


class NormalizationResponse(BaseModel):
    """Normalized content as returned to clients."""

    kind: PayloadKind = Field(..., description="Classification of the payload")
    bundles: list[ContentBundle] = Field(default_factory=list)
    raw_text: str = Field(..., description="Original payload text")
    title: str = Field(default="", description="Best-effort title")
    error_message: Optional[str] = Field(None, description="Embedded error text")
    display_text: str = Field(default="", description="Text for a raw-content view")
    has_content: bool = Field(..., description="True if any bundle carries content")

    @classmethod
    def from_result(cls, result: NormalizationResult) -> "NormalizationResponse":
        return cls(
            kind=result.kind,
            bundles=result.bundles,
            raw_text=result.raw_text,
            title=result.title,
            error_message=result.error_message,
            display_text=result.display_text,
            has_content=result.has_content,
        )


class GenerateContentRequest(BaseModel):
    """Request to run an n8n content workflow."""

    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Workflow payload; 'source' and 'timestamp' are added",
    )
    request_type: Optional[RequestType] = Field(
        None, description="Routing hint; defaults to payload['requestType']"
    )
    webhook_type: Optional[WebhookType] = Field(None, description="Explicit webhook family")
    webhook_url: Optional[str] = Field(
        None,
        description="One-off webhook URL override; must target a configured webhook host",
    )
    topic_area: str = Field(default="", description="Default topic area for bundles")
    title: str = Field(default="", description="Default title for bundles")


class GenerateContentResponse(BaseModel):
    """Normalized workflow reply and request metadata."""

    result: NormalizationResponse
    webhook_type: WebhookType
    duration_seconds: float = Field(..., description="Webhook round-trip time")


class SuggestionsRequest(BaseModel):
    """Request for OpenAI content suggestions."""

    keywords: list[KeywordData] = Field(..., min_length=1, description="Keywords to analyze")
    topic_area: str = Field(default="", description="Optional focus area")
    model: Optional[str] = Field(None, description="Overrides the configured model")


# =============================================================================
# Keyword Models
# =============================================================================


class KeywordSearchBody(BaseModel):
    """Keyword search parameters. At least one of keyword or domain is required."""

    keyword: str = Field(default="", description="Seed phrase for related keywords")
    domain: str = Field(default="", description="Domain or URL for organic keywords")
    limit: int = Field(default=100, ge=1, le=500, description="Maximum keywords returned")
    topic_area: str = Field(default="general", description="Topic label")


class KeywordSearchResponse(BaseModel):
    """Keyword search results."""

    keywords: list[KeywordData] = Field(..., description="Keyword rows")
    total: int = Field(..., description="Number of keywords returned")
    message: Optional[str] = Field(None, description="Explanation when nothing was found")
    cache_key: str = Field("", description="Search cache key")
    from_cache: bool = Field(False, description="Served from stored keywords")
    total_fetched: int = Field(0, description="Rows returned by SEMrush")
    inserted_count: int = Field(0, description="Rows stored after the fetch")


class KeywordCacheResponse(BaseModel):
    """Stored keyword groups."""

    groups: list[KeywordCacheGroup] = Field(..., description="Groups, newest first")
    total: int = Field(..., description="Number of groups")


# =============================================================================
# Library Models
# =============================================================================


class SaveBundleRequest(BaseModel):
    """Request to store a content bundle in the library."""

    bundle: ContentBundle
    keywords: list[str] = Field(default_factory=list, description="Keywords for each row")
    is_saved: bool = Field(default=True, description="Mark rows as user-saved")


class ContentListResponse(BaseModel):
    """List of library records."""

    items: list[ContentRecord] = Field(..., description="Library records, newest first")
    total: int = Field(..., description="Number of records returned")


# =============================================================================
# Health Models
# =============================================================================


class HealthStatus(BaseModel):
    """Individual service health status."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Service status"
    )
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    message: Optional[str] = Field(None, description="Additional status message")


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Overall system status"
    )
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Check timestamp")
    services: dict[str, HealthStatus] = Field(
        default_factory=dict,
        description="Individual service statuses",
    )
    uptime_seconds: Optional[float] = Field(None, description="Server uptime in seconds")


# =============================================================================
# Error Models
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Error timestamp",
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Optional[Any] = Field(None, description="Invalid value provided")


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: str = Field(default="validation_error", description="Error type")
    message: str = Field(default="Request validation failed", description="Error message")
    errors: list[ValidationErrorDetail] = Field(..., description="List of validation errors")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
