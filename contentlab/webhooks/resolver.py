"""Webhook type and URL resolution.

URLs come from settings and can be overridden per type by active rows in the
Supabase ``webhook_configs`` table.
"""

from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

import structlog
from pydantic import BaseModel, Field

from contentlab.config.settings import get_settings

logger = structlog.get_logger(__name__)


class WebhookType(str, Enum):
    """n8n workflow families, each reached through its own webhook."""

    KEYWORDS = "keywords"
    CONTENT = "content"
    CUSTOM_KEYWORDS = "custom-keywords"
    CONTENT_ADJUSTMENT = "content-adjustment"


class RequestType(str, Enum):
    """Value of the ``requestType`` field sent in webhook payloads."""

    CONTENT_SUGGESTIONS = "contentSuggestions"
    KEYWORD_ANALYSIS = "keywordAnalysis"
    CUSTOM_KEYWORDS = "customKeywords"
    CONTENT_ADJUSTMENT = "contentAdjustment"
    CONTENT_GENERATION = "contentGeneration"


# Request types that pin a webhook regardless of the explicit type
REQUEST_TYPE_WEBHOOKS: dict[RequestType, WebhookType] = {
    RequestType.CUSTOM_KEYWORDS: WebhookType.CUSTOM_KEYWORDS,
    RequestType.CONTENT_SUGGESTIONS: WebhookType.CONTENT,
    RequestType.CONTENT_ADJUSTMENT: WebhookType.CONTENT_ADJUSTMENT,
}

# Legacy type names stored in webhook_configs
_TYPE_ALIASES = {"keyword-sync": WebhookType.KEYWORDS}


class WebhookUrls(BaseModel):
    """Configured URL per webhook type. Empty string means not configured."""

    keywords: str = Field(default="", description="Keyword sync/analysis webhook")
    content: str = Field(default="", description="Content suggestion webhook")
    custom_keywords: str = Field(default="", description="Custom keywords webhook")
    content_adjustment: str = Field(default="", description="Content adjustment webhook")

    extra_hosts: list[str] = Field(
        default_factory=list,
        description="Hosts besides the configured webhooks that one-off URLs may target",
    )

    def get(self, webhook_type: WebhookType) -> str:
        """Return the URL configured for a webhook type."""
        return getattr(self, webhook_type.name.lower())

    def allowed_hosts(self) -> set[str]:
        """Hosts of the configured webhooks plus ``extra_hosts``."""
        hosts = {host.strip().lower() for host in self.extra_hosts if host.strip()}
        for webhook_type in WebhookType:
            hostname = urlparse(self.get(webhook_type)).hostname
            if hostname:
                hosts.add(hostname.lower())
        return hosts

    def allows(self, url: str) -> bool:
        """Whether a one-off URL is http(s) and targets an allowed host."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False
        return parsed.hostname.lower() in self.allowed_hosts()

    @classmethod
    def from_settings(cls) -> "WebhookUrls":
        """Build the URL set from application settings."""
        settings = get_settings()
        return cls(
            keywords=settings.keyword_webhook_url or "",
            content=settings.content_webhook_url or "",
            custom_keywords=settings.custom_keywords_webhook_url or "",
            content_adjustment=settings.content_adjustment_webhook_url or "",
            extra_hosts=settings.webhook_allowed_hosts,
        )


def parse_webhook_type(value: Any) -> Optional[WebhookType]:
    """Map a stored or requested type name to WebhookType, or None if unknown."""
    if isinstance(value, WebhookType):
        return value
    if not isinstance(value, str):
        return None
    if value in _TYPE_ALIASES:
        return _TYPE_ALIASES[value]
    try:
        return WebhookType(value)
    except ValueError:
        return None


def _parse_request_type(value: Any) -> Optional[RequestType]:
    if isinstance(value, RequestType):
        return value
    try:
        return RequestType(value)
    except ValueError:
        return None


def resolve_webhook_url(
    urls: WebhookUrls,
    request_type: Optional[RequestType | str] = None,
    webhook_type: Optional[WebhookType | str] = None,
    custom_url: Optional[str] = None,
) -> tuple[WebhookType, str]:
    """Pick the webhook for a request.

    Priority: explicit custom URL, then the request type (custom keywords,
    content suggestions, content adjustment), then the explicit webhook type,
    then the keywords webhook.

    Args:
        urls: Configured webhook URLs.
        request_type: ``requestType`` of the payload being sent.
        webhook_type: Explicitly requested webhook type.
        custom_url: One-off URL that overrides everything.

    Returns:
        Tuple of (webhook type used for metrics, URL). The URL may be empty
        if the selected webhook is not configured.
    """
    resolved_type = parse_webhook_type(webhook_type) or WebhookType.KEYWORDS

    parsed_request = _parse_request_type(request_type)
    if parsed_request in REQUEST_TYPE_WEBHOOKS:
        resolved_type = REQUEST_TYPE_WEBHOOKS[parsed_request]

    if custom_url:
        logger.debug("webhook_resolved", source="custom", webhook_type=resolved_type.value)
        return resolved_type, custom_url

    url = urls.get(resolved_type)
    logger.debug(
        "webhook_resolved",
        source="configured",
        webhook_type=resolved_type.value,
        configured=bool(url),
    )
    return resolved_type, url


def load_webhook_urls(supabase: Any = None) -> WebhookUrls:
    """Load webhook URLs from settings, overlaid with stored configs.

    Args:
        supabase: Supabase client. Without one, only settings are used.

    Returns:
        WebhookUrls. Database errors fall back to settings.
    """
    urls = WebhookUrls.from_settings()
    if supabase is None:
        return urls

    try:
        response = (
            supabase.table("webhook_configs")
            .select("type, url, webhook_type, webhook_url, created_at")
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.warning("webhook_configs_load_failed", error=str(e))
        return urls

    overrides: dict[str, str] = {}
    # Rows are newest first; the first row seen for a type wins
    for row in response.data or []:
        webhook_type = parse_webhook_type(row.get("type") or row.get("webhook_type"))
        url = row.get("url") or row.get("webhook_url")
        if webhook_type is None or not url:
            continue
        overrides.setdefault(webhook_type.name.lower(), url)

    if overrides:
        logger.info("webhook_configs_loaded", types=sorted(overrides))
        urls = urls.model_copy(update=overrides)
    return urls
