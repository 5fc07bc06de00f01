"""n8n webhook integration: URL resolution and the async client."""

from contentlab.webhooks.resolver import (
    RequestType,
    WebhookType,
    WebhookUrls,
    load_webhook_urls,
    parse_webhook_type,
    resolve_webhook_url,
)
from contentlab.webhooks.client import N8nWebhookClient, WebhookResponse

__all__ = [
    "RequestType",
    "WebhookType",
    "WebhookUrls",
    "load_webhook_urls",
    "parse_webhook_type",
    "resolve_webhook_url",
    "N8nWebhookClient",
    "WebhookResponse",
]
