"""n8n webhook client.

POSTs a JSON payload to an n8n workflow webhook and returns the raw response
text. Transport failures (timeout, network error, non-2xx status) raise
TransportError subclasses and are never fed into the normalizer. Calls are
not retried: the user re-triggers the action.
"""

import time
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, Field

from contentlab.config.settings import get_settings
from contentlab.core.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    WebhookHTTPError,
    WebhookRequestError,
    WebhookTimeoutError,
)
from contentlab.monitoring.metrics import track_webhook_request
from contentlab.normalization.pipeline import NormalizationPipeline
from contentlab.normalization.schema import NormalizationContext, NormalizationResult
from contentlab.webhooks.resolver import (
    RequestType,
    WebhookType,
    WebhookUrls,
    resolve_webhook_url,
)

logger = structlog.get_logger(__name__)


class WebhookResponse(BaseModel):
    """Normalized webhook reply plus request metadata."""

    result: NormalizationResult
    url: str
    webhook_type: WebhookType
    status_code: int
    duration_seconds: float = Field(..., description="Wall-clock round-trip time")


class N8nWebhookClient:
    """Async client for n8n workflow webhooks.

    Example:
        async with N8nWebhookClient() as client:
            response = await client.send_and_normalize(
                {"requestType": "contentSuggestions", "keywords": ["crm"]},
                NormalizationContext(topic_area="CRM"),
            )
    """

    def __init__(
        self,
        urls: Optional[WebhookUrls] = None,
        timeout: Optional[float] = None,
        source: Optional[str] = None,
        pipeline: Optional[NormalizationPipeline] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            urls: Webhook URLs. If not provided, loads from settings.
            timeout: Request timeout in seconds. Defaults to settings (180).
            source: Value of the ``source`` field added to every payload.
            pipeline: Normalizer used by ``send_and_normalize``.
            transport: Optional httpx transport (used in tests).
        """
        settings = get_settings()
        self.urls = urls or WebhookUrls.from_settings()
        self._timeout = timeout if timeout is not None else settings.webhook_timeout_seconds
        self._source = source or settings.webhook_source
        self._pipeline = pipeline or NormalizationPipeline()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "N8nWebhookClient":
        """Enter async context manager."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_body(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Add the ``source`` and ``timestamp`` envelope fields to a payload."""
        return {
            **payload,
            "source": self._source,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _post(
        self,
        payload: dict[str, Any],
        request_type: Optional[RequestType | str],
        webhook_type: Optional[WebhookType | str],
        url: Optional[str],
    ) -> tuple[str, WebhookType, str, int, float]:
        if url and not self.urls.allows(url):
            logger.warning("webhook_url_rejected", url=url)
            raise InvalidRequestError(
                "Webhook URL must target a configured webhook host",
                field="webhook_url",
            )

        resolved_type, target = resolve_webhook_url(
            self.urls,
            request_type=request_type or payload.get("requestType"),
            webhook_type=webhook_type,
            custom_url=url,
        )
        if not target:
            raise ConfigurationError(
                f"No webhook URL configured for '{resolved_type.value}' workflows",
                config_key=f"{resolved_type.name.lower()}_webhook_url",
            )

        client = await self._ensure_client()
        body = self.build_body(payload)
        start_time = time.perf_counter()

        logger.info(
            "webhook_request_started",
            webhook_type=resolved_type.value,
            url=target,
            request_type=body.get("requestType"),
        )

        with track_webhook_request(resolved_type.value) as ctx:
            try:
                response = await client.post(target, json=body)
            except httpx.TimeoutException as e:
                ctx["status"] = "timeout"
                logger.error("webhook_timeout", url=target, timeout=self._timeout)
                raise WebhookTimeoutError(self._timeout, {"url": target}) from e
            except httpx.RequestError as e:
                logger.error("webhook_request_error", url=target, error=str(e))
                raise WebhookRequestError(
                    f"Failed to reach webhook: {e}",
                    {"url": target},
                ) from e

            duration = time.perf_counter() - start_time
            if response.is_error:
                ctx["status"] = f"http_{response.status_code}"
                logger.error(
                    "webhook_http_error",
                    url=target,
                    status_code=response.status_code,
                    body=response.text[:300],
                )
                raise WebhookHTTPError(
                    response.status_code,
                    response.text,
                    {"url": target},
                )

            ctx["status"] = "success"

        logger.info(
            "webhook_request_completed",
            webhook_type=resolved_type.value,
            status_code=response.status_code,
            duration_seconds=round(duration, 3),
            response_length=len(response.text),
        )
        return response.text, resolved_type, target, response.status_code, duration

    async def send(
        self,
        payload: dict[str, Any],
        *,
        request_type: Optional[RequestType | str] = None,
        webhook_type: Optional[WebhookType | str] = None,
        url: Optional[str] = None,
    ) -> str:
        """POST a payload and return the raw response text.

        Args:
            payload: JSON-serializable request payload.
            request_type: Overrides ``payload["requestType"]`` for routing.
            webhook_type: Explicit webhook family.
            url: One-off URL overriding the configured ones. Its host must
                be a configured webhook host or listed in ``extra_hosts``.

        Returns:
            Raw response body.

        Raises:
            InvalidRequestError: ``url`` targets a host that is not allowed.
            ConfigurationError: No URL is configured for the selected webhook.
            WebhookTimeoutError: The call exceeded the timeout.
            WebhookHTTPError: The webhook answered with a non-2xx status.
            WebhookRequestError: Network-level failure.
        """
        text, _, _, _, _ = await self._post(payload, request_type, webhook_type, url)
        return text

    async def send_and_normalize(
        self,
        payload: dict[str, Any],
        context: Optional[NormalizationContext] = None,
        *,
        request_type: Optional[RequestType | str] = None,
        webhook_type: Optional[WebhookType | str] = None,
        url: Optional[str] = None,
    ) -> WebhookResponse:
        """POST a payload and normalize the reply.

        Transport errors propagate as in ``send``. The reply itself never
        raises: unexpected shapes degrade inside the NormalizationResult.
        """
        text, resolved_type, target, status_code, duration = await self._post(
            payload, request_type, webhook_type, url
        )
        result = self._pipeline.normalize(text, context)

        return WebhookResponse(
            result=result,
            url=target,
            webhook_type=resolved_type,
            status_code=status_code,
            duration_seconds=duration,
        )
