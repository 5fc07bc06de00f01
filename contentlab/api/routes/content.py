"""Content endpoints for the ContentLab API.

Normalizes arbitrary payloads, runs n8n content workflows and requests
OpenAI content suggestions. Every reply is returned as a normalized result.
"""

import structlog
from fastapi import APIRouter, Depends

from contentlab.api.dependencies import (
    get_content_generator,
    get_normalization_pipeline,
    get_webhook_client,
)
from contentlab.api.models import (
    ErrorResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    NormalizationResponse,
    NormalizeRequest,
    SuggestionsRequest,
)
from contentlab.normalization.pipeline import NormalizationPipeline
from contentlab.normalization.schema import NormalizationContext
from contentlab.services.content_generator import ContentSuggestionGenerator
from contentlab.webhooks.client import N8nWebhookClient

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/content", tags=["Content"])


@router.post(
    "/normalize",
    response_model=NormalizationResponse,
    summary="Normalize a payload",
    description="Run an n8n or LLM response through the normalization pipeline.",
)
async def normalize_payload(
    request: NormalizeRequest,
    pipeline: NormalizationPipeline = Depends(get_normalization_pipeline),
) -> NormalizationResponse:
    """
    Normalize a raw payload.

    Never fails for malformed payloads: the result kind tells the client
    whether to render bundles, raw text, an empty state or an error.
    """
    result = pipeline.normalize(
        request.payload,
        NormalizationContext(topic_area=request.topic_area, title=request.title),
    )
    return NormalizationResponse.from_result(result)


@router.post(
    "/generate",
    response_model=GenerateContentResponse,
    summary="Run a content workflow",
    description="POST a payload to an n8n webhook and normalize its reply.",
    responses={
        400: {"model": ErrorResponse, "description": "Webhook URL override not allowed"},
        502: {"model": ErrorResponse, "description": "Webhook failed"},
        503: {"model": ErrorResponse, "description": "Webhook not configured"},
        504: {"model": ErrorResponse, "description": "Webhook timed out"},
    },
)
async def generate_content(
    request: GenerateContentRequest,
    client: N8nWebhookClient = Depends(get_webhook_client),
) -> GenerateContentResponse:
    """
    Run an n8n workflow.

    Transport failures are not retried; they map to 502/504 so the user can
    re-trigger the action.
    """
    logger.info(
        "content_generation_requested",
        request_type=request.request_type.value if request.request_type else None,
        webhook_type=request.webhook_type.value if request.webhook_type else None,
        topic_area=request.topic_area or None,
    )

    response = await client.send_and_normalize(
        request.payload,
        NormalizationContext(topic_area=request.topic_area, title=request.title),
        request_type=request.request_type,
        webhook_type=request.webhook_type,
        url=request.webhook_url,
    )

    return GenerateContentResponse(
        result=NormalizationResponse.from_result(response.result),
        webhook_type=response.webhook_type,
        duration_seconds=round(response.duration_seconds, 3),
    )


@router.post(
    "/suggestions",
    response_model=NormalizationResponse,
    summary="Generate content suggestions",
    description="Ask OpenAI for content ideas grouped by topic for a keyword set.",
    responses={
        502: {"model": ErrorResponse, "description": "OpenAI request failed"},
        503: {"model": ErrorResponse, "description": "OpenAI not configured"},
    },
)
async def content_suggestions(
    request: SuggestionsRequest,
    generator: ContentSuggestionGenerator = Depends(get_content_generator),
) -> NormalizationResponse:
    """Generate suggestions; one bundle per topic group."""
    result = await generator.generate_suggestions(
        request.keywords,
        topic_area=request.topic_area,
        model=request.model,
    )
    return NormalizationResponse.from_result(result)
