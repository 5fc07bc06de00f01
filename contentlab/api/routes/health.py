"""Health check endpoints for the ContentLab API.

Reports Supabase connectivity and which external integrations are configured.
"""

import time
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from contentlab import __version__
from contentlab.api.models import HealthCheckResponse, HealthStatus
from contentlab.config.settings import get_settings, Settings

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time: Optional[float] = None


def set_server_start_time() -> None:
    """Set the server start time. Called on application startup."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime_seconds() -> Optional[float]:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return None
    return time.time() - _server_start_time


async def check_supabase_health(settings: Settings) -> HealthStatus:
    """Check Supabase database connectivity."""
    if not settings.supabase_configured:
        return HealthStatus(status="unhealthy", message="Supabase is not configured")

    start_time = time.time()
    try:
        from contentlab.api.dependencies import get_supabase

        client = get_supabase()
        # Simple query to check connectivity
        client.table("content_library").select("id").limit(1).execute()
        latency = (time.time() - start_time) * 1000

        return HealthStatus(
            status="healthy",
            latency_ms=round(latency, 2),
            message="Connected to Supabase",
        )
    except Exception as e:
        latency = (time.time() - start_time) * 1000
        logger.error("supabase_health_check_failed", error=str(e))
        return HealthStatus(
            status="unhealthy",
            latency_ms=round(latency, 2),
            message=f"Supabase connection failed: {str(e)[:100]}",
        )


def check_integration(name: str, configured: bool) -> HealthStatus:
    """Report whether an external integration has credentials or a URL."""
    if configured:
        return HealthStatus(status="healthy", message=f"{name} configured")
    return HealthStatus(status="degraded", message=f"{name} not configured")


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health Check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(
    settings: Settings = Depends(get_settings),
) -> HealthCheckResponse:
    """
    Perform a health check of all system components.

    Returns the status of:
    - Supabase (content library)
    - OpenAI, SEMrush and the n8n webhooks (configuration only)
    """
    services = {
        "supabase": await check_supabase_health(settings),
        "openai": check_integration("OpenAI", bool(settings.openai_api_key)),
        "semrush": check_integration("SEMrush", bool(settings.semrush_api_key)),
        "webhooks": check_integration(
            "n8n webhooks",
            bool(settings.keyword_webhook_url or settings.content_webhook_url),
        ),
    }

    # Determine overall status
    statuses = [s.status for s in services.values()]
    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif services["supabase"].status == "unhealthy":
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    return HealthCheckResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        services=services,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check for container orchestration.",
)
async def liveness() -> dict:
    """Returns 200 if the service is alive."""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness(
    settings: Settings = Depends(get_settings),
) -> dict:
    """Returns 200 only if the content library database is reachable."""
    supabase_status = await check_supabase_health(settings)

    if supabase_status.status == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail="Service not ready: database unavailable",
        )

    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
