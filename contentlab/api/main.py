"""ContentLab API - Main FastAPI Application.

This module provides the main FastAPI application for ContentLab.
It includes:
- CORS middleware configuration
- API key authentication
- API versioning (/api/v1)
- Health check endpoints and Prometheus metrics
- Content normalization, generation, keyword and library endpoints

Usage:
    # Run with uvicorn
    uvicorn contentlab.api.main:app --reload

    # Or run directly
    python -m contentlab.api.main
"""

import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from contentlab import __version__
from contentlab.api.dependencies import reset_dependencies
from contentlab.api.models import ErrorResponse, ValidationErrorResponse, ValidationErrorDetail
from contentlab.api.routes.content import router as content_router
from contentlab.api.routes.health import router as health_router, set_server_start_time
from contentlab.api.routes.keywords import router as keywords_router
from contentlab.api.routes.library import router as library_router
from contentlab.config.settings import get_settings
from contentlab.core.exceptions import (
    ConfigurationError,
    ContentLabError,
    ContentNotFoundError,
    InvalidRequestError,
    PersistenceError,
    TransportError,
    WebhookTimeoutError,
)
from contentlab.monitoring.metrics import get_metrics_app

logger = structlog.get_logger(__name__)

# API metadata for OpenAPI documentation
API_TITLE = "ContentLab API"
API_DESCRIPTION = """
## Content Marketing Backend

ContentLab pulls keyword data, requests AI-generated marketing copy from
OpenAI or n8n agent workflows, and stores the results in a content library.

### Features

- **Normalization**: Any n8n or LLM reply becomes a canonical content bundle
- **Keyword Research**: Related and organic keywords from SEMrush
- **Content Workflows**: n8n webhooks for suggestions, generation and adjustment
- **Content Library**: Store, search and browse generated content

### Authentication

API key authentication is available. Set `API_KEY_ENABLED=true` and `API_KEY=your-secret-key`
in environment to require X-API-Key header on all requests.
"""


# =============================================================================
# API Key Authentication Middleware
# =============================================================================


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Middleware to validate API key for all requests except health/docs endpoints.

    Enable by setting API_KEY_ENABLED=true and API_KEY=<secret> in environment.
    """

    # Endpoints that don't require authentication
    PUBLIC_PATHS = {"/", "/health", "/health/live", "/health/ready", "/docs", "/redoc", "/openapi.json"}

    # Prometheus scrape endpoint, public unless metrics_require_api_key is set
    METRICS_PATH = "/metrics"

    async def dispatch(self, request: Request, call_next):
        settings = get_settings()

        # Skip auth if disabled
        if not settings.api_key_enabled:
            return await call_next(request)

        # Skip auth for public paths
        if request.url.path in self.PUBLIC_PATHS:
            return await call_next(request)

        path = request.url.path
        is_metrics = path == self.METRICS_PATH or path.startswith(self.METRICS_PATH + "/")
        if is_metrics and not settings.metrics_require_api_key:
            return await call_next(request)

        # Validate API key
        api_key = request.headers.get("X-API-Key")
        expected_key = settings.api_key.get_secret_value() if settings.api_key else None

        if not expected_key:
            logger.error("api_key_enabled_but_not_set")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Server misconfiguration: API key authentication enabled but no key configured"},
            )

        if not api_key:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Missing X-API-Key header"},
            )

        if api_key != expected_key:
            logger.warning("invalid_api_key_attempt", path=request.url.path)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Invalid API key"},
            )

        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Record start time for uptime reporting
    - Shutdown: Drop cached clients
    """
    logger.info("application_starting", version=__version__)
    set_server_start_time()
    logger.info("application_started")

    yield

    logger.info("application_stopping")
    reset_dependencies()
    logger.info("application_stopped")


# Create FastAPI application
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=[
        {
            "name": "Health",
            "description": "System health and status endpoints",
        },
        {
            "name": "Content",
            "description": "Normalization, n8n content workflows and OpenAI suggestions",
        },
        {
            "name": "Keywords",
            "description": "SEMrush keyword research",
        },
        {
            "name": "Library",
            "description": "Content library - store, search and remove generated content",
        },
    ],
)

# Configure CORS middleware (from settings)
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allowed_origins,
    allow_credentials=_settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key", "Accept"],
)

# Add API Key authentication middleware
app.add_middleware(APIKeyMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================


def status_for_error(exc: ContentLabError) -> int:
    """Map a ContentLab exception to an HTTP status code."""
    if isinstance(exc, WebhookTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, TransportError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, ContentNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PersistenceError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ConfigurationError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, InvalidRequestError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_type(exc: ContentLabError) -> str:
    name = type(exc).__name__.removesuffix("Error")
    return re.sub(r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).lower()


@app.exception_handler(ContentLabError)
async def contentlab_exception_handler(
    request: Request, exc: ContentLabError
) -> JSONResponse:
    """Handle domain errors with the mapped status code."""
    status_code = status_for_error(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=status_code,
        error=exc.message,
        error_type=type(exc).__name__,
    )

    response = ErrorResponse(
        error=_error_type(exc),
        message=exc.message,
        detail=str(exc.details) if exc.details and get_settings().debug else None,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with detailed response."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(ValidationErrorDetail(
            field=field,
            message=error["msg"],
            value=error.get("input"),
        ))

    response = ValidationErrorResponse(
        errors=errors,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    response = ErrorResponse(
        error="internal_server_error",
        message="An unexpected error occurred",
        detail=str(exc) if get_settings().debug else None,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Root endpoint - points to API documentation."""
    return {
        "name": API_TITLE,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "api": "/api/v1",
    }


# =============================================================================
# Include Routers
# =============================================================================

# Health endpoints at root level
app.include_router(health_router)

# Prometheus metrics
app.mount("/metrics", get_metrics_app())

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(content_router)
api_v1_router.include_router(keywords_router)
api_v1_router.include_router(library_router)

app.include_router(api_v1_router)


@app.get("/api/v1", include_in_schema=False)
async def api_v1_root() -> dict:
    """API v1 root - shows available endpoints."""
    return {
        "version": "v1",
        "endpoints": {
            "content": "/api/v1/content",
            "keywords": "/api/v1/keywords",
            "library": "/api/v1/library",
        },
        "documentation": "/docs",
    }


# =============================================================================
# Development Server
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "contentlab.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
