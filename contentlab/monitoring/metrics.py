"""
Prometheus metrics for ContentLab observability.

Provides counters and histograms for normalization outcomes, webhook
round-trips, keyword/generation collectors and content-library writes.

Usage:
    from contentlab.monitoring.metrics import track_webhook_request

    with track_webhook_request("content") as ctx:
        text = await client.send(payload)
        ctx["status"] = "success"

    # Or manually
    NORMALIZATION_TOTAL.labels(kind="structured").inc()
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from starlette.applications import Starlette
from starlette.responses import Response
from starlette.routing import Route


# =============================================================================
# Metric Definitions
# =============================================================================

# Normalization metrics
NORMALIZATION_TOTAL = Counter(
    "contentlab_normalization_total",
    "Total normalized payloads by resulting kind",
    ["kind"],
)

# Webhook metrics
WEBHOOK_REQUEST_DURATION = Histogram(
    "contentlab_webhook_request_duration_seconds",
    "Duration of n8n webhook round-trips in seconds",
    ["webhook_type", "status"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 180.0],
)

WEBHOOK_REQUEST_TOTAL = Counter(
    "contentlab_webhook_request_total",
    "Total n8n webhook requests",
    ["webhook_type", "status"],
)

# Collector metrics (SEMrush, OpenAI)
COLLECTOR_OPERATIONS = Counter(
    "contentlab_collector_operations_total",
    "Total collector operations",
    ["collector", "operation", "status"],
)

COLLECTOR_LATENCY = Histogram(
    "contentlab_collector_latency_seconds",
    "Latency of collector operations",
    ["collector", "operation"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

# Content library metrics
LIBRARY_WRITES_TOTAL = Counter(
    "contentlab_library_writes_total",
    "Total content library writes",
    ["status"],
)


# =============================================================================
# Tracking Context Managers
# =============================================================================


@contextmanager
def track_webhook_request(webhook_type: str) -> Generator[dict, None, None]:
    """
    Context manager to track webhook request duration and status.

    The status label defaults to "error" and is switched to "success" by
    the caller, or set to a more specific value such as "timeout".

    Usage:
        with track_webhook_request("keywords") as ctx:
            response = await http.post(url, json=body)
            ctx["status"] = "success"
    """
    start_time = time.perf_counter()
    context = {"status": "error"}
    try:
        yield context
    finally:
        duration = time.perf_counter() - start_time
        status = str(context.get("status", "error"))
        WEBHOOK_REQUEST_DURATION.labels(
            webhook_type=webhook_type,
            status=status,
        ).observe(duration)
        WEBHOOK_REQUEST_TOTAL.labels(
            webhook_type=webhook_type,
            status=status,
        ).inc()


@contextmanager
def track_collector_operation(
    collector: str,
    operation: str,
) -> Generator[None, None, None]:
    """
    Context manager to track collector operations.

    Usage:
        with track_collector_operation("semrush", "search_keywords"):
            keywords = await collector.search_keywords(keyword="crm")
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        COLLECTOR_OPERATIONS.labels(
            collector=collector,
            operation=operation,
            status=status,
        ).inc()
        COLLECTOR_LATENCY.labels(
            collector=collector,
            operation=operation,
        ).observe(duration)


def record_normalization(kind: str) -> None:
    """Record one normalization outcome."""
    NORMALIZATION_TOTAL.labels(kind=kind).inc()


def record_library_write(status: str) -> None:
    """Record a content library write ("success" or "error")."""
    LIBRARY_WRITES_TOTAL.labels(status=status).inc()


# =============================================================================
# Metrics Endpoint
# =============================================================================


async def metrics_endpoint(request) -> Response:
    """Prometheus metrics endpoint handler."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


def get_metrics_app() -> Starlette:
    """
    Get a Starlette app for serving metrics.

    Mount this at /metrics in the main app:
        app.mount("/metrics", get_metrics_app())
    """
    return Starlette(
        routes=[
            Route("/", metrics_endpoint),
        ]
    )
