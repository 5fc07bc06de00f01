"""
Monitoring and observability for ContentLab.

Provides Prometheus metrics for normalization outcomes, webhook traffic,
collector calls and content-library writes.

Usage:
    from contentlab.monitoring import track_webhook_request, record_normalization

    with track_webhook_request("content") as ctx:
        ...
        ctx["status"] = "success"

    record_normalization("structured")
"""

from contentlab.monitoring.metrics import (
    NORMALIZATION_TOTAL,
    WEBHOOK_REQUEST_DURATION,
    WEBHOOK_REQUEST_TOTAL,
    COLLECTOR_OPERATIONS,
    COLLECTOR_LATENCY,
    LIBRARY_WRITES_TOTAL,
    track_webhook_request,
    track_collector_operation,
    record_normalization,
    record_library_write,
    get_metrics_app,
)

__all__ = [
    # Prometheus metrics
    "NORMALIZATION_TOTAL",
    "WEBHOOK_REQUEST_DURATION",
    "WEBHOOK_REQUEST_TOTAL",
    "COLLECTOR_OPERATIONS",
    "COLLECTOR_LATENCY",
    "LIBRARY_WRITES_TOTAL",
    # Context managers
    "track_webhook_request",
    "track_collector_operation",
    # Helper functions
    "record_normalization",
    "record_library_write",
    "get_metrics_app",
]
