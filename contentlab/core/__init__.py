"""
Core infrastructure modules for ContentLab.

Provides common utilities used across the application:
- exceptions: Standardized exception hierarchy
- events: Typed in-process publish/subscribe bus
"""

from contentlab.core.exceptions import (
    ContentLabError,
    RetryableError,
    PermanentError,
    TransportError,
    WebhookTimeoutError,
    WebhookHTTPError,
    WebhookRequestError,
    KeywordSourceError,
    KeywordSourceRateLimitError,
    ContentGenerationError,
    PersistenceError,
    ContentNotFoundError,
    ConfigurationError,
    InvalidRequestError,
)

from contentlab.core.events import (
    Event,
    ContentUpdated,
    EventBus,
    Subscription,
    get_event_bus,
    reset_event_bus,
)

__all__ = [
    # Exceptions
    "ContentLabError",
    "RetryableError",
    "PermanentError",
    "TransportError",
    "WebhookTimeoutError",
    "WebhookHTTPError",
    "WebhookRequestError",
    "KeywordSourceError",
    "KeywordSourceRateLimitError",
    "ContentGenerationError",
    "PersistenceError",
    "ContentNotFoundError",
    "ConfigurationError",
    "InvalidRequestError",
    # Events
    "Event",
    "ContentUpdated",
    "EventBus",
    "Subscription",
    "get_event_bus",
    "reset_event_bus",
]
