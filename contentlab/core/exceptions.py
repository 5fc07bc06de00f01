"""
Core exception hierarchy for ContentLab.

Provides standardized exception types with categorization for retry logic.
Payload-shape problems are never raised: the normalization pipeline degrades
them into a weaker NormalizationResult instead. Only transport, persistence,
configuration and request-validation failures use these exceptions.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class ContentLabError(Exception):
    """Base exception for all ContentLab errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryableError(ContentLabError):
    """
    Transient errors that may succeed on a later attempt.

    Examples: Rate limits, temporary upstream unavailability.
    """

    pass


class PermanentError(ContentLabError):
    """
    Errors that won't be fixed by retrying.

    Examples: Invalid input, missing configuration, authentication failures.
    """

    pass


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(ContentLabError):
    """Base exception for failures talking to an external service."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.service = service
        super().__init__(f"[{service}] {message}", details)


class WebhookTimeoutError(TransportError):
    """Raised when a webhook call exceeds the client-side timeout."""

    def __init__(self, timeout_seconds: float, details: Optional[dict[str, Any]] = None):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            "webhook",
            f"Webhook request timed out after {timeout_seconds:g} seconds",
            details,
        )


class WebhookHTTPError(TransportError):
    """Raised when a webhook answers with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        details: Optional[dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.body = body
        message = f"HTTP error! status: {status_code}."
        if body:
            message = f"{message} {body[:500]}"
        super().__init__("webhook", message, details)


class WebhookRequestError(TransportError):
    """Raised on network-level webhook failures (DNS, connection reset, ...)."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("webhook", message, details)


class KeywordSourceError(TransportError):
    """Raised when the keyword data source fails or reports an error."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("semrush", message, details)


class KeywordSourceRateLimitError(KeywordSourceError, RetryableError):
    """Raised when the keyword data source rate limits or is temporarily down."""

    pass


class ContentGenerationError(TransportError):
    """Raised when the LLM provider fails to produce a completion."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("openai", message, details)


# =============================================================================
# Persistence Errors
# =============================================================================


class PersistenceError(ContentLabError):
    """Raised when the content library cannot read or write a record."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.operation = operation
        super().__init__(f"[{operation}] {message}", details)


class ContentNotFoundError(PersistenceError, PermanentError):
    """Raised when a library record does not exist."""

    def __init__(self, content_id: str):
        self.content_id = content_id
        super().__init__(
            "get",
            f"Content {content_id} not found",
            {"content_id": content_id},
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PermanentError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)


# =============================================================================
# Request Errors
# =============================================================================


class InvalidRequestError(PermanentError):
    """Raised when caller-supplied input fails validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        details = {"field": field} if field else None
        super().__init__(message, details)
