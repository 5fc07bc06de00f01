"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- isolated_settings: Fresh settings per test, without external credentials
- event_bus: Fresh global event bus
- mock_supabase: Supabase client whose query builder chains to itself
- sample_bundle_payload: Webhook payload in the canonical content shape
- sample_keywords: Keyword rows for content suggestion tests
"""

from unittest.mock import MagicMock

import pytest

from contentlab.config.settings import get_settings
from contentlab.core.events import get_event_bus, reset_event_bus

# Settings read from the environment that tests must not inherit
_ENV_KEYS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "OPENAI_API_KEY",
    "SEMRUSH_API_KEY",
    "KEYWORD_WEBHOOK_URL",
    "CONTENT_WEBHOOK_URL",
    "CUSTOM_KEYWORDS_WEBHOOK_URL",
    "CONTENT_ADJUSTMENT_WEBHOOK_URL",
    "WEBHOOK_ALLOWED_HOSTS",
    "API_KEY",
    "API_KEY_ENABLED",
    "METRICS_REQUIRE_API_KEY",
    "APP_ENV",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Clear credentials from the environment and the settings cache."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def event_bus():
    """Fresh global event bus, reset after the test."""
    reset_event_bus()
    yield get_event_bus()
    reset_event_bus()


def make_query(rows=None, error: Exception | None = None) -> MagicMock:
    """Build a PostgREST-style query builder mock.

    Every builder method returns the same mock, and execute() returns a
    response whose ``data`` is ``rows`` (or raises ``error``).
    """
    query = MagicMock()
    for method in ("select", "insert", "delete", "update", "eq", "order", "range", "limit"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=rows if rows is not None else [])
    return query


@pytest.fixture
def mock_supabase():
    """Supabase client mock; set ``mock_supabase.query`` rows per test."""
    client = MagicMock()
    client.query = make_query()
    client.table.return_value = client.query
    return client


@pytest.fixture
def sample_bundle_payload() -> dict:
    """Return a webhook payload in the canonical content shape."""
    return {
        "topicArea": "Hybrid Work",
        "pillarContent": "The Complete Guide to Hybrid Office Management",
        "supportContent": "How to run desk booking in a hybrid office",
        "socialMediaPosts": ["Hybrid work is here to stay.", "Five desk booking tips"],
        "emailSeries": [
            {"subject": "Welcome to hybrid", "body": "Here is how to get started."},
        ],
        "reasoning": {"pillarContent": "High-volume head term"},
    }


@pytest.fixture
def sample_keywords() -> list[dict]:
    """Return keyword rows as produced by the keyword source."""
    return [
        {"keyword": "desk booking", "volume": 2400, "difficulty": 45, "cpc": 3.2, "trend": "up"},
        {"keyword": "hot desking", "volume": 880, "difficulty": 38, "cpc": 2.1, "trend": "neutral"},
    ]
