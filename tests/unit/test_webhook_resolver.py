"""Unit tests for webhook type and URL resolution."""

import pytest

from contentlab.webhooks.resolver import (
    RequestType,
    WebhookType,
    WebhookUrls,
    load_webhook_urls,
    parse_webhook_type,
    resolve_webhook_url,
)
from tests.conftest import make_query


@pytest.fixture
def urls():
    return WebhookUrls(
        keywords="https://n8n.test/keywords",
        content="https://n8n.test/content",
        custom_keywords="https://n8n.test/custom",
        content_adjustment="https://n8n.test/adjust",
    )


class TestResolveWebhookUrl:
    """Test webhook selection priority."""

    def test_defaults_to_keywords(self, urls):
        """Without hints the keywords webhook is used."""
        assert resolve_webhook_url(urls) == (WebhookType.KEYWORDS, "https://n8n.test/keywords")

    def test_explicit_webhook_type(self, urls):
        """An explicit webhook type selects its URL."""
        webhook_type, url = resolve_webhook_url(urls, webhook_type="content")

        assert webhook_type is WebhookType.CONTENT
        assert url == "https://n8n.test/content"

    @pytest.mark.parametrize(
        "request_type,expected",
        [
            (RequestType.CUSTOM_KEYWORDS, WebhookType.CUSTOM_KEYWORDS),
            ("contentSuggestions", WebhookType.CONTENT),
            ("contentAdjustment", WebhookType.CONTENT_ADJUSTMENT),
        ],
    )
    def test_request_type_overrides_webhook_type(self, urls, request_type, expected):
        """Pinned request types win over the explicit webhook type."""
        webhook_type, _ = resolve_webhook_url(
            urls, request_type=request_type, webhook_type="keywords"
        )

        assert webhook_type is expected

    def test_unpinned_request_type_keeps_webhook_type(self, urls):
        """Request types without a pinned webhook do not change the choice."""
        webhook_type, _ = resolve_webhook_url(
            urls, request_type="keywordAnalysis", webhook_type="content"
        )

        assert webhook_type is WebhookType.CONTENT

    def test_custom_url_wins(self, urls):
        """A custom URL overrides every configured URL."""
        webhook_type, url = resolve_webhook_url(
            urls,
            request_type="contentSuggestions",
            custom_url="https://example.test/hook",
        )

        assert url == "https://example.test/hook"
        assert webhook_type is WebhookType.CONTENT

    def test_unknown_types_fall_back(self, urls):
        """Unknown type names resolve to the keywords webhook."""
        webhook_type, _ = resolve_webhook_url(urls, request_type="bogus", webhook_type="bogus")

        assert webhook_type is WebhookType.KEYWORDS

    def test_unconfigured_url_is_empty(self):
        """An unconfigured webhook resolves to an empty URL."""
        assert resolve_webhook_url(WebhookUrls(), webhook_type="content") == (
            WebhookType.CONTENT,
            "",
        )


class TestParseWebhookType:
    """Test type name parsing."""

    def test_legacy_alias(self):
        """The legacy keyword-sync name maps to keywords."""
        assert parse_webhook_type("keyword-sync") is WebhookType.KEYWORDS

    def test_unknown(self):
        """Unknown and non-string values yield None."""
        assert parse_webhook_type("other") is None
        assert parse_webhook_type(None) is None


class TestAllowedHosts:
    """Test which one-off URLs may be requested."""

    def test_configured_hosts(self):
        """Hosts of configured webhooks are allowed, case-insensitively."""
        urls = WebhookUrls(content="https://N8N.example.com/webhook/content")

        assert urls.allows("https://n8n.example.com/webhook/other")
        assert not urls.allows("https://example.com/webhook/other")

    def test_rejects_other_schemes_and_garbage(self):
        """Only http(s) URLs with a host are allowed."""
        urls = WebhookUrls(content="https://n8n.example.com/content")

        assert not urls.allows("ftp://n8n.example.com/content")
        assert not urls.allows("n8n.example.com/content")
        assert not urls.allows("http://[n8n.example.com")

    def test_extra_hosts_from_settings(self, monkeypatch):
        """WEBHOOK_ALLOWED_HOSTS extends the allowed hosts."""
        monkeypatch.setenv("WEBHOOK_ALLOWED_HOSTS", '["staging.n8n.test"]')

        urls = load_webhook_urls()

        assert urls.allowed_hosts() == {"staging.n8n.test"}
        assert urls.allows("https://staging.n8n.test/hook")


class TestLoadWebhookUrls:
    """Test settings and database sources."""

    def test_from_settings(self, monkeypatch):
        """Environment settings populate the URLs."""
        monkeypatch.setenv("CONTENT_WEBHOOK_URL", "https://env.test/content")

        urls = load_webhook_urls()

        assert urls.content == "https://env.test/content"
        assert urls.keywords == ""

    def test_database_overrides(self, monkeypatch, mock_supabase):
        """Active webhook_configs rows override settings, newest first."""
        monkeypatch.setenv("CONTENT_WEBHOOK_URL", "https://env.test/content")
        monkeypatch.setenv("KEYWORD_WEBHOOK_URL", "https://env.test/keywords")
        mock_supabase.query.execute.return_value.data = [
            {"type": "content", "url": "https://db.test/content-new"},
            {"type": "content", "url": "https://db.test/content-old"},
            {"webhook_type": "custom-keywords", "webhook_url": "https://db.test/custom"},
            {"type": "unknown", "url": "https://db.test/ignored"},
            {"type": "content-adjustment", "url": ""},
        ]

        urls = load_webhook_urls(mock_supabase)

        assert urls.content == "https://db.test/content-new"
        assert urls.custom_keywords == "https://db.test/custom"
        assert urls.keywords == "https://env.test/keywords"
        assert urls.content_adjustment == ""
        mock_supabase.table.assert_called_with("webhook_configs")
        mock_supabase.query.eq.assert_called_with("is_active", True)
        mock_supabase.query.order.assert_called_with("created_at", desc=True)

    def test_legacy_type_row(self, mock_supabase):
        """Rows stored as keyword-sync configure the keywords webhook."""
        mock_supabase.query.execute.return_value.data = [
            {"type": "keyword-sync", "url": "https://db.test/sync"},
        ]

        assert load_webhook_urls(mock_supabase).keywords == "https://db.test/sync"

    def test_database_error_falls_back(self, monkeypatch, mock_supabase):
        """A failing query keeps the settings URLs."""
        monkeypatch.setenv("CONTENT_WEBHOOK_URL", "https://env.test/content")
        mock_supabase.table.return_value = make_query(error=RuntimeError("db down"))

        urls = load_webhook_urls(mock_supabase)

        assert urls.content == "https://env.test/content"
