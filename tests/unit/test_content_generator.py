"""Unit tests for the OpenAI content suggestion generator."""

import json

import pytest
from openai import OpenAIError
from unittest.mock import AsyncMock, MagicMock

from contentlab.collectors.semrush import KeywordData
from contentlab.core.exceptions import ConfigurationError, ContentGenerationError
from contentlab.normalization import PayloadKind
from contentlab.services.content_generator import (
    ContentSuggestionGenerator,
    build_prompt,
    format_keywords,
)


def _completion(content):
    """Build a chat completion response with one choice."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def keywords(sample_keywords):
    return [KeywordData(**row) for row in sample_keywords]


@pytest.fixture
def openai_client():
    """AsyncOpenAI stand-in with a mocked completions endpoint."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


class TestPrompt:
    """Test prompt construction."""

    def test_format_keywords(self, keywords):
        """Keywords are listed with their metrics."""
        text = format_keywords(keywords)

        assert '"desk booking" (search volume: 2400, trend: up, competitiveness: 45)' in text
        assert text.count("search volume") == 2

    def test_build_prompt_with_topic(self, keywords):
        """A topic area adds a focus line."""
        prompt = build_prompt(keywords, "Hybrid Work")

        assert "Focus area: Hybrid Work." in prompt
        assert '"pillarContent"' in prompt

    def test_build_prompt_without_topic(self, keywords):
        """Without a topic there is no focus line."""
        assert "Focus area" not in build_prompt(keywords)


class TestContentSuggestionGenerator:
    """Test completion handling."""

    def test_requires_api_key(self):
        """Without a key or client the generator cannot be built."""
        with pytest.raises(ConfigurationError):
            ContentSuggestionGenerator()

    @pytest.mark.asyncio
    async def test_generates_bundles(self, keywords, openai_client):
        """A JSON array reply becomes one bundle per topic group."""
        reply = json.dumps([
            {
                "topicArea": "Desk Booking",
                "pillarContent": ["Guide to desk booking"],
                "supportPages": ["Desk booking FAQ"],
                "metaTags": ["desk booking software"],
                "socialMedia": ["Book a desk in seconds"],
                "reasoning": "High volume",
            },
            {"topicArea": "Hot Desking", "pillarContent": "Hot desking 101"},
        ])
        openai_client.chat.completions.create.return_value = _completion(reply)
        generator = ContentSuggestionGenerator(client=openai_client, model="gpt-test")

        result = await generator.generate_suggestions(keywords, topic_area="Hybrid Work")

        assert result.kind is PayloadKind.STRUCTURED
        assert [b.topic_area for b in result.bundles] == ["Desk Booking", "Hot Desking"]
        first = result.bundles[0]
        assert first.support_content == ["Desk booking FAQ"]
        assert first.social_media_posts == ["Book a desk in seconds"]
        assert first.reasoning == {"summary": "High volume"}

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_fenced_reply(self, keywords, openai_client):
        """Replies wrapped in a code fence are unwrapped."""
        reply = '```json\n[{"pillarContent": ["Fenced"]}]\n```'
        openai_client.chat.completions.create.return_value = _completion(reply)
        generator = ContentSuggestionGenerator(client=openai_client)

        result = await generator.generate_suggestions(keywords, topic_area="Hybrid Work")

        assert result.bundles[0].pillar_content == ["Fenced"]
        assert result.bundles[0].topic_area == "Hybrid Work"

    @pytest.mark.asyncio
    async def test_prose_reply_is_raw_text(self, keywords, openai_client):
        """Unstructured replies are kept as raw text."""
        openai_client.chat.completions.create.return_value = _completion("Sorry, I can't.")
        generator = ContentSuggestionGenerator(client=openai_client)

        result = await generator.generate_suggestions(keywords)

        assert result.kind is PayloadKind.RAW_TEXT
        assert result.raw_text == "Sorry, I can't."

    @pytest.mark.asyncio
    async def test_empty_reply(self, keywords, openai_client):
        """An empty reply is a generation error."""
        openai_client.chat.completions.create.return_value = _completion(None)
        generator = ContentSuggestionGenerator(client=openai_client)

        with pytest.raises(ContentGenerationError, match="No content received"):
            await generator.generate_suggestions(keywords)

    @pytest.mark.asyncio
    async def test_no_choices(self, keywords, openai_client):
        """A response without choices is a generation error."""
        response = MagicMock()
        response.choices = []
        openai_client.chat.completions.create.return_value = response
        generator = ContentSuggestionGenerator(client=openai_client)

        with pytest.raises(ContentGenerationError):
            await generator.generate_suggestions(keywords)

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self, keywords, openai_client):
        """OpenAI errors surface as ContentGenerationError."""
        openai_client.chat.completions.create.side_effect = OpenAIError("invalid model")
        generator = ContentSuggestionGenerator(client=openai_client)

        with pytest.raises(ContentGenerationError, match="invalid model"):
            await generator.generate_suggestions(keywords)

        assert openai_client.chat.completions.create.await_count == 1
