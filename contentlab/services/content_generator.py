"""
Content Suggestion Generator.

Uses OpenAI chat completions to turn SEO keyword data into grouped content
recommendations (pillar content, support pages, meta tags, social posts).
The reply text is never parsed here: it goes through the normalization
pipeline like any webhook response.

Standalone usage:
    from contentlab.services.content_generator import ContentSuggestionGenerator
    generator = ContentSuggestionGenerator()
    result = await generator.generate_suggestions(keywords, topic_area="Hybrid work")
    for bundle in result.bundles:
        print(bundle.topic_area, bundle.pillar_content)
"""

from typing import Iterable, Optional

import structlog
from openai import (
    APIConnectionError,
    AsyncOpenAI,
    InternalServerError,
    OpenAIError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from contentlab.collectors.semrush import KeywordData
from contentlab.config.settings import get_settings
from contentlab.core.exceptions import ConfigurationError, ContentGenerationError
from contentlab.monitoring.metrics import track_collector_operation
from contentlab.normalization.pipeline import NormalizationPipeline
from contentlab.normalization.schema import NormalizationContext, NormalizationResult

logger = structlog.get_logger(__name__)


# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = (
    "You are a strategic content advisor for B2B SaaS companies. You analyze SEO "
    "data and provide specific, actionable content recommendations that drive "
    "business results."
)

SUGGESTION_PROMPT = """
You are a senior content strategist. Analyze these SEO keywords in depth: {keywords}.
{topic_line}
For each logical topic group in these keywords, create high-value content recommendations:

1. Create a descriptive topic area name that captures the essence of the keyword group
2. Provide 2-3 pillar content ideas (comprehensive guides of 1500+ words) with detailed descriptions
3. Suggest 3-4 supporting page ideas (focused content that addresses specific aspects)
4. Create 2-3 meta tag ideas optimized for SEO and click-through rates
5. Develop 2-3 engaging social media post ideas with platform-specific formatting
6. Include an insightful reasoning section explaining the strategic value of your suggestions

Ensure all recommendations are:
- Tailored to business professionals and decision-makers
- Focused on solving real business challenges
- Aligned with current industry trends

Format your response as a JSON array where each object has the following structure:
{{
  "topicArea": "Specific, descriptive name for the topic area",
  "pillarContent": ["Detailed pillar content idea 1", "Detailed pillar content idea 2"],
  "supportPages": ["Specific support page idea 1", "Specific support page idea 2"],
  "metaTags": ["Optimized meta tag 1", "Optimized meta tag 2"],
  "socialMedia": ["Engaging social post idea 1", "Engaging social post idea 2"],
  "reasoning": "Strategic explanation of why these content pieces will resonate"
}}

IMPORTANT: Return ONLY the JSON array with no additional text, comments, or explanations.
"""

TEMPERATURE = 0.7


def format_keywords(keywords: Iterable[KeywordData]) -> str:
    """Render keywords as the comma-separated list used in the prompt."""
    return ", ".join(
        f'"{k.keyword}" (search volume: {k.volume or "unknown"}, '
        f'trend: {k.trend or "unknown"}, competitiveness: {k.difficulty or "unknown"})'
        for k in keywords
    )


def build_prompt(keywords: Iterable[KeywordData], topic_area: str = "") -> str:
    """Build the user prompt for a keyword set."""
    topic_line = f"Focus area: {topic_area}.\n" if topic_area else ""
    return SUGGESTION_PROMPT.format(
        keywords=format_keywords(keywords),
        topic_line=topic_line,
    )


# =============================================================================
# Generator
# =============================================================================


class ContentSuggestionGenerator:
    """Generates content suggestions from keyword data with OpenAI."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
        pipeline: Optional[NormalizationPipeline] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            api_key: OpenAI API key. Defaults to settings.openai_api_key.
            model: Chat model. Defaults to settings.openai_model.
            client: Preconfigured AsyncOpenAI client (used in tests).
            pipeline: Normalizer applied to the reply text.
        """
        settings = get_settings()
        self._api_key = api_key or (
            settings.openai_api_key.get_secret_value()
            if settings.openai_api_key
            else None
        )
        if client is None and not self._api_key:
            raise ConfigurationError("OpenAI API key not configured", "openai_api_key")

        self.model = model or settings.openai_model
        self.max_tokens = settings.openai_max_tokens
        self._client = client
        self._pipeline = pipeline or NormalizationPipeline()

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create the OpenAI async client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    @retry(
        retry=retry_if_exception_type((RateLimitError, APIConnectionError, InternalServerError)),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        stop=stop_after_attempt(3),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "openai_retry",
            attempt=retry_state.attempt_number,
            wait=retry_state.next_action.sleep,
        ),
    )
    async def _complete(self, prompt: str, model: str) -> str:
        """Run one chat completion and return the reply text."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=TEMPERATURE,
            max_tokens=self.max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def generate_suggestions(
        self,
        keywords: list[KeywordData],
        topic_area: str = "",
        model: Optional[str] = None,
    ) -> NormalizationResult:
        """
        Generate content suggestions for a keyword set.

        Args:
            keywords: Keyword rows to analyze.
            topic_area: Optional focus area; also the default bundle topic.
            model: Overrides the configured model for this call.

        Returns:
            NormalizationResult with one bundle per suggested topic group.

        Raises:
            ContentGenerationError: On API failure or an empty reply.
        """
        model = model or self.model
        prompt = build_prompt(keywords, topic_area)

        logger.info(
            "content_suggestions_requested",
            model=model,
            keyword_count=len(keywords),
            topic_area=topic_area or None,
        )

        try:
            with track_collector_operation("openai", "generate_suggestions"):
                content = await self._complete(prompt, model)
        except OpenAIError as e:
            logger.error("content_suggestions_failed", model=model, error=str(e))
            raise ContentGenerationError(
                f"OpenAI API error: {e}",
                {"model": model},
            ) from e

        if not content.strip():
            raise ContentGenerationError("No content received from OpenAI", {"model": model})

        result = self._pipeline.normalize(
            content,
            NormalizationContext(topic_area=topic_area, title=topic_area),
        )

        logger.info(
            "content_suggestions_generated",
            model=model,
            kind=result.kind.value,
            bundle_count=len(result.bundles),
            response_length=len(content),
        )
        return result
