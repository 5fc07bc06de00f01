"""Content and keyword services for ContentLab."""

from contentlab.services.content_generator import (
    ContentSuggestionGenerator,
    build_prompt,
    format_keywords,
)
from contentlab.services.keyword_research import (
    KeywordResearchResult,
    KeywordResearchService,
)

__all__ = [
    "ContentSuggestionGenerator",
    "build_prompt",
    "format_keywords",
    "KeywordResearchResult",
    "KeywordResearchService",
]
