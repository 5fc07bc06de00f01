"""Canonical schema for normalized content.

Provides the PayloadKind enum, the ContentBundle model every display and
persistence component consumes, and the NormalizationResult returned by the
pipeline. Attributes are snake_case; the camelCase aliases are the canonical
wire names, and models accept either form on input.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PayloadKind(str, Enum):
    """Classification outcomes of the normalization pipeline."""

    STRUCTURED = "structured"
    RAW_TEXT = "raw_text"
    EMPTY = "empty"
    ERROR = "error"

    # Alias: the classifier calls unrecognized payloads "raw strings".
    RAW_STRING = "raw_text"


# Payload keys that mark an object as AI content.
CONTENT_KEYS: tuple[str, ...] = (
    "pillarContent",
    "supportContent",
    "supportPages",
    "socialMediaPosts",
    "socialMedia",
    "socialPosts",
    "emailSeries",
    "email",
    "emailCampaign",
    "reasoning",
)


class EmailMessage(BaseModel):
    """One email in an email series."""

    subject: str = ""
    body: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")


class ContentBundle(BaseModel):
    """Canonical normalized unit of generated content.

    Every sequence field is always a list, never None.
    """

    topic_area: str = Field(default="", alias="topicArea")
    title: str = ""
    pillar_content: list[str] = Field(default_factory=list, alias="pillarContent")
    support_content: list[str] = Field(default_factory=list, alias="supportContent")
    meta_tags: list[str] = Field(default_factory=list, alias="metaTags")
    social_media_posts: list[str] = Field(default_factory=list, alias="socialMediaPosts")
    email_series: list[EmailMessage] = Field(default_factory=list, alias="emailSeries")
    reasoning: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @property
    def is_present(self) -> bool:
        """True if at least one content sequence is non-empty."""
        return bool(
            self.pillar_content
            or self.support_content
            or self.meta_tags
            or self.social_media_posts
            or self.email_series
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the canonical camelCase field names."""
        return self.model_dump(by_alias=True, mode="json")


class NormalizationContext(BaseModel):
    """Caller-supplied defaults for fields a payload may omit."""

    topic_area: str = ""
    title: str = ""

    model_config = ConfigDict(frozen=True)


class NormalizationResult(BaseModel):
    """Top-level output of the normalization pipeline.

    Created fresh per webhook round-trip and never mutated.
    """

    kind: PayloadKind
    bundles: list[ContentBundle] = Field(default_factory=list)
    raw_text: str = Field("", description="Original input, always retained for debugging")
    title: str = ""
    error_message: Optional[str] = Field(
        None, description="Embedded error text when kind is ERROR"
    )
    display_text: str = Field(
        "", description="Text for a raw-content view when no bundle could be built"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_content(self) -> bool:
        """True if any bundle carries content."""
        return any(bundle.is_present for bundle in self.bundles)
