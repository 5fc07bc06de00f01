"""Bundle field mapper.

Maps the many field-name variants produced by n8n workflows and LLM prompts
onto the canonical ContentBundle. Aliases are first-match-wins per target
field, and a missing field always yields an empty list.
"""

import json
import re
from typing import Any, Iterable, Optional

from contentlab.normalization.schema import (
    ContentBundle,
    EmailMessage,
    NormalizationContext,
)

# Target field -> payload keys, in priority order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "pillar_content": ("pillarContent",),
    "support_content": ("supportContent", "supportPages"),
    "social_media_posts": ("socialMediaPosts", "socialMedia", "socialPosts"),
    "email_series": ("emailSeries", "email", "emailCampaign"),
    "meta_tags": ("metaTags",),
}

# Keys tried, in order, when a content item is an object instead of a string
TEXT_KEYS: tuple[str, ...] = ("content", "title", "text", "body", "post")

_SUBJECT_LABEL = re.compile(r"^\s*(?:subject\s*:\s*)+", re.IGNORECASE)
_BLANK_LINE = re.compile(r"\n[ \t]*\n")


def _first_present(value: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if value.get(key) is not None:
            return value[key]
    return None


def _coerce_text(item: Any) -> Optional[str]:
    """Turn a single content item into display text."""
    if item is None:
        return None
    if isinstance(item, str):
        return item if item.strip() else None
    if isinstance(item, dict):
        for key in TEXT_KEYS:
            candidate = item.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate
        try:
            return json.dumps(item, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError):
            return None
    if isinstance(item, bool):
        return str(item).lower()
    if isinstance(item, (int, float)):
        return str(item)
    try:
        return json.dumps(item, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        return None


def as_text_list(value: Any) -> list[str]:
    """Materialize a string, object or list as a list of strings."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    texts = []
    for item in items:
        text = _coerce_text(item)
        if text is not None:
            texts.append(text)
    return texts


def _strip_subject_label(subject: str) -> str:
    return _SUBJECT_LABEL.sub("", subject, count=1).strip()


def parse_email_text(text: str) -> EmailMessage:
    """Split an email string into subject and body.

    The first blank line separates subject from body. Without one, a first
    line labelled ``Subject:`` is taken as the subject; otherwise the whole
    string is the body.
    """
    text = text.strip()
    parts = _BLANK_LINE.split(text, maxsplit=1)
    if len(parts) == 2:
        return EmailMessage(subject=_strip_subject_label(parts[0]), body=parts[1].strip())

    first_line, _, rest = text.partition("\n")
    if _SUBJECT_LABEL.match(first_line):
        return EmailMessage(subject=_strip_subject_label(first_line), body=rest.strip())
    return EmailMessage(subject="", body=text)


def _coerce_email(item: Any) -> Optional[EmailMessage]:
    if isinstance(item, EmailMessage):
        return item
    if isinstance(item, str):
        email = parse_email_text(item) if item.strip() else None
    elif isinstance(item, dict):
        subject = item.get("subject")
        body = _first_present(item, ("body", "content", "text"))
        email = EmailMessage(
            subject=_strip_subject_label(subject) if isinstance(subject, str) else "",
            body=(body if isinstance(body, str) else _coerce_text(body) or "").strip(),
        )
    else:
        text = _coerce_text(item)
        email = EmailMessage(body=text) if text else None

    if email is None or not (email.subject or email.body):
        return None
    return email


def as_email_list(value: Any) -> list[EmailMessage]:
    """Materialize an email series as a list of EmailMessage."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    emails = []
    for item in items:
        email = _coerce_email(item)
        if email is not None:
            emails.append(email)
    return emails


def _as_reasoning(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        return {"summary": value} if value.strip() else {}
    text = _coerce_text(value)
    return {"summary": text} if text else {}


def _as_label(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def to_bundle(
    value: dict[str, Any],
    context: Optional[NormalizationContext] = None,
) -> ContentBundle:
    """Map a content object onto the canonical ContentBundle.

    Args:
        value: Object carrying one or more recognized content keys.
        context: Defaults for topic area and title.

    Returns:
        A ContentBundle with every sequence field materialized.
    """
    context = context or NormalizationContext()

    payload_title = _as_label(value.get("title"))
    payload_topic = _as_label(value.get("topicArea"))

    return ContentBundle(
        topic_area=payload_topic or context.topic_area,
        title=payload_title or payload_topic or context.title or context.topic_area,
        pillar_content=as_text_list(_first_present(value, FIELD_ALIASES["pillar_content"])),
        support_content=as_text_list(_first_present(value, FIELD_ALIASES["support_content"])),
        meta_tags=as_text_list(_first_present(value, FIELD_ALIASES["meta_tags"])),
        social_media_posts=as_text_list(
            _first_present(value, FIELD_ALIASES["social_media_posts"])
        ),
        email_series=as_email_list(_first_present(value, FIELD_ALIASES["email_series"])),
        reasoning=_as_reasoning(value.get("reasoning")),
    )
