"""Lexical extraction and tolerant JSON parsing.

Both functions are total: they return None instead of raising so callers can
fall back to raw-text handling.
"""

import json
import re
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)

# ```json blocks are preferred over untagged ``` blocks.
FENCE = "```"
_JSON_OPENER = re.compile(r"```json", re.IGNORECASE)


def _block_after(text: str, start: int) -> Optional[str]:
    end = text.find(FENCE, start)
    if end == -1:
        return None
    return text[start:end].strip()


def extract_fenced_block(text: str) -> Optional[str]:
    """Return the trimmed inner text of the first fenced code block.

    A block tagged ``json`` wins over an untagged one. The content is not
    parsed. Fences are located with plain substring search, so the cost is
    linear in the input length even when a fence is never closed.

    Args:
        text: Text that may contain a Markdown code fence.

    Returns:
        Inner block text, or None if there is no fenced block.
    """
    if not isinstance(text, str):
        return None

    opener = _JSON_OPENER.search(text)
    if opener is not None:
        block = _block_after(text, opener.end())
        if block is not None:
            return block

    start = text.find(FENCE)
    if start == -1:
        return None
    return _block_after(text, start + len(FENCE))


def _clean_escaped_json(text: str) -> str:
    # Best-effort repair for over-escaped output from some n8n nodes. Lossy:
    # legitimately escaped newlines and backslashes are altered too.
    return text.replace("\\n", "").replace('\\"', '"').replace("\\", "\\\\")


def try_parse_json(text: str) -> Optional[Any]:
    """Parse JSON, retrying once after the escape-cleanup pass.

    Args:
        text: Candidate JSON text.

    Returns:
        The parsed value, or None if both attempts fail. A literal JSON
        ``null`` is also reported as None.
    """
    if not isinstance(text, str):
        return None

    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass

    try:
        value = json.loads(_clean_escaped_json(text))
    except (ValueError, RecursionError):
        return None

    logger.debug("json_parsed_after_cleanup", length=len(text))
    return value
