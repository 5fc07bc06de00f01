"""Shape classification for parsed webhook payloads.

Checks run in a fixed order: EMPTY, then ERROR, then STRUCTURED, with
RAW_TEXT as the fallback. A payload carrying both an error marker and
content keys is therefore reported as ERROR.
"""

import json
from typing import Any, Optional

from contentlab.normalization.schema import CONTENT_KEYS, PayloadKind

WORKFLOW_ERROR_MARKER = "error in workflow"


def is_content_object(value: Any) -> bool:
    """Check whether a value is an object with a recognized content key."""
    return isinstance(value, dict) and any(key in value for key in CONTENT_KEYS)


def _is_empty(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return len(value) == 0
    if isinstance(value, str):
        return not value.strip()
    return False


def _is_error(value: Any) -> bool:
    if isinstance(value, dict):
        if value.get("error"):
            return True
        message = value.get("message")
        return isinstance(message, str) and "error" in message.lower()
    if isinstance(value, str):
        return WORKFLOW_ERROR_MARKER in value.lower()
    return False


def classify(value: Any) -> PayloadKind:
    """Classify an already-parsed JSON value.

    Args:
        value: Object, array, string or primitive.

    Returns:
        The PayloadKind tag for the value.
    """
    if _is_empty(value):
        return PayloadKind.EMPTY

    if _is_error(value):
        return PayloadKind.ERROR

    if is_content_object(value):
        return PayloadKind.STRUCTURED
    if isinstance(value, list) and is_content_object(value[0]):
        return PayloadKind.STRUCTURED

    return PayloadKind.RAW_TEXT


def extract_error_message(value: Any) -> Optional[str]:
    """Return the human-readable text behind an ERROR classification.

    Args:
        value: A value that classified as ERROR.

    Returns:
        The error text, or None if the value carries no error marker.
    """
    if isinstance(value, str):
        return value.strip() if WORKFLOW_ERROR_MARKER in value.lower() else None
    if not isinstance(value, dict):
        return None

    error = value.get("error")
    if error:
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        try:
            return json.dumps(error, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError):
            return "Unknown error"

    message = value.get("message")
    if isinstance(message, str) and "error" in message.lower():
        return message
    return None
