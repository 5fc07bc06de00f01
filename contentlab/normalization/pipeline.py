"""Normalization pipeline for webhook and LLM responses.

Turns an arbitrary payload into a NormalizationResult in five steps: parse,
unwrap one layer of n8n indirection, classify, map to ContentBundle, and
retain the raw text. Malformed input degrades to a weaker kind
(STRUCTURED, then RAW_TEXT, then EMPTY) and never raises.
"""

import json
from typing import Any, Optional, Union

import structlog

from contentlab.monitoring.metrics import record_normalization
from contentlab.normalization.classifier import (
    classify,
    extract_error_message,
    is_content_object,
)
from contentlab.normalization.extractors import extract_fenced_block, try_parse_json
from contentlab.normalization.mapper import to_bundle
from contentlab.normalization.schema import (
    ContentBundle,
    NormalizationContext,
    NormalizationResult,
    PayloadKind,
)

logger = structlog.get_logger(__name__)

MAX_UNWRAP_DEPTH = 1

RawPayload = Union[str, bytes, ContentBundle, list, dict, Any]


def _output_string(value: Any) -> Optional[str]:
    """Return the wrapped ``output`` string, or None if value is not a wrapper."""
    if isinstance(value, list) and len(value) == 1:
        value = value[0]
        if isinstance(value, dict) and isinstance(value.get("output"), str):
            return value["output"]
        return None
    if isinstance(value, dict) and len(value) == 1 and isinstance(value.get("output"), str):
        return value["output"]
    return None


def _resolve_string(text: str) -> Any:
    fenced = extract_fenced_block(text)
    if fenced is not None:
        parsed = try_parse_json(fenced)
        if parsed is not None:
            return parsed

    stripped = text.strip()
    if stripped.startswith(("{", "[")):
        parsed = try_parse_json(stripped)
        if parsed is not None:
            return parsed

    return text


def unwrap(value: Any, depth: int = 0) -> Any:
    """Resolve one layer of indirection before classification.

    Handles ``[{"output": "..."}]``, ``{"output": "..."}`` and bare strings.
    The candidate string is tried as a fenced JSON block, then as direct
    JSON if it looks like an object or array, and is otherwise returned
    as-is.

    Args:
        value: Parsed payload.
        depth: Current unwrap depth.

    Returns:
        The resolved value, or the input unchanged if nothing applies.
    """
    if depth >= MAX_UNWRAP_DEPTH:
        return value

    if isinstance(value, str):
        candidate = value
    else:
        candidate = _output_string(value)
        if candidate is None:
            return value

    resolved = _resolve_string(candidate)
    return unwrap(resolved, depth + 1)


def _dumps(value: Any, indent: Optional[int] = None) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, indent=indent, default=str)
    except (TypeError, ValueError, RecursionError):
        pass
    try:
        return repr(value)
    except RecursionError:
        return f"<{type(value).__name__}>"


def _coerce_input(raw: RawPayload) -> tuple[Any, str]:
    """Return (value to classify, raw text to retain)."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        parsed = try_parse_json(raw)
        return (raw if parsed is None else parsed), raw

    if isinstance(raw, ContentBundle):
        raw = [raw]
    if isinstance(raw, (list, tuple)) and raw and all(
        isinstance(item, ContentBundle) for item in raw
    ):
        value = [item.to_payload() for item in raw]
        return value, _dumps(value)

    return raw, _dumps(raw)


def _map_bundles(value: Any, context: NormalizationContext) -> list[ContentBundle]:
    if isinstance(value, dict):
        return [to_bundle(value, context)]
    return [to_bundle(item, context) for item in value if is_content_object(item)]


def _payload_title(value: Any) -> str:
    if isinstance(value, dict) and isinstance(value.get("title"), str):
        return value["title"].strip()
    return ""


def _build_result(
    raw: RawPayload,
    context: NormalizationContext,
) -> NormalizationResult:
    value, raw_text = _coerce_input(raw)
    value = unwrap(value)
    kind = classify(value)

    bundles: list[ContentBundle] = []
    error_message = None
    display_text = ""

    if kind is PayloadKind.STRUCTURED:
        bundles = _map_bundles(value, context)
    elif kind is PayloadKind.ERROR:
        error_message = extract_error_message(value)
        display_text = error_message or ""
    elif kind is PayloadKind.RAW_TEXT:
        display_text = value if isinstance(value, str) else _dumps(value, indent=2)

    if bundles:
        title = bundles[0].title
    else:
        title = _payload_title(value) or context.title

    return NormalizationResult(
        kind=kind,
        bundles=bundles,
        raw_text=raw_text,
        title=title,
        error_message=error_message,
        display_text=display_text,
    )


def normalize(
    raw: RawPayload,
    context: Optional[NormalizationContext] = None,
) -> NormalizationResult:
    """Normalize a webhook or LLM response into a NormalizationResult.

    Args:
        raw: Response text or bytes, an already-parsed JSON value, a
            ContentBundle, or a list of bundles.
        context: Defaults for topic area and title.

    Returns:
        NormalizationResult. Never raises for payload-shape problems.
    """
    context = context or NormalizationContext()

    try:
        result = _build_result(raw, context)
    except Exception as e:
        logger.error(
            "normalization_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        text = text if isinstance(text, str) else _dumps(text)
        return NormalizationResult(
            kind=PayloadKind.RAW_TEXT,
            raw_text=text,
            title=context.title,
            display_text=text,
        )

    logger.debug(
        "normalization_completed",
        kind=result.kind.value,
        bundle_count=len(result.bundles),
        raw_length=len(result.raw_text),
    )
    return result


class NormalizationPipeline:
    """Normalizer bound to a default context.

    Records a Prometheus counter per outcome, so route handlers and
    services can share one instance.
    """

    def __init__(self, context: Optional[NormalizationContext] = None):
        """Initialize the pipeline.

        Args:
            context: Default topic area and title for every call.
        """
        self.context = context or NormalizationContext()

    def normalize(
        self,
        raw: RawPayload,
        context: Optional[NormalizationContext] = None,
    ) -> NormalizationResult:
        """Normalize a payload, falling back to the bound context.

        Args:
            raw: Payload accepted by ``normalize()``.
            context: Overrides the bound context for this call.

        Returns:
            NormalizationResult.
        """
        result = normalize(raw, context or self.context)
        record_normalization(result.kind.value)
        return result
