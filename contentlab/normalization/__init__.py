"""Normalization of webhook and LLM responses.

Provides the canonical ContentBundle schema and the pipeline that coerces
arbitrary n8n or OpenAI payloads into it.
"""

from contentlab.normalization.schema import (
    CONTENT_KEYS,
    ContentBundle,
    EmailMessage,
    NormalizationContext,
    NormalizationResult,
    PayloadKind,
)
from contentlab.normalization.extractors import extract_fenced_block, try_parse_json
from contentlab.normalization.classifier import classify, extract_error_message
from contentlab.normalization.mapper import to_bundle
from contentlab.normalization.pipeline import (
    MAX_UNWRAP_DEPTH,
    NormalizationPipeline,
    normalize,
    unwrap,
)

__all__ = [
    "CONTENT_KEYS",
    "ContentBundle",
    "EmailMessage",
    "NormalizationContext",
    "NormalizationResult",
    "PayloadKind",
    "extract_fenced_block",
    "try_parse_json",
    "classify",
    "extract_error_message",
    "to_bundle",
    "MAX_UNWRAP_DEPTH",
    "NormalizationPipeline",
    "normalize",
    "unwrap",
]
