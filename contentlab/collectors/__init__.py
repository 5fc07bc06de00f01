"""External data collectors for ContentLab.

Currently a single source: SEMrush keyword reports.
"""

from contentlab.collectors.semrush import (
    KeywordData,
    KeywordSearchRequest,
    SemrushCollector,
    extract_domain,
    no_data_message,
    parse_keywords,
    trend_for_volume,
    validate_request,
)

__all__ = [
    "KeywordData",
    "KeywordSearchRequest",
    "SemrushCollector",
    "extract_domain",
    "no_data_message",
    "parse_keywords",
    "trend_for_volume",
    "validate_request",
]
