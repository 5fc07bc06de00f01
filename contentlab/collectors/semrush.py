"""SEMrush keyword data collector.

Fetches related keywords for a seed phrase (``phrase_related`` report) or the
organic keywords of a domain (``domain_organic`` report) and parses the
semicolon-separated response into KeywordData records.

API Reference: https://developer.semrush.com/api/v3/analytics/keyword-reports/
"""

import re
from typing import Literal, Optional
from urllib.parse import urlparse

import httpx
import structlog
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from contentlab.config.settings import get_settings
from contentlab.core.exceptions import (
    ConfigurationError,
    InvalidRequestError,
    KeywordSourceError,
    KeywordSourceRateLimitError,
)
from contentlab.monitoring.metrics import track_collector_operation

logger = structlog.get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================

SEMRUSH_API_BASE = "https://api.semrush.com/"

# Keyword, search volume, CPC, keyword difficulty
EXPORT_COLUMNS = "Ph,Nq,Cp,Kd"

DEFAULT_DIFFICULTY = 50

# Bounds for the number of rows requested from SEMrush
MIN_DISPLAY_LIMIT = 30
MAX_DISPLAY_LIMIT = 500

DOMAIN_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{1,61}[a-zA-Z0-9](\.[a-zA-Z]{2,})+$")


# =============================================================================
# Models
# =============================================================================


Trend = Literal["up", "neutral", "down"]


class KeywordData(BaseModel):
    """One keyword row from the keyword source."""

    keyword: str = Field(..., description="Keyword phrase")
    volume: int = Field(0, ge=0, description="Monthly search volume")
    difficulty: int = Field(DEFAULT_DIFFICULTY, description="Keyword difficulty (0-100)")
    cpc: float = Field(0.0, description="Cost per click in USD")
    trend: Trend = Field("down", description="Derived from search volume")


class KeywordSearchRequest(BaseModel):
    """Validated keyword search parameters."""

    keyword: str = ""
    domain: str = ""
    limit: int = 100
    topic_area: str = "general"

    @property
    def report_type(self) -> str:
        return "phrase_related" if self.keyword else "domain_organic"

    @property
    def cache_key(self) -> str:
        if self.keyword:
            return f"phrase-related-{self.keyword}"
        if self.domain:
            return f"domain-{self.domain}"
        return "general-search"


# =============================================================================
# Parsing Helpers
# =============================================================================


def trend_for_volume(volume: int) -> Trend:
    """Derive a trend label from search volume."""
    if volume > 1000:
        return "up"
    if volume > 100:
        return "neutral"
    return "down"


def _leading_int(value: str) -> Optional[int]:
    match = re.match(r"\s*([+-]?\d+)", value)
    return int(match.group(1)) if match else None


def _leading_float(value: str) -> Optional[float]:
    match = re.match(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", value)
    return float(match.group(1)) if match else None


def parse_keywords(csv_data: str) -> list[KeywordData]:
    """Parse a SEMrush semicolon-separated response.

    The first line is a header and is skipped. Blank lines, lines with fewer
    than four columns, and rows without a keyword are dropped.

    Args:
        csv_data: Raw response body.

    Returns:
        Parsed keyword rows in response order.
    """
    lines = csv_data.strip().split("\n")
    if len(lines) <= 1:
        return []

    keywords = []
    for line in lines[1:]:
        line = line.strip()
        if not line:
            continue

        columns = line.split(";")
        if len(columns) < 4:
            continue

        keyword = columns[0].replace('"', "").strip()
        if not keyword:
            continue

        volume = _leading_int(columns[1]) or 0
        cpc = _leading_float(columns[2]) or 0.0
        difficulty = _leading_int(columns[3]) or DEFAULT_DIFFICULTY

        keywords.append(
            KeywordData(
                keyword=keyword,
                volume=max(volume, 0),
                difficulty=difficulty,
                cpc=round(cpc, 2),
                trend=trend_for_volume(volume),
            )
        )

    return keywords


def extract_domain(value: str) -> str:
    """Extract a bare domain from a URL or domain string.

    Strips the scheme, path and a leading ``www.``.

    Raises:
        InvalidRequestError: If the result is not a valid domain.
    """
    domain = value.strip()
    if "://" in domain:
        domain = urlparse(domain).hostname or ""
    elif "/" in domain:
        domain = domain.split("/")[0]

    if domain.startswith("www."):
        domain = domain[4:]

    if not DOMAIN_PATTERN.match(domain):
        logger.warning("semrush_invalid_domain", value=value)
        raise InvalidRequestError("Invalid URL or domain format", field="domain")
    return domain


def validate_request(
    keyword: Optional[str] = "",
    domain: Optional[str] = "",
    limit: int = 100,
    topic_area: Optional[str] = None,
) -> KeywordSearchRequest:
    """Validate search parameters.

    At least one of keyword or domain is required. The domain, when given,
    is reduced with ``extract_domain``.

    Raises:
        InvalidRequestError: If neither is given or the domain is invalid.
    """
    keyword = (keyword or "").strip()
    domain = (domain or "").strip()

    if not keyword and not domain:
        raise InvalidRequestError("Either keyword or domain parameter is required")

    return KeywordSearchRequest(
        keyword=keyword,
        domain=extract_domain(domain) if domain else "",
        limit=limit,
        topic_area=topic_area or "general",
    )


# =============================================================================
# SEMrush Collector
# =============================================================================


class SemrushCollector:
    """Async collector for SEMrush keyword reports.

    Example:
        async with SemrushCollector() as collector:
            keywords = await collector.search_keywords(keyword="project management")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        database: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the collector.

        Args:
            api_key: SEMrush API key. If not provided, loads from settings.
            database: Regional database. Defaults to settings ("us").
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used in tests).
        """
        settings = get_settings()
        self._api_key = api_key or (
            settings.semrush_api_key.get_secret_value()
            if settings.semrush_api_key
            else None
        )
        if not self._api_key:
            raise ConfigurationError("SEMrush API key not configured", "semrush_api_key")

        self._database = database or settings.semrush_database
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "SemrushCollector":
        """Enter async context manager."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    def _build_params(self, request: KeywordSearchRequest) -> dict[str, str]:
        params = {
            "type": request.report_type,
            "key": self._api_key,
            "database": self._database,
            "export_columns": EXPORT_COLUMNS,
            "display_limit": str(
                max(MIN_DISPLAY_LIMIT, min(MAX_DISPLAY_LIMIT, request.limit))
            ),
        }
        if request.keyword:
            params["phrase"] = request.keyword
        else:
            params["domain"] = request.domain
        return params

    @retry(
        retry=retry_if_exception_type(KeywordSourceRateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _fetch(self, request: KeywordSearchRequest) -> str:
        """Fetch a raw report.

        Raises:
            KeywordSourceRateLimitError: On 429 or 5xx (retried).
            KeywordSourceError: On other failures or an ERROR response.
        """
        client = await self._ensure_client()

        try:
            response = await client.get(SEMRUSH_API_BASE, params=self._build_params(request))
        except httpx.TimeoutException as e:
            logger.error("semrush_timeout", report=request.report_type, error=str(e))
            raise KeywordSourceError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            logger.error("semrush_request_error", report=request.report_type, error=str(e))
            raise KeywordSourceError(f"Request failed: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(
                "semrush_unavailable",
                status_code=response.status_code,
                report=request.report_type,
            )
            raise KeywordSourceRateLimitError(
                f"SEMrush API request failed: {response.status_code}",
                {"status_code": response.status_code},
            )
        if response.is_error:
            logger.error(
                "semrush_api_error",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise KeywordSourceError(
                f"SEMrush API request failed: {response.status_code}",
                {"status_code": response.status_code},
            )

        text = response.text
        if "ERROR" in text:
            logger.error("semrush_error_response", body=text[:200])
            raise KeywordSourceError(f"SEMrush API error: {text.strip()}")
        return text

    async def fetch_keywords(self, request: KeywordSearchRequest) -> list[KeywordData]:
        """Fetch and parse every keyword SEMrush returns for a validated request.

        The report is requested with ``display_limit`` clamped to 30..500, so
        the result may hold more than ``request.limit`` rows.

        Raises:
            KeywordSourceError: On API failure.
        """
        logger.info(
            "semrush_search_started",
            report=request.report_type,
            cache_key=request.cache_key,
            topic_area=request.topic_area,
            limit=request.limit,
        )

        with track_collector_operation("semrush", "search_keywords"):
            raw = await self._fetch(request)

        keywords = parse_keywords(raw)
        if not keywords:
            logger.info("semrush_no_keywords", cache_key=request.cache_key)
        else:
            logger.info(
                "semrush_search_completed",
                cache_key=request.cache_key,
                count=len(keywords),
            )
        return keywords

    async def search_keywords(
        self,
        keyword: str = "",
        domain: str = "",
        limit: int = 100,
        topic_area: str = "general",
    ) -> list[KeywordData]:
        """Search keywords for a seed phrase or a domain.

        Args:
            keyword: Seed phrase; takes precedence over domain.
            domain: Domain or URL whose organic keywords to fetch.
            limit: Maximum number of keywords returned.
            topic_area: Topic label for logging and storage.

        Returns:
            Up to ``limit`` keywords.

        Raises:
            InvalidRequestError: If neither keyword nor domain is valid.
            KeywordSourceError: On API failure.
        """
        request = validate_request(keyword, domain, limit, topic_area)
        keywords = await self.fetch_keywords(request)
        return keywords[: request.limit]


def no_data_message(keyword: str = "", domain: str = "") -> str:
    """User-facing explanation for an empty keyword result."""
    if keyword:
        return f'No keywords found related to "{keyword}". Try different or broader search terms.'
    if domain:
        return (
            f"No organic keywords found for {domain} - "
            "domain may not have sufficient organic visibility"
        )
    return "No keywords found for the search criteria"
