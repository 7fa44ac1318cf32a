"""DataForSEO API integration client for keyword metrics and SERP data.

Features:
- Async HTTP client using httpx (direct API calls)
- Single attempt per call: no retries, no circuit breaker
- Request/response logging per requirements
- Masks API credentials in all logs
- Cost usage logging for quota tracking

Endpoints used:
- Google Ads search volume (keyword metrics per location)
- Google organic SERP (live, regular)

ERROR LOGGING REQUIREMENTS:
- Log all outbound API calls with endpoint, timing
- Log request/response bodies at DEBUG level (truncate large responses)
- Log API quota/cost usage if available
- Mask API credentials in all logs

Failures never raise out of the public methods; they come back as a result
object with success=False so callers decide how far the failure reaches.
"""

import base64
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import httpx

from seo_platform.core.config import get_settings
from seo_platform.core.logging import dataforseo_logger, get_logger

logger = get_logger(__name__)

# DataForSEO API base URL
DATAFORSEO_API_URL = "https://api.dataforseo.com"

SEARCH_VOLUME_ENDPOINT = "/v3/keywords_data/google_ads/search_volume/live"
SERP_ENDPOINT = "/v3/serp/google/organic/live/regular"

# DataForSEO status code for a successful request or task
STATUS_OK = 20000

# Location codes for supported countries
COUNTRY_TO_LOCATION: dict[str, int] = {
    "UK": 2826,
    "US": 2840,
    "UAE": 2784,
    "AU": 2036,
    "CA": 2124,
    "SG": 2702,
    "HK": 2344,
}

DEFAULT_LOCATION_CODE = COUNTRY_TO_LOCATION["UK"]


def location_for_country(country: str | None) -> int:
    """Location code for a country; unknown countries fall back to UK."""
    return COUNTRY_TO_LOCATION.get((country or "").upper(), DEFAULT_LOCATION_CODE)


@dataclass
class KeywordVolumeData:
    """Search volume data for a single keyword."""

    keyword: str
    search_volume: int | None = None
    cpc: float | None = None
    competition: float | None = None
    keyword_difficulty: float | None = None


@dataclass
class KeywordVolumeResult:
    """Result of a keyword volume lookup operation."""

    success: bool
    keywords: list[KeywordVolumeData] = field(default_factory=list)
    error: str | None = None
    cost: float | None = None
    duration_ms: float = 0.0
    request_id: str | None = None


@dataclass
class SerpResult:
    """A single organic SERP item."""

    position: int | None
    url: str
    title: str | None = None
    domain: str | None = None


@dataclass
class SerpSearchResult:
    """Result of a SERP search operation."""

    success: bool
    keyword: str
    results: list[SerpResult] = field(default_factory=list)
    error: str | None = None
    cost: float | None = None
    duration_ms: float = 0.0
    request_id: str | None = None


class DataForSEOError(Exception):
    """Raised internally when a call fails at any level."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.request_id = request_id


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_competition(item: dict[str, Any]) -> float | None:
    """Competition as a 0-1 number.

    The search volume endpoint reports competition as a level string
    (LOW/MEDIUM/HIGH) alongside a 0-100 competition_index.
    """
    competition = item.get("competition")
    if isinstance(competition, str):
        index = _to_float(item.get("competition_index"))
        return index / 100 if index is not None else None
    return _to_float(competition)


def _organic_items(
    result: list[Any], request_id: str | None
) -> list[dict[str, Any]]:
    """Organic items of the first SERP result, in provider order.

    Raises:
        DataForSEOError: The result entry or its items list is malformed
    """
    if not result:
        return []
    first = result[0]
    if not isinstance(first, dict):
        raise DataForSEOError("Unexpected response shape", request_id=request_id)
    items = first.get("items") or []
    if not isinstance(items, list):
        raise DataForSEOError("Unexpected response shape", request_id=request_id)
    return [
        item
        for item in items
        if isinstance(item, dict) and item.get("type") == "organic"
    ]


class DataForSEOClient:
    """Async client for DataForSEO API.

    Authentication:
    DataForSEO uses HTTP Basic Auth with login (email) and password.
    Missing credentials are reported per call, not at construction.
    """

    def __init__(
        self,
        api_login: str | None = None,
        api_password: str | None = None,
        language_code: str | None = None,
        serp_depth: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize DataForSEO client.

        Args:
            api_login: DataForSEO API login (email). Defaults to settings.
            api_password: DataForSEO API password. Defaults to settings.
            language_code: Language code sent with every task. Defaults to settings.
            serp_depth: Number of SERP results requested. Defaults to settings.
            transport: Optional httpx transport, used by tests.
        """
        settings = get_settings()

        self._api_login = api_login or settings.dataforseo_api_login
        self._api_password = api_password or settings.dataforseo_api_password
        self._language_code = language_code or settings.dataforseo_language_code
        self._serp_depth = serp_depth or settings.serp_depth
        self._transport = transport

        # HTTP client (created lazily)
        self._client: httpx.AsyncClient | None = None
        self._available = bool(self._api_login and self._api_password)

    @property
    def available(self) -> bool:
        """Check if DataForSEO credentials are configured."""
        return self._available

    def _get_auth_header(self) -> str:
        credentials = f"{self._api_login}:{self._api_password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return f"Basic {encoded}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=DATAFORSEO_API_URL,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "Authorization": self._get_auth_header(),
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("DataForSEO client closed")

    async def _make_request(
        self, endpoint: str, payload: list[dict[str, Any]]
    ) -> tuple[list[dict[str, Any]], float | None, str]:
        """POST one task list and return the first task's result array.

        Returns:
            Tuple of (task_result, cost, request_id)

        Raises:
            DataForSEOError: On transport failure, non-2xx status, a non-20000
                request or task status, or a malformed body
        """
        request_id = str(uuid.uuid4())[:8]

        if not self._available:
            raise DataForSEOError(
                "DataForSEO credentials not configured", request_id=request_id
            )

        client = await self._get_client()
        start_time = time.monotonic()
        dataforseo_logger.api_call_start(endpoint, request_id=request_id)
        dataforseo_logger.request_body(endpoint, payload)

        try:
            response = await client.post(endpoint, json=payload)
        except httpx.HTTPError as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            dataforseo_logger.api_call_error(
                endpoint, duration_ms, None, str(e), request_id=request_id
            )
            raise DataForSEOError(f"Request failed: {e}", request_id=request_id) from e

        duration_ms = (time.monotonic() - start_time) * 1000

        if response.status_code >= 400:
            error_msg = f"HTTP {response.status_code}"
            dataforseo_logger.api_call_error(
                endpoint,
                duration_ms,
                response.status_code,
                error_msg,
                request_id=request_id,
            )
            raise DataForSEOError(
                error_msg, status_code=response.status_code, request_id=request_id
            )

        try:
            response_data = response.json()
        except ValueError as e:
            dataforseo_logger.api_call_error(
                endpoint,
                duration_ms,
                response.status_code,
                "Malformed JSON response",
                request_id=request_id,
            )
            raise DataForSEOError(
                "Malformed JSON response", request_id=request_id
            ) from e

        dataforseo_logger.response_body(endpoint, response_data)

        if not isinstance(response_data, dict):
            raise DataForSEOError("Unexpected response shape", request_id=request_id)

        if response_data.get("status_code") != STATUS_OK:
            error_msg = (
                f"DataForSEO error {response_data.get('status_code')}: "
                f"{response_data.get('status_message')}"
            )
            dataforseo_logger.api_call_error(
                endpoint,
                duration_ms,
                response.status_code,
                error_msg,
                request_id=request_id,
            )
            raise DataForSEOError(error_msg, request_id=request_id)

        tasks = response_data.get("tasks")
        if not isinstance(tasks, list) or not tasks or not isinstance(tasks[0], dict):
            dataforseo_logger.api_call_error(
                endpoint,
                duration_ms,
                response.status_code,
                "Unexpected response shape",
                request_id=request_id,
            )
            raise DataForSEOError("Unexpected response shape", request_id=request_id)

        task = tasks[0]
        if task.get("status_code") != STATUS_OK:
            error_msg = (
                f"Task error {task.get('status_code')}: {task.get('status_message')}"
            )
            dataforseo_logger.api_call_error(
                endpoint,
                duration_ms,
                response.status_code,
                error_msg,
                request_id=request_id,
            )
            raise DataForSEOError(error_msg, request_id=request_id)

        result = task.get("result") or []
        if not isinstance(result, list):
            raise DataForSEOError("Unexpected response shape", request_id=request_id)

        cost = response_data.get("cost")
        dataforseo_logger.api_call_success(
            endpoint, duration_ms, cost=cost, request_id=request_id
        )
        if cost is not None:
            dataforseo_logger.cost_usage(cost, endpoint=endpoint)

        return result, cost, request_id

    async def get_keyword_volume(
        self, keywords: list[str], location_code: int
    ) -> KeywordVolumeResult:
        """Get search volume data for a list of keywords in one location.

        Args:
            keywords: Keywords to look up, sent as a single task
            location_code: DataForSEO location code (e.g. 2826 for UK)

        Returns:
            KeywordVolumeResult with one entry per record the provider returned
        """
        if not keywords:
            return KeywordVolumeResult(success=False, error="No keywords provided")

        start_time = time.monotonic()
        dataforseo_logger.keyword_search_start(keywords, location_code)

        payload = [
            {
                "keywords": keywords,
                "location_code": location_code,
                "language_code": self._language_code,
            }
        ]

        try:
            items, cost, request_id = await self._make_request(
                SEARCH_VOLUME_ENDPOINT, payload
            )
        except DataForSEOError as e:
            return KeywordVolumeResult(
                success=False,
                error=str(e),
                request_id=e.request_id,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

        keyword_results = [
            KeywordVolumeData(
                keyword=item.get("keyword") or "",
                search_volume=item.get("search_volume"),
                cpc=_to_float(item.get("cpc")),
                competition=_parse_competition(item),
                keyword_difficulty=_to_float(item.get("keyword_difficulty")),
            )
            for item in items
            if isinstance(item, dict)
        ]

        return KeywordVolumeResult(
            success=True,
            keywords=keyword_results,
            cost=cost,
            request_id=request_id,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    async def get_serp(self, keyword: str, location_code: int) -> SerpSearchResult:
        """Get organic Google results for one keyword.

        Args:
            keyword: Search query
            location_code: DataForSEO location code

        Returns:
            SerpSearchResult holding organic items only, in provider order
        """
        start_time = time.monotonic()
        dataforseo_logger.serp_search_start(keyword, location_code)

        payload = [
            {
                "keyword": keyword,
                "location_code": location_code,
                "language_code": self._language_code,
                "depth": self._serp_depth,
            }
        ]

        try:
            result, cost, request_id = await self._make_request(SERP_ENDPOINT, payload)
            items = _organic_items(result, request_id)
        except DataForSEOError as e:
            return SerpSearchResult(
                success=False,
                keyword=keyword,
                error=str(e),
                request_id=e.request_id,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )

        serp_results = [
            SerpResult(
                position=item.get("rank_absolute"),
                url=item.get("url") or "",
                title=item.get("title"),
                domain=item.get("domain"),
            )
            for item in items
        ]

        return SerpSearchResult(
            success=True,
            keyword=keyword,
            results=serp_results,
            cost=cost,
            request_id=request_id,
            duration_ms=(time.monotonic() - start_time) * 1000,
        )


# Global DataForSEO client instance
dataforseo_client: DataForSEOClient | None = None


async def init_dataforseo() -> DataForSEOClient:
    """Initialize the global DataForSEO client."""
    global dataforseo_client
    if dataforseo_client is None:
        dataforseo_client = DataForSEOClient()
        if dataforseo_client.available:
            logger.info("DataForSEO client initialized")
        else:
            logger.info("DataForSEO not configured (missing API credentials)")
    return dataforseo_client


async def close_dataforseo() -> None:
    """Close the global DataForSEO client."""
    global dataforseo_client
    if dataforseo_client:
        await dataforseo_client.close()
        dataforseo_client = None


async def get_dataforseo() -> DataForSEOClient:
    """Dependency for getting DataForSEO client.

    Usage:
        @router.post("/enrich/keywords")
        async def enrich_keywords(
            client: DataForSEOClient = Depends(get_dataforseo)
        ):
            ...
    """
    global dataforseo_client
    if dataforseo_client is None:
        await init_dataforseo()
    return dataforseo_client  # type: ignore[return-value]
