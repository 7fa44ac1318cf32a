"""Keyword metrics and SERP enrichment.

Both services resolve a working set of keywords, call DataForSEO and write
snapshot rows. They differ in how far a provider failure reaches:

- KeywordEnrichmentService: one call per country group; any failure fails
  the whole request with ExternalApiError.
- SerpEnrichmentService: one call per keyword; a failure becomes an error
  entry for that keyword and processing continues.

Snapshot writes are best-effort. A failed write is logged and skipped and
never changes the response.

ERROR LOGGING REQUIREMENTS:
- Log validation failures with field names and rejected values
- Include keyword counts and location codes in all service logs
- Add timing logs for operations >1 second
"""

import time
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.config import get_settings
from seo_platform.core.errors import AppError, ExternalApiError, ValidationError
from seo_platform.core.logging import db_logger, get_logger
from seo_platform.integrations.dataforseo import (
    DataForSEOClient,
    KeywordVolumeData,
    location_for_country,
)
from seo_platform.repositories.competitor import CompetitorRepository
from seo_platform.repositories.keyword import KeywordRepository
from seo_platform.repositories.keyword_metric import KeywordMetricRepository
from seo_platform.repositories.ranking import RankingRepository
from seo_platform.schemas.enrich import (
    KeywordEnrichRequest,
    KeywordMetricsResult,
    SerpKeywordError,
    SerpKeywordResult,
)
from seo_platform.services.domain import extract_domain, is_primary_domain

logger = get_logger(__name__)

# Threshold for logging slow operations (in milliseconds)
SLOW_OPERATION_THRESHOLD_MS = 1000

MAX_KEYWORDS_PER_METRICS_REQUEST = 100
MAX_KEYWORDS_PER_SERP_REQUEST = 50
METRICS_CEILING_MESSAGE = (
    f"Maximum {MAX_KEYWORDS_PER_METRICS_REQUEST} keywords per request"
)
SERP_CEILING_MESSAGE = (
    f"Maximum {MAX_KEYWORDS_PER_SERP_REQUEST} keywords per SERP request"
)


@dataclass
class WorkingKeyword:
    """A keyword to enrich. Inline keywords have no id and are never stored."""

    id: str | None
    keyword_text: str
    country: str


def group_by_country(
    keywords: list[WorkingKeyword],
) -> dict[str, list[WorkingKeyword]]:
    """Partition keywords by country.

    Groups appear in first-occurrence order and keep the input order within
    each group.
    """
    groups: dict[str, list[WorkingKeyword]] = {}
    for keyword in keywords:
        groups.setdefault(keyword.country, []).append(keyword)
    return groups


def match_keyword(
    record_keyword: str, group: list[WorkingKeyword]
) -> WorkingKeyword | None:
    """First entry in the group whose text equals the record's, ignoring case."""
    target = record_keyword.lower()
    for keyword in group:
        if keyword.keyword_text.lower() == target:
            return keyword
    return None


def _check_ceiling(count: int, maximum: int, message: str) -> None:
    if count > maximum:
        logger.warning(
            "Enrichment request over keyword limit",
            extra={"received": count, "maximum": maximum},
        )
        raise ValidationError(message, {"received": count, "maximum": maximum})


def _metrics_entry(record: KeywordVolumeData, country: str) -> KeywordMetricsResult:
    return KeywordMetricsResult(
        keyword=record.keyword,
        country=country,
        search_volume=record.search_volume or 0,
        difficulty=record.keyword_difficulty or 0,
        cpc=record.cpc or 0,
        competition=record.competition or 0,
    )


class KeywordEnrichmentService:
    """Fetches search volume metrics and stores a snapshot per stored keyword."""

    def __init__(
        self,
        session: AsyncSession,
        client: DataForSEOClient,
        default_country: str | None = None,
    ) -> None:
        self.keywords = KeywordRepository(session)
        self.metrics = KeywordMetricRepository(session)
        self.client = client
        self.default_country = default_country or get_settings().default_country

    async def resolve(self, request: KeywordEnrichRequest) -> list[WorkingKeyword]:
        """Build the working set from ids (preferred) or inline keywords."""
        if request.keyword_ids is None and request.keywords is None:
            raise ValidationError("Must provide either keyword_ids or keywords array")

        working: list[WorkingKeyword] = []
        if request.keyword_ids:
            _check_ceiling(
                len(request.keyword_ids),
                MAX_KEYWORDS_PER_METRICS_REQUEST,
                METRICS_CEILING_MESSAGE,
            )
            stored = await self.keywords.get_many_by_ids(request.keyword_ids)
            working = [
                WorkingKeyword(id=kw.id, keyword_text=kw.keyword_text, country=kw.country)
                for kw in stored
            ]
        elif request.keywords:
            working = [
                WorkingKeyword(
                    id=None,
                    keyword_text=kw.text,
                    country=(kw.country or self.default_country).upper(),
                )
                for kw in request.keywords
            ]

        if not working:
            raise ValidationError("No keywords found to enrich")

        _check_ceiling(
            len(working),
            MAX_KEYWORDS_PER_METRICS_REQUEST,
            METRICS_CEILING_MESSAGE,
        )
        return working

    async def enrich(self, request: KeywordEnrichRequest) -> list[KeywordMetricsResult]:
        """Enrich the requested keywords and return one entry per provider record.

        Raises:
            ValidationError: Nothing to enrich or more than 100 keywords
            ExternalApiError: Any country group's provider call failed
        """
        start_time = time.monotonic()
        working = await self.resolve(request)
        groups = group_by_country(working)

        logger.info(
            "Starting keyword enrichment",
            extra={"keyword_count": len(working), "countries": list(groups)},
        )

        results: list[KeywordMetricsResult] = []
        for country, group in groups.items():
            location_code = location_for_country(country)
            response = await self.client.get_keyword_volume(
                [kw.keyword_text for kw in group], location_code
            )
            if not response.success:
                logger.error(
                    "Keyword metrics lookup failed",
                    extra={
                        "country": country,
                        "location_code": location_code,
                        "error": response.error,
                    },
                )
                raise ExternalApiError("DataForSEO", response.error or "Unknown error")

            for record in response.keywords:
                entry = _metrics_entry(record, country)
                matched = match_keyword(record.keyword, group)
                if matched is not None and matched.id is not None:
                    await self._store_metric(matched.id, entry)
                results.append(entry)

        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow keyword enrichment",
                extra={"duration_ms": round(duration_ms, 2), "groups": len(groups)},
            )

        logger.info(
            "Keyword enrichment complete",
            extra={"enriched": len(results), "duration_ms": round(duration_ms, 2)},
        )
        return results

    async def _store_metric(self, keyword_id: str, entry: KeywordMetricsResult) -> None:
        try:
            await self.metrics.add_metric(
                keyword_id=keyword_id,
                search_volume=entry.search_volume,
                difficulty=entry.difficulty,
                cpc=entry.cpc,
                competition=entry.competition,
            )
        except AppError as e:
            db_logger.write_skipped("keyword_metrics", 1, e)


class SerpEnrichmentService:
    """Fetches organic SERPs and stores ranking snapshots."""

    def __init__(
        self,
        session: AsyncSession,
        client: DataForSEOClient,
        primary_domain: str | None = None,
    ) -> None:
        self.keywords = KeywordRepository(session)
        self.competitors = CompetitorRepository(session)
        self.rankings = RankingRepository(session)
        self.client = client
        self.primary_domain = primary_domain or get_settings().primary_domain

    async def enrich(
        self, keyword_ids: list[str]
    ) -> tuple[list[SerpKeywordResult | SerpKeywordError], dict[str, Any]]:
        """Fetch SERPs for stored keywords.

        Returns:
            Tuple of (per-keyword entries, counts for the response meta)

        Raises:
            ValidationError: Empty input, more than 50 ids, or no id resolved
        """
        if not keyword_ids:
            raise ValidationError("keyword_ids array cannot be empty")
        _check_ceiling(
            len(keyword_ids),
            MAX_KEYWORDS_PER_SERP_REQUEST,
            SERP_CEILING_MESSAGE,
        )

        keywords = await self.keywords.get_many_by_ids(keyword_ids)
        if not keywords:
            raise ValidationError("No keywords found with provided IDs")

        competitor_domains = await self.competitors.get_domain_map()

        results: list[SerpKeywordResult | SerpKeywordError] = []
        serp_rows: list[dict[str, Any]] = []
        competitor_rows: list[dict[str, Any]] = []

        for keyword in keywords:
            location_code = location_for_country(keyword.country)
            response = await self.client.get_serp(keyword.keyword_text, location_code)

            if not response.success:
                logger.warning(
                    "SERP lookup failed for keyword",
                    extra={
                        "keyword_id": keyword.id,
                        "location_code": location_code,
                        "error": response.error,
                    },
                )
                results.append(
                    SerpKeywordError(
                        keyword=keyword.keyword_text,
                        country=keyword.country,
                        error=response.error or "Unknown error",
                    )
                )
                continue

            hoxton_position: int | None = None
            for item in response.results:
                domain = extract_domain(item.url)
                is_hoxton = is_primary_domain(domain, self.primary_domain)
                if is_hoxton and hoxton_position is None:
                    hoxton_position = item.position

                serp_rows.append(
                    {
                        "keyword_id": keyword.id,
                        "position": item.position,
                        "url": item.url,
                        "domain": domain,
                        "title": item.title,
                        "is_hoxton": is_hoxton,
                    }
                )

                competitor_id = competitor_domains.get(domain)
                if competitor_id is not None:
                    competitor_rows.append(
                        {
                            "keyword_id": keyword.id,
                            "competitor_id": competitor_id,
                            "position": item.position,
                            "url": item.url,
                        }
                    )

            results.append(
                SerpKeywordResult(
                    keyword=keyword.keyword_text,
                    country=keyword.country,
                    results_count=len(response.results),
                    hoxton_position=hoxton_position,
                )
            )

        await self._store(serp_rows, competitor_rows)

        meta = {
            "keywords_processed": len(results),
            "serp_records": len(serp_rows),
            "competitor_records": len(competitor_rows),
        }
        logger.info("SERP enrichment complete", extra=meta)
        return results, meta

    async def _store(
        self, serp_rows: list[dict[str, Any]], competitor_rows: list[dict[str, Any]]
    ) -> None:
        try:
            await self.rankings.add_serp_rankings(serp_rows)
        except AppError as e:
            db_logger.write_skipped("serp_rankings", len(serp_rows), e)

        try:
            await self.rankings.add_competitor_rankings(competitor_rows)
        except AppError as e:
            db_logger.write_skipped("competitor_rankings", len(competitor_rows), e)
