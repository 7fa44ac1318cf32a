"""Enrichment API endpoints.

- POST /enrich/keywords - Search volume metrics from DataForSEO
- POST /enrich/serp - Organic SERP rankings from DataForSEO
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core import responses
from seo_platform.core.config import Settings, get_settings
from seo_platform.core.database import get_session
from seo_platform.integrations.dataforseo import DataForSEOClient, get_dataforseo
from seo_platform.schemas.enrich import KeywordEnrichRequest, SerpEnrichRequest
from seo_platform.services.enrichment import (
    KeywordEnrichmentService,
    SerpEnrichmentService,
)

router = APIRouter()


@router.post("/keywords")
async def enrich_keywords(
    data: KeywordEnrichRequest,
    session: AsyncSession = Depends(get_session),
    client: DataForSEOClient = Depends(get_dataforseo),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Fetch metrics for stored keyword ids or inline {text, country} pairs.

    Metrics are stored only for keywords that exist in the database.
    """
    service = KeywordEnrichmentService(
        session, client, default_country=settings.default_country
    )
    results = await service.enrich(data)
    return responses.success(
        results,
        {"count": len(results), "message": f"Enriched {len(results)} keywords"},
    )


@router.post("/serp")
async def enrich_serp(
    data: SerpEnrichRequest,
    session: AsyncSession = Depends(get_session),
    client: DataForSEOClient = Depends(get_dataforseo),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Fetch SERPs for stored keywords; per-keyword failures are reported inline."""
    service = SerpEnrichmentService(
        session, client, primary_domain=settings.primary_domain
    )
    results, meta = await service.enrich(data.keyword_ids)
    return responses.success(results, meta)
