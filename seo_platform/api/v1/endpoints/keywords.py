"""Keywords API endpoints.

- GET /keywords - List keywords newest first with their target page
- POST /keywords/batch - Bulk upsert keywords keyed by (text, country)
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core import responses
from seo_platform.core.database import get_session
from seo_platform.core.errors import ValidationError
from seo_platform.repositories.keyword import KeywordRepository
from seo_platform.schemas.keyword import (
    KeywordBatchRequest,
    KeywordResponse,
    KeywordWithPageResponse,
)

router = APIRouter()

MAX_KEYWORDS_PER_BATCH = 1000


@router.get("")
async def list_keywords(
    country: str | None = Query(None, description="Filter by country"),
    cluster: str | None = Query(None, description="Filter by cluster"),
    page_id: str | None = Query(None, description="Filter by page UUID"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    keywords = await KeywordRepository(session).list_keywords(
        country=country,
        cluster=cluster,
        page_id=page_id,
        limit=limit,
        offset=offset,
    )
    data = [KeywordWithPageResponse.model_validate(kw) for kw in keywords]
    return responses.success(
        data, {"count": len(data), "limit": limit, "offset": offset}
    )


@router.post("/batch")
async def batch_keywords(
    data: KeywordBatchRequest,
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Add keywords in bulk.

    Texts are normalized before the upsert, so repeats within the batch or
    against stored rows collapse to one row per (text, country).
    """
    if not data.keywords:
        raise ValidationError("Keywords array cannot be empty")

    if len(data.keywords) > MAX_KEYWORDS_PER_BATCH:
        raise ValidationError(
            f"Maximum {MAX_KEYWORDS_PER_BATCH} keywords per batch",
            {"received": len(data.keywords), "maximum": MAX_KEYWORDS_PER_BATCH},
        )

    keywords = await KeywordRepository(session).upsert_many(
        data.keywords,
        country=data.country,
        cluster=data.cluster,
        page_id=data.page_id,
    )
    result = [KeywordResponse.model_validate(kw) for kw in keywords]
    return responses.success(
        result,
        {
            "count": len(result),
            "message": f"Successfully added {len(result)} keywords",
        },
    )
