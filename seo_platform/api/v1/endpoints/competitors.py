"""Competitors API endpoints.

- GET /competitors - List tracked competitors ordered by name
- POST /competitors - Track a new competitor domain
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core import responses
from seo_platform.core.database import get_session
from seo_platform.repositories.competitor import CompetitorRepository
from seo_platform.schemas.competitor import CompetitorCreateRequest, CompetitorResponse
from seo_platform.services.domain import normalize_competitor_domain

router = APIRouter()


@router.get("")
async def list_competitors(
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    competitors = await CompetitorRepository(session).list_competitors()
    data = [CompetitorResponse.model_validate(c) for c in competitors]
    return responses.success(data, {"count": len(data)})


@router.post("")
async def create_competitor(
    data: CompetitorCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Add a competitor; the domain is stored without scheme or trailing slash."""
    competitor = await CompetitorRepository(session).create(
        domain=normalize_competitor_domain(data.domain),
        name=data.name,
        notes=data.notes,
    )
    return responses.created(
        CompetitorResponse.model_validate(competitor),
        {"message": f'Competitor "{data.name}" added successfully'},
    )
