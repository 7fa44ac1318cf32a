"""Pages API endpoints.

- GET /pages - List pages, optionally filtered by cluster and level
- POST /pages - Create a single page
- POST /pages/import - Bulk upsert pages keyed by url
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core import responses
from seo_platform.core.database import get_session
from seo_platform.core.errors import ValidationError
from seo_platform.repositories.page import PageRepository
from seo_platform.schemas.page import PageCreateRequest, PageImportRequest, PageResponse

router = APIRouter()


@router.get("")
async def list_pages(
    cluster: str | None = Query(None, description="Filter by cluster"),
    level: int | None = Query(None, description="Filter by hierarchy level"),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """List pages ordered by cluster, then level."""
    pages = await PageRepository(session).list_pages(cluster=cluster, level=level)
    data = [PageResponse.model_validate(page) for page in pages]
    return responses.success(data, {"count": len(data)})


@router.post("")
async def create_page(
    data: PageCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Create a page. A duplicate url returns 409."""
    page = await PageRepository(session).create(data)
    return responses.created(PageResponse.model_validate(page))


@router.post("/import")
async def import_pages(
    data: PageImportRequest,
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Insert or update pages in bulk; existing urls are updated in place."""
    if not data.pages:
        raise ValidationError("Pages array cannot be empty")

    pages = await PageRepository(session).upsert_many(data.pages)
    result = [PageResponse.model_validate(page) for page in pages]
    return responses.success(
        result,
        {
            "count": len(result),
            "message": f"Successfully imported {len(result)} pages",
        },
    )
