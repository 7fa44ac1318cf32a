"""API v1 router and endpoint organization.

Every route below requires a valid x-api-key header.
"""

from fastapi import APIRouter, Depends

from seo_platform.api.v1.endpoints import competitors, enrich, keywords, pages
from seo_platform.core.auth import require_api_key

router = APIRouter(dependencies=[Depends(require_api_key)])

router.include_router(pages.router, prefix="/pages", tags=["Pages"])
router.include_router(keywords.router, prefix="/keywords", tags=["Keywords"])
router.include_router(competitors.router, prefix="/competitors", tags=["Competitors"])
router.include_router(enrich.router, prefix="/enrich", tags=["Enrichment"])
