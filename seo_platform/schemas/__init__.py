"""Schemas layer - Pydantic models for request/response validation."""

from seo_platform.schemas.competitor import CompetitorCreateRequest, CompetitorResponse
from seo_platform.schemas.enrich import (
    InlineKeyword,
    KeywordEnrichRequest,
    KeywordMetricsResult,
    SerpEnrichRequest,
    SerpKeywordError,
    SerpKeywordResult,
)
from seo_platform.schemas.keyword import (
    VALID_COUNTRIES,
    Country,
    KeywordBatchRequest,
    KeywordResponse,
    KeywordWithPageResponse,
)
from seo_platform.schemas.page import (
    PageCreateRequest,
    PageImportRequest,
    PageResponse,
    PageSummary,
)

__all__ = [
    "VALID_COUNTRIES",
    "CompetitorCreateRequest",
    "CompetitorResponse",
    "Country",
    "InlineKeyword",
    "KeywordBatchRequest",
    "KeywordEnrichRequest",
    "KeywordMetricsResult",
    "KeywordResponse",
    "KeywordWithPageResponse",
    "PageCreateRequest",
    "PageImportRequest",
    "PageResponse",
    "PageSummary",
    "SerpEnrichRequest",
    "SerpKeywordError",
    "SerpKeywordResult",
]
