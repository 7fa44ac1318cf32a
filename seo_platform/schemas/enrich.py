"""Pydantic schemas for the enrichment endpoints.

- KeywordEnrichRequest: stored keyword ids or inline {text, country} pairs
- SerpEnrichRequest: stored keyword ids only
- KeywordMetricsResult / SerpKeywordResult / SerpKeywordError: response rows
"""

from pydantic import BaseModel, Field


class InlineKeyword(BaseModel):
    """An ad-hoc keyword that is enriched but never persisted."""

    text: str = Field(..., min_length=1, description="Keyword text")
    country: str | None = Field(None, description="Country code, UK when omitted")


class KeywordEnrichRequest(BaseModel):
    """Request schema for POST /enrich/keywords.

    keyword_ids takes precedence when non-empty.
    """

    keyword_ids: list[str] | None = Field(
        None, description="Stored keyword UUIDs to enrich"
    )
    keywords: list[InlineKeyword] | None = Field(
        None, description="Inline keywords to enrich without storing"
    )


class SerpEnrichRequest(BaseModel):
    """Request schema for POST /enrich/serp."""

    keyword_ids: list[str] = Field(..., description="Stored keyword UUIDs")


class KeywordMetricsResult(BaseModel):
    """One metrics record returned by the provider, annotated with country."""

    keyword: str
    country: str
    search_volume: int = 0
    difficulty: float = 0
    cpc: float = 0
    competition: float = 0


class SerpKeywordResult(BaseModel):
    """Per-keyword SERP summary."""

    keyword: str
    country: str
    results_count: int
    hoxton_position: int | None = None


class SerpKeywordError(BaseModel):
    """Per-keyword SERP failure; the rest of the request still succeeds."""

    keyword: str
    country: str
    error: str
