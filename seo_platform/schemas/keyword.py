"""Pydantic schemas for Keyword endpoints."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from seo_platform.schemas.page import PageSummary


class Country(str, Enum):
    """Countries keywords can be tracked in."""

    UK = "UK"
    US = "US"
    UAE = "UAE"
    AU = "AU"
    CA = "CA"
    SG = "SG"
    HK = "HK"


VALID_COUNTRIES = [country.value for country in Country]


class KeywordBatchRequest(BaseModel):
    """Request schema for bulk keyword insert.

    Keyword texts are trimmed and lower-cased; country is upper-cased and
    must be one of VALID_COUNTRIES.
    """

    keywords: list[str] = Field(..., description="Keyword texts to add")
    country: str = Field(..., description="Target country", examples=["UK"])
    cluster: str | None = Field(None, description="Optional content cluster")
    page_id: str | None = Field(None, description="Optional target page UUID")

    @field_validator("country")
    @classmethod
    def validate_country(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in VALID_COUNTRIES:
            raise ValueError(f"country must be one of: {', '.join(VALID_COUNTRIES)}")
        return v

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        return [kw.strip().lower() for kw in v]


class KeywordResponse(BaseModel):
    """Response schema for Keyword records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    keyword_text: str
    country: str
    cluster: str | None = None
    page_id: str | None = None
    created_at: datetime
    updated_at: datetime


class KeywordWithPageResponse(KeywordResponse):
    """Keyword record with its target page embedded."""

    page: PageSummary | None = None
