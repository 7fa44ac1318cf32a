"""Pydantic schemas for Competitor endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompetitorCreateRequest(BaseModel):
    """Request schema for adding a tracked competitor domain."""

    domain: str = Field(
        ...,
        min_length=1,
        description="Competitor domain, scheme and trailing slash are stripped",
        examples=["https://www.competitor.com/", "competitor.com"],
    )
    name: str = Field(..., min_length=1, description="Friendly name")
    notes: str | None = Field(None, description="Optional notes")

    @field_validator("domain", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CompetitorResponse(BaseModel):
    """Response schema for Competitor records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    domain: str
    name: str
    notes: str | None = None
    created_at: datetime
