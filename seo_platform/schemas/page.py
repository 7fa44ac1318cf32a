"""Pydantic schemas for Page endpoints.

- PageCreateRequest: single page create / one item of an import
- PageImportRequest: bulk import body
- PageResponse: Page record
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PageCreateRequest(BaseModel):
    """Request schema for creating or importing a page."""

    page_name: str = Field(..., min_length=1, description="Page title")
    url: str = Field(
        ...,
        min_length=1,
        description="Page URL, unique across all pages",
        examples=["https://hoxtonwealth.com/pensions/"],
    )
    cluster: str = Field(..., min_length=1, description="Content cluster")
    level: int | None = Field(
        None, ge=0, description="Hierarchy level, 2 when omitted"
    )
    parent_page: str | None = Field(None, description="Parent page name or URL")
    sibling_links: str | None = Field(None, description="Planned sibling links")
    cross_cluster_links: str | None = Field(
        None, description="Planned links into other clusters"
    )
    content_focus: str | None = Field(None, description="Topic of the page")

    @field_validator("page_name", "url", "cluster")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PageImportRequest(BaseModel):
    """Request schema for bulk page import (upsert on url)."""

    pages: list[PageCreateRequest] = Field(
        ..., description="Pages to insert or update"
    )


class PageResponse(BaseModel):
    """Response schema for Page records."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    page_name: str
    url: str
    cluster: str
    level: int
    parent_page: str | None = None
    sibling_links: str | None = None
    cross_cluster_links: str | None = None
    content_focus: str | None = None
    created_at: datetime
    updated_at: datetime


class PageSummary(BaseModel):
    """Page fields embedded in keyword listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    page_name: str
    url: str
    cluster: str
