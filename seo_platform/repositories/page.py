"""PageRepository: listing, single create and bulk upsert of pages."""

import time
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.errors import map_database_error
from seo_platform.core.logging import db_logger, get_logger
from seo_platform.models.page import Page
from seo_platform.repositories.upsert import dedupe_rows, upsert_returning
from seo_platform.schemas.page import PageCreateRequest

logger = get_logger(__name__)

DEFAULT_LEVEL = 2


def _page_values(data: PageCreateRequest) -> dict[str, Any]:
    """Column values for a page, with level defaulting to 2."""
    now = datetime.now(UTC)
    return {
        "id": str(uuid4()),
        "page_name": data.page_name,
        "url": data.url,
        "cluster": data.cluster,
        "level": data.level or DEFAULT_LEVEL,
        "parent_page": data.parent_page or None,
        "sibling_links": data.sibling_links or None,
        "cross_cluster_links": data.cross_cluster_links or None,
        "content_focus": data.content_focus or None,
        "created_at": now,
        "updated_at": now,
    }


class PageRepository:
    """Repository for Page operations.

    Store errors are translated with map_database_error before leaving
    the repository.
    """

    TABLE_NAME = "pages"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    UPSERT_COLUMNS = (
        "page_name",
        "cluster",
        "level",
        "parent_page",
        "sibling_links",
        "cross_cluster_links",
        "content_focus",
    )

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_pages(
        self, cluster: str | None = None, level: int | None = None
    ) -> list[Page]:
        """List pages ordered by cluster then level."""
        stmt = select(Page).order_by(Page.cluster, Page.level)
        if cluster:
            stmt = stmt.where(Page.cluster == cluster)
        if level is not None:
            stmt = stmt.where(Page.level == level)

        try:
            result = await self.session.scalars(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise map_database_error(e, "select") from e

    async def create(self, data: PageCreateRequest) -> Page:
        """Insert a single page."""
        page = Page(**_page_values(data))
        try:
            self.session.add(page)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to create page",
                extra={"url": data.url, "error_type": type(e).__name__},
            )
            raise map_database_error(e, "insert", resource="Page") from e

        logger.info("Page created", extra={"page_id": page.id, "url": page.url})
        return page

    async def upsert_many(self, pages: list[PageCreateRequest]) -> list[Page]:
        """Insert or update pages keyed by url."""
        start_time = time.monotonic()
        rows = dedupe_rows((_page_values(page) for page in pages), ("url",))

        try:
            result = await upsert_returning(
                self.session, Page, rows, ("url",), self.UPSERT_COLUMNS
            )
        except SQLAlchemyError as e:
            raise map_database_error(e, "upsert") from e

        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query="INSERT INTO pages ON CONFLICT (url)",
                duration_ms=duration_ms,
                table=self.TABLE_NAME,
            )

        logger.info(
            "Pages upserted",
            extra={"received": len(pages), "upserted": len(result)},
        )
        return result
