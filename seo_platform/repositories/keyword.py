"""KeywordRepository: listing, id lookup and bulk upsert of keywords."""

import time
from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from seo_platform.core.errors import map_database_error
from seo_platform.core.logging import db_logger, get_logger
from seo_platform.models.keyword import Keyword
from seo_platform.repositories.upsert import dedupe_rows, upsert_returning

logger = get_logger(__name__)

CONFLICT_COLUMNS = ("keyword_text", "country")


def _valid_ids(keyword_ids: list[str]) -> list[str]:
    """Drop ids that are not UUIDs; they can never resolve to a row."""
    valid = []
    for keyword_id in keyword_ids:
        try:
            valid.append(str(UUID(keyword_id)))
        except (ValueError, TypeError, AttributeError):
            continue
    return valid


class KeywordRepository:
    """Repository for Keyword operations."""

    TABLE_NAME = "keywords"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_keywords(
        self,
        country: str | None = None,
        cluster: str | None = None,
        page_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Keyword]:
        """List keywords newest first, with their target page loaded."""
        stmt = (
            select(Keyword)
            .options(selectinload(Keyword.page))
            .order_by(Keyword.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if country:
            stmt = stmt.where(Keyword.country == country.upper())
        if cluster:
            stmt = stmt.where(Keyword.cluster == cluster)
        if page_id:
            stmt = stmt.where(Keyword.page_id == page_id)

        try:
            result = await self.session.scalars(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise map_database_error(e, "select") from e

    async def get_many_by_ids(self, keyword_ids: list[str]) -> list[Keyword]:
        """Resolve ids to keywords, preserving request order.

        Ids with no matching row are dropped silently.
        """
        ids = _valid_ids(keyword_ids)
        if not ids:
            return []

        try:
            result = await self.session.scalars(
                select(Keyword).where(Keyword.id.in_(ids))
            )
            found = {keyword.id: keyword for keyword in result.all()}
        except SQLAlchemyError as e:
            raise map_database_error(e, "select") from e

        ordered: list[Keyword] = []
        seen: set[str] = set()
        for keyword_id in ids:
            keyword = found.get(keyword_id)
            if keyword is not None and keyword_id not in seen:
                ordered.append(keyword)
                seen.add(keyword_id)

        logger.debug(
            "Resolved keyword ids",
            extra={"requested": len(keyword_ids), "resolved": len(ordered)},
        )
        return ordered

    async def upsert_many(
        self,
        keyword_texts: list[str],
        country: str,
        cluster: str | None = None,
        page_id: str | None = None,
    ) -> list[Keyword]:
        """Insert or update keywords keyed by (keyword_text, country).

        Duplicate texts in one batch collapse to a single row.
        """
        start_time = time.monotonic()
        now = datetime.now(UTC)
        rows = dedupe_rows(
            (
                {
                    "id": str(uuid4()),
                    "keyword_text": text,
                    "country": country,
                    "cluster": cluster,
                    "page_id": page_id,
                    "created_at": now,
                    "updated_at": now,
                }
                for text in keyword_texts
            ),
            CONFLICT_COLUMNS,
        )

        try:
            result = await upsert_returning(
                self.session,
                Keyword,
                rows,
                CONFLICT_COLUMNS,
                ("cluster", "page_id"),
            )
        except SQLAlchemyError as e:
            raise map_database_error(e, "upsert") from e

        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query="INSERT INTO keywords ON CONFLICT (keyword_text, country)",
                duration_ms=duration_ms,
                table=self.TABLE_NAME,
            )

        logger.info(
            "Keywords upserted",
            extra={
                "country": country,
                "received": len(keyword_texts),
                "upserted": len(result),
            },
        )
        return result
