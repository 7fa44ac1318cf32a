"""RankingRepository: batched writes of SERP and competitor rankings."""

from typing import Any

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.errors import map_database_error
from seo_platform.core.logging import get_logger
from seo_platform.models.serp_ranking import CompetitorRanking, SerpRanking

logger = get_logger(__name__)


class RankingRepository:
    """Append-only ranking history.

    Each batch is written inside its own savepoint so a failed batch leaves
    the session usable for the next one.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _insert_batch(self, model: type[Any], rows: list[dict[str, Any]]) -> int:
        if not rows:
            return 0
        try:
            async with self.session.begin_nested():
                await self.session.execute(insert(model), rows)
        except SQLAlchemyError as e:
            raise map_database_error(e, "insert") from e

        logger.debug(
            "Ranking rows inserted",
            extra={"table": model.__tablename__, "rows": len(rows)},
        )
        return len(rows)

    async def add_serp_rankings(self, rows: list[dict[str, Any]]) -> int:
        return await self._insert_batch(SerpRanking, rows)

    async def add_competitor_rankings(self, rows: list[dict[str, Any]]) -> int:
        return await self._insert_batch(CompetitorRanking, rows)
