"""KeywordMetricRepository: append-only metric snapshots."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.errors import map_database_error
from seo_platform.models.keyword_metric import KeywordMetric


class KeywordMetricRepository:
    TABLE_NAME = "keyword_metrics"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add_metric(
        self,
        keyword_id: str,
        search_volume: int,
        difficulty: float,
        cpc: float,
        competition: float,
    ) -> KeywordMetric:
        """Insert one metric row inside a savepoint.

        On failure only the savepoint is rolled back, so the caller's
        session stays usable.
        """
        metric = KeywordMetric(
            keyword_id=keyword_id,
            search_volume=search_volume,
            difficulty=difficulty,
            cpc=cpc,
            competition=competition,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(metric)
        except SQLAlchemyError as e:
            raise map_database_error(e, "insert") from e
        return metric
