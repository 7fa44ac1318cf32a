"""CompetitorRepository: tracked competitor domains."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.errors import map_database_error
from seo_platform.core.logging import get_logger
from seo_platform.models.competitor import Competitor

logger = get_logger(__name__)


class CompetitorRepository:
    """Repository for Competitor operations."""

    TABLE_NAME = "competitors"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_competitors(self) -> list[Competitor]:
        """List competitors ordered by name."""
        try:
            result = await self.session.scalars(
                select(Competitor).order_by(Competitor.name)
            )
            return list(result.all())
        except SQLAlchemyError as e:
            raise map_database_error(e, "select") from e

    async def create(self, domain: str, name: str, notes: str | None = None) -> Competitor:
        """Insert a competitor; an existing domain raises DuplicateError."""
        competitor = Competitor(domain=domain, name=name, notes=notes)
        try:
            self.session.add(competitor)
            await self.session.flush()
        except SQLAlchemyError as e:
            error = map_database_error(e, "insert", resource="Competitor")
            logger.warning(
                "Failed to create competitor",
                extra={"domain": domain, "error_code": error.code},
            )
            raise error from e

        logger.info(
            "Competitor created",
            extra={"competitor_id": competitor.id, "domain": domain},
        )
        return competitor

    async def get_domain_map(self) -> dict[str, str]:
        """Map every tracked domain to its competitor id."""
        try:
            result = await self.session.execute(
                select(Competitor.domain, Competitor.id)
            )
            return {domain: competitor_id for domain, competitor_id in result.all()}
        except SQLAlchemyError as e:
            raise map_database_error(e, "select") from e
