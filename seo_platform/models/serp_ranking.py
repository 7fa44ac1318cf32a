"""SERP ranking snapshots.

SerpRanking stores every organic result fetched for a keyword.
CompetitorRanking stores the subset whose domain is a tracked Competitor.
Both tables are append-only history written by SERP enrichment.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from seo_platform.core.database import Base


class SerpRanking(Base):
    """One organic result for a keyword at fetch time.

    Attributes:
        id: UUID primary key
        keyword_id: Keyword the SERP was fetched for
        position: Absolute rank of the result
        url: Result URL
        domain: Bare domain extracted from url
        title: Result title
        is_hoxton: True when domain belongs to the first-party site
        fetched_at: When the SERP was fetched
    """

    __tablename__ = "serp_rankings"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    keyword_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("keywords.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int | None] = mapped_column(Integer, nullable=True)

    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    domain: Mapped[str | None] = mapped_column(Text, nullable=True)

    title: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_hoxton: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        index=True,
    )

    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<SerpRanking(keyword_id={self.keyword_id!r}, "
            f"position={self.position!r}, domain={self.domain!r})>"
        )


class CompetitorRanking(Base):
    """A tracked competitor's position for a keyword at fetch time."""

    __tablename__ = "competitor_rankings"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    keyword_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("keywords.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    competitor_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("competitors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int | None] = mapped_column(Integer, nullable=True)

    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<CompetitorRanking(keyword_id={self.keyword_id!r}, "
            f"competitor_id={self.competitor_id!r}, position={self.position!r})>"
        )
