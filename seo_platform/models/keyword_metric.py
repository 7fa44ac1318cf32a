"""KeywordMetric model: one row per enrichment fetch."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from seo_platform.core.database import Base


class KeywordMetric(Base):
    """Search-volume snapshot for a keyword.

    The row with the latest fetched_at is the keyword's current metrics.
    """

    __tablename__ = "keyword_metrics"

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

    search_volume: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    difficulty: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False),
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    cpc: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False),
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    competition: Mapped[float] = mapped_column(
        Numeric(5, 4, asdecimal=False),
        nullable=False,
        default=0,
        server_default=text("0"),
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
            f"<KeywordMetric(keyword_id={self.keyword_id!r}, "
            f"search_volume={self.search_volume!r})>"
        )
