"""Keyword model.

Keywords are unique per (keyword_text, country) and optionally attached to a
Page. Metrics and SERP rankings hang off a keyword as append-only history.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seo_platform.core.database import Base

if TYPE_CHECKING:
    from seo_platform.models.page import Page


class Keyword(Base):
    """Keyword model.

    Attributes:
        id: UUID primary key
        keyword_text: Normalized (trimmed, lower-cased) keyword
        country: Target country code (UK, US, UAE, AU, CA, SG, HK)
        cluster: Optional content cluster
        page_id: Optional target Page (set to NULL when the page is deleted)
        created_at: Timestamp when keyword was created
        updated_at: Timestamp when keyword was last updated
    """

    __tablename__ = "keywords"
    __table_args__ = (
        UniqueConstraint("keyword_text", "country", name="uq_keywords_text_country"),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    keyword_text: Mapped[str] = mapped_column(Text, nullable=False)

    country: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="UK",
        server_default=text("'UK'"),
        index=True,
    )

    cluster: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)

    page_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("pages.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        onupdate=lambda: datetime.now(UTC),
    )

    page: Mapped["Page | None"] = relationship(
        "Page",
        back_populates="keywords",
    )

    def __repr__(self) -> str:
        return (
            f"<Keyword(id={self.id!r}, keyword_text={self.keyword_text!r}, "
            f"country={self.country!r})>"
        )
