"""Competitor model for tracked competitor domains.

Domains are stored normalized: lower-cased, no scheme, no trailing slash.
SERP enrichment matches result domains against them exactly.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from seo_platform.core.database import Base


class Competitor(Base):
    """Competitor model.

    Attributes:
        id: UUID primary key
        domain: Normalized competitor domain (unique)
        name: Friendly name
        notes: Optional free-text notes
        created_at: Timestamp when competitor was added
    """

    __tablename__ = "competitors"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    domain: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    def __repr__(self) -> str:
        return f"<Competitor(id={self.id!r}, domain={self.domain!r})>"
