"""Page model for the marketing content structure.

A Page is one URL in the site's content plan:
- page_name/url/cluster identify the page and its content category
- level is the depth in the cluster hierarchy (1 = pillar, 2 = default)
- parent/sibling/cross-cluster links are free-text link plans
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, Integer, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seo_platform.core.database import Base

if TYPE_CHECKING:
    from seo_platform.models.keyword import Keyword


class Page(Base):
    """Page model.

    Attributes:
        id: UUID primary key
        page_name: Human readable page title
        url: Page URL (globally unique, upsert key for imports)
        cluster: Content cluster the page belongs to
        level: Hierarchy level within the cluster (default 2)
        parent_page: Name or URL of the parent page
        sibling_links: Planned links to sibling pages
        cross_cluster_links: Planned links into other clusters
        content_focus: Short description of the page's topic
        created_at: Timestamp when page was created
        updated_at: Timestamp when page was last updated
    """

    __tablename__ = "pages"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    page_name: Mapped[str] = mapped_column(Text, nullable=False)

    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    cluster: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=2,
        server_default=text("2"),
        index=True,
    )

    parent_page: Mapped[str | None] = mapped_column(Text, nullable=True)

    sibling_links: Mapped[str | None] = mapped_column(Text, nullable=True)

    cross_cluster_links: Mapped[str | None] = mapped_column(Text, nullable=True)

    content_focus: Mapped[str | None] = mapped_column(Text, nullable=True)

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

    keywords: Mapped[list["Keyword"]] = relationship(
        "Keyword",
        back_populates="page",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Page(id={self.id!r}, url={self.url!r}, cluster={self.cluster!r})>"
