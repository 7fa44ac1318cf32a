"""Create pages, keywords, metrics, competitors and ranking tables.

Also creates the updated_at trigger for pages/keywords and the two read
views: keywords_with_metrics and hoxton_rankings.

Revision ID: 0001
Revises: None
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Create schema, indexes, trigger and views."""
    op.create_table(
        "pages",
        _id_column(),
        sa.Column("page_name", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("cluster", sa.Text(), nullable=False),
        sa.Column("level", sa.Integer(), server_default=sa.text("2"), nullable=False),
        sa.Column("parent_page", sa.Text(), nullable=True),
        sa.Column("sibling_links", sa.Text(), nullable=True),
        sa.Column("cross_cluster_links", sa.Text(), nullable=True),
        sa.Column("content_focus", sa.Text(), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url"),
    )
    op.create_index(op.f("ix_pages_cluster"), "pages", ["cluster"], unique=False)
    op.create_index(op.f("ix_pages_level"), "pages", ["level"], unique=False)

    op.create_table(
        "keywords",
        _id_column(),
        sa.Column("keyword_text", sa.Text(), nullable=False),
        sa.Column(
            "country", sa.Text(), server_default=sa.text("'UK'"), nullable=False
        ),
        sa.Column("cluster", sa.Text(), nullable=True),
        sa.Column("page_id", postgresql.UUID(as_uuid=False), nullable=True),
        _timestamp_column("created_at"),
        _timestamp_column("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["page_id"], ["pages.id"], ondelete="SET NULL"),
        sa.UniqueConstraint(
            "keyword_text", "country", name="uq_keywords_text_country"
        ),
    )
    op.create_index(op.f("ix_keywords_country"), "keywords", ["country"], unique=False)
    op.create_index(op.f("ix_keywords_cluster"), "keywords", ["cluster"], unique=False)
    op.create_index(op.f("ix_keywords_page_id"), "keywords", ["page_id"], unique=False)

    op.create_table(
        "keyword_metrics",
        _id_column(),
        sa.Column("keyword_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column(
            "search_volume", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "difficulty",
            sa.Numeric(5, 2),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.Column(
            "cpc", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "competition",
            sa.Numeric(5, 4),
            server_default=sa.text("0"),
            nullable=False,
        ),
        _timestamp_column("fetched_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["keyword_id"], ["keywords.id"], ondelete="CASCADE"),
    )
    op.create_index(
        op.f("ix_keyword_metrics_keyword_id"),
        "keyword_metrics",
        ["keyword_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_keyword_metrics_fetched_at"),
        "keyword_metrics",
        [sa.text("fetched_at DESC")],
        unique=False,
    )

    op.create_table(
        "competitors",
        _id_column(),
        sa.Column("domain", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp_column("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("domain"),
    )

    op.create_table(
        "serp_rankings",
        _id_column(),
        sa.Column("keyword_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("domain", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column(
            "is_hoxton", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        _timestamp_column("fetched_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["keyword_id"], ["keywords.id"], ondelete="CASCADE"),
    )
    op.create_index(
        op.f("ix_serp_rankings_keyword_id"), "serp_rankings", ["keyword_id"], unique=False
    )
    op.create_index(
        op.f("ix_serp_rankings_is_hoxton"), "serp_rankings", ["is_hoxton"], unique=False
    )
    op.create_index(
        op.f("ix_serp_rankings_fetched_at"),
        "serp_rankings",
        [sa.text("fetched_at DESC")],
        unique=False,
    )

    op.create_table(
        "competitor_rankings",
        _id_column(),
        sa.Column("keyword_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("competitor_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        _timestamp_column("fetched_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["keyword_id"], ["keywords.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["competitor_id"], ["competitors.id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        op.f("ix_competitor_rankings_keyword_id"),
        "competitor_rankings",
        ["keyword_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_competitor_rankings_competitor_id"),
        "competitor_rankings",
        ["competitor_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_competitor_rankings_fetched_at"),
        "competitor_rankings",
        [sa.text("fetched_at DESC")],
        unique=False,
    )

    op.execute(
        """
        CREATE OR REPLACE FUNCTION update_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    for table in ("pages", "keywords"):
        op.execute(
            f"""
            CREATE TRIGGER {table}_updated_at
              BEFORE UPDATE ON {table}
              FOR EACH ROW
              EXECUTE FUNCTION update_updated_at();
            """
        )

    op.execute(
        """
        CREATE OR REPLACE VIEW keywords_with_metrics AS
        SELECT
          k.*,
          m.search_volume,
          m.difficulty,
          m.cpc,
          m.competition,
          m.fetched_at AS metrics_fetched_at
        FROM keywords k
        LEFT JOIN LATERAL (
          SELECT * FROM keyword_metrics
          WHERE keyword_id = k.id
          ORDER BY fetched_at DESC
          LIMIT 1
        ) m ON true;
        """
    )
    op.execute(
        """
        CREATE OR REPLACE VIEW hoxton_rankings AS
        SELECT
          k.keyword_text,
          k.country,
          k.cluster,
          sr.position,
          sr.url,
          sr.fetched_at
        FROM keywords k
        INNER JOIN serp_rankings sr ON sr.keyword_id = k.id
        WHERE sr.is_hoxton = true
        ORDER BY k.country, sr.position;
        """
    )


def downgrade() -> None:
    """Drop views, trigger and tables in reverse order."""
    op.execute("DROP VIEW IF EXISTS hoxton_rankings")
    op.execute("DROP VIEW IF EXISTS keywords_with_metrics")
    for table in ("keywords", "pages"):
        op.execute(f"DROP TRIGGER IF EXISTS {table}_updated_at ON {table}")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at()")

    op.drop_table("competitor_rankings")
    op.drop_table("serp_rankings")
    op.drop_table("competitors")
    op.drop_table("keyword_metrics")
    op.drop_table("keywords")
    op.drop_table("pages")
