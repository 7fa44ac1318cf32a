"""Dialect-aware INSERT ... ON CONFLICT DO UPDATE ... RETURNING.

PostgreSQL and SQLite share the same upsert API in SQLAlchemy but live in
different dialect modules, so the statement is built for whichever backend
the session is bound to.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


def dedupe_rows(
    rows: Iterable[dict[str, Any]], key_columns: Sequence[str]
) -> list[dict[str, Any]]:
    """Collapse rows sharing a conflict key, keeping the last one.

    PostgreSQL rejects an upsert that touches the same row twice.
    """
    unique: dict[tuple[Any, ...], dict[str, Any]] = {}
    for row in rows:
        unique[tuple(row[column] for column in key_columns)] = row
    return list(unique.values())


async def upsert_returning(
    session: AsyncSession,
    model: type[ModelT],
    rows: Sequence[dict[str, Any]],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> list[ModelT]:
    """Upsert rows and return the resulting ORM instances."""
    if not rows:
        return []

    dialect = session.bind.dialect.name if session.bind is not None else "postgresql"
    insert = sqlite.insert if dialect == "sqlite" else postgresql.insert

    stmt = insert(model).values(list(rows))
    set_: dict[str, Any] = {
        column: getattr(stmt.excluded, column) for column in update_columns
    }
    if "updated_at" in model.__table__.columns:
        set_["updated_at"] = datetime.now(UTC)
    stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=set_)

    result = await session.scalars(
        stmt.returning(model),
        execution_options={"populate_existing": True},
    )
    return list(result.all())
