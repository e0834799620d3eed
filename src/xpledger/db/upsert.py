"""Dialect-aware INSERT ... ON CONFLICT DO NOTHING.

PostgreSQL runs in production; SQLite backs the test suite. Both dialects
expose ``on_conflict_do_nothing`` on their own ``insert`` construct.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


async def insert_ignore_conflict(
    db: AsyncSession,
    model: type,
    index_elements: list[str],
    **values: Any,
) -> None:
    """Insert a row unless one already exists for ``index_elements``."""
    dialect = db.get_bind().dialect.name
    insert = sqlite_insert if dialect == "sqlite" else pg_insert
    stmt = insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
    await db.execute(stmt)
