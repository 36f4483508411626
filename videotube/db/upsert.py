"""
Conflict-tolerant inserts.

Toggles, watch history and playlist membership all rely on a unique
constraint plus ``INSERT ... ON CONFLICT DO NOTHING RETURNING id``: the
database decides atomically whether the row is new, and a concurrent
duplicate simply returns nothing instead of raising.

``ON CONFLICT`` is dialect specific in SQLAlchemy, so the insert construct
is picked from the session's bind (PostgreSQL in production, SQLite in
tests).
"""

from collections.abc import Sequence
from typing import Any, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.db.base import BaseModel

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_name(session: AsyncSession) -> str:
    return session.get_bind().dialect.name


def dialect_insert(session: AsyncSession, model: type[BaseModel]):
    """The ON CONFLICT-capable ``insert()`` for the session's dialect."""
    name = dialect_name(session)
    try:
        return _INSERTS[name](model)
    except KeyError:
        raise NotImplementedError(f"ON CONFLICT inserts are not supported on {name}") from None


async def insert_ignoring_conflicts(
    session: AsyncSession,
    model: type[BaseModel],
    values: dict[str, Any],
    conflict_columns: Sequence[str],
) -> Optional[int]:
    """
    Insert one row unless it collides with ``conflict_columns``.

    Returns:
        The new row id, or None when an equal row already existed
    """
    stmt = (
        dialect_insert(session, model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=list(conflict_columns))
        .returning(model.id)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
