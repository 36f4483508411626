"""
Database Dependencies for FastAPI Routes

Routes declare the session they need and FastAPI provides it:

    @router.get("/{video_id}")
    async def get_video(video_id: int, db: DBSession):
        ...

Each request gets its own session from the application context's factory.
The session is rolled back if the handler raises and always closed
afterwards. Handlers commit explicitly.

Learning Resources:
- FastAPI Dependencies: https://fastapi.tiangolo.com/tutorial/dependencies/
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.core.context import Context
from videotube.db.session import session_scope


async def get_db(context: Context) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    Tests replace it through ``app.dependency_overrides[get_db]``.

    Yields:
        AsyncSession: Database session for the current request
    """
    async with session_scope(context.session_factory) as session:
        yield session


# Reusable annotation: ``db: DBSession`` in a route signature
DBSession = Annotated[AsyncSession, Depends(get_db)]
