"""
Application context.

One ``AppContext`` owns every long-lived resource the API needs:

- settings
- the database engine and its session factory
- the media store client

It is built and started in the FastAPI lifespan, stored on ``app.state``,
and reached from handlers through the dependencies below. Nothing here is a
module-level global, so tests can build a context around an in-memory
database and a fake media store.
"""

from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from videotube.core.config import Settings
from videotube.core.logging import get_logger
from videotube.db.session import (
    build_engine,
    build_session_factory,
    check_db_health,
    close_db,
    init_db,
)
from videotube.services.media import CloudinaryMediaStore, MediaStore

logger = get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    media: MediaStore
    started: bool = field(default=False)

    @classmethod
    def create(cls, settings: Settings, media: MediaStore | None = None) -> "AppContext":
        """Build (but do not start) a context from settings."""
        engine = build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            media=media or CloudinaryMediaStore.from_settings(settings),
        )

    async def startup(self) -> None:
        """Verify the database and create tables in development."""
        await init_db(self.engine, create_tables=self.settings.is_development)
        self.started = True
        logger.info("app_context_started", environment=self.settings.APP_ENV)

    async def shutdown(self) -> None:
        """Release the media client and every pooled connection."""
        await self.media.aclose()
        await close_db(self.engine)
        self.started = False
        logger.info("app_context_stopped")

    async def healthy(self) -> bool:
        return await check_db_health(self.engine)


# ================================
# Dependencies
# ================================

def get_context(request: Request) -> AppContext:
    """The context installed on the running application."""
    return request.app.state.context


def get_media_store(context: Annotated[AppContext, Depends(get_context)]) -> MediaStore:
    return context.media


def get_app_settings(context: Annotated[AppContext, Depends(get_context)]) -> Settings:
    return context.settings


Context = Annotated[AppContext, Depends(get_context)]
Media = Annotated[MediaStore, Depends(get_media_store)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
