"""
Database Engine and Session Management

Architecture Flow:
------------------
Application Start → AppContext.create() → build_engine() → pool ready
↓
API Request → get_db() → session from the context's factory → commit/rollback → close
↓
Application Shutdown → AppContext.shutdown() → engine.dispose()

There is no module-level engine: the engine and its session factory are
owned by ``AppContext`` (videotube.core.context) so tests and scripts can
build as many isolated instances as they need.

Learning Resources:
- SQLAlchemy Engine: https://docs.sqlalchemy.org/en/20/core/engines.html
- Async Sessions: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, StaticPool

from videotube.core.config import Settings
from videotube.core.errors import ApiError
from videotube.core.logging import get_logger
from videotube.db.base import Base

logger = get_logger(__name__)


# ================================
# Database Engine Configuration
# ================================

def get_engine_config(settings: Settings) -> dict[str, Any]:
    """
    Engine keyword arguments for the configured database.

    PostgreSQL (asyncpg):
    ---------------------
    - development/production: AsyncAdaptedQueuePool with DB_POOL_SIZE
      connections plus DB_MAX_OVERFLOW extra under load
    - staging/test: NullPool so every checkout is a fresh connection
    - pool_pre_ping: detect connections dropped by the server
    - command_timeout: asyncpg cancels any statement running longer than
      DB_COMMAND_TIMEOUT_SECONDS

    SQLite (aiosqlite):
    -------------------
    Used by the test-suite and quick local runs. In-memory databases need a
    StaticPool (one shared connection) or every session would see an empty
    database; file databases use NullPool.
    """
    url = make_url(settings.DATABASE_URL)
    config: dict[str, Any] = {"echo": settings.DB_ECHO}

    if url.get_backend_name() == "sqlite":
        in_memory = url.database in (None, "", ":memory:")
        config.update({
            "poolclass": StaticPool if in_memory else NullPool,
            "connect_args": {"check_same_thread": False},
        })
        logger.info(
            "configuring_database_engine",
            backend="sqlite",
            in_memory=in_memory,
        )
        return config

    config.update({
        "pool_pre_ping": True,
        "connect_args": {
            "command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
            "server_settings": {
                "application_name": settings.APP_NAME,
            },
        },
    })

    if settings.is_development or settings.is_production:
        logger.info(
            "configuring_database_engine",
            backend="postgresql",
            environment=settings.APP_ENV,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        config.update({
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": 30,
            "pool_recycle": 7200 if settings.is_production else 3600,
        })
    else:
        logger.info(
            "configuring_database_engine",
            backend="postgresql",
            environment=settings.APP_ENV,
            pool_type="NullPool",
        )
        config["poolclass"] = NullPool

    return config


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.DATABASE_URL``."""
    engine_config = get_engine_config(settings)
    engine = create_async_engine(settings.DATABASE_URL, **engine_config)

    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        "database_engine_created",
        driver=engine.dialect.driver,
        pool_size=engine_config.get("pool_size", "unpooled"),
    )
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to ``engine``.

    - autoflush=False: handlers flush explicitly when they need generated ids
    - expire_on_commit=False: committed objects stay readable for the
      response without another round trip
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


# ================================
# Session Lifecycle Functions
# ================================

@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    One session for one unit of work.

    Any exception raised while the session is in use rolls the transaction
    back before propagating; the session is always closed.

    Usage:
        async with session_scope(context.session_factory) as session:
            ...
            await session.commit()
    """
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            if isinstance(e, ApiError):
                logger.debug("database_session_rolled_back", reason=e.message)
            else:
                logger.error(
                    "database_session_error",
                    error=str(e),
                    error_type=type(e).__name__,
                )
            raise


async def init_db(engine: AsyncEngine, create_tables: bool = False) -> None:
    """
    Verify connectivity and optionally create missing tables.

    Table creation is a development convenience; deployed environments
    run ``alembic upgrade head`` instead.
    """
    # Models must be imported so their tables are registered on Base.metadata
    import videotube.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        logger.info("database_connection_verified")

        if create_tables:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("database_tables_created")


async def close_db(engine: AsyncEngine) -> None:
    """Dispose the engine and close every pooled connection."""
    await engine.dispose()
    logger.info("database_connections_closed")


async def check_db_health(engine: AsyncEngine) -> bool:
    """Return True when a trivial query succeeds."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
