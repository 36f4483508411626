"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from videotube.api import api_router
from videotube.core.config import Settings, get_settings
from videotube.core.context import AppContext
from videotube.core.env_validation import validate_or_raise
from videotube.core.errors import register_exception_handlers
from videotube.core.logging import get_logger, setup_logging
from videotube.core.middleware import RequestContextMiddleware, RequestDeadlineMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.

    Startup validates the environment, then builds and starts the
    ``AppContext`` (database engine, session factory, media client).
    Shutdown releases everything the context holds. A context installed on
    ``app.state`` beforehand (tests) is used as is and left to its owner.
    """
    settings: Settings = app.state.settings
    logger.info(
        "starting_application",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        version=settings.APP_VERSION,
    )

    owns_context = getattr(app.state, "context", None) is None
    if owns_context:
        validate_or_raise(settings)
        context = AppContext.create(settings)
        await context.startup()
        app.state.context = context

    yield

    logger.info("shutting_down_application")
    if owns_context:
        await app.state.context.shutdown()
        app.state.context = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application (routes, middleware, error handlers)."""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="VideoTube - video sharing platform API",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = None

    # Add middleware (the last one added runs first)
    app.add_middleware(RequestDeadlineMiddleware, timeout=settings.REQUEST_TIMEOUT_SECONDS)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health_check(request: Request) -> JSONResponse:
        """
        Health check endpoint for monitoring.
        Includes database connectivity check.
        """
        context: Optional[AppContext] = request.app.state.context
        db_healthy = context is not None and await context.healthy()

        return JSONResponse(
            status_code=200 if db_healthy else 503,
            content={
                "status": "healthy" if db_healthy else "unhealthy",
                "app_name": settings.APP_NAME,
                "environment": settings.APP_ENV,
                "version": settings.APP_VERSION,
                "database": "connected" if db_healthy else "disconnected",
            },
        )

    @app.get("/", tags=["root"])
    async def root() -> JSONResponse:
        return JSONResponse(
            content={
                "message": f"Welcome to {settings.APP_NAME} API",
                "version": settings.APP_VERSION,
                "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
            }
        )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "videotube.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.DEBUG,
        log_level=_settings.LOG_LEVEL.lower(),
    )
