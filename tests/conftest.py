"""
Pytest configuration and fixtures.

This file is automatically discovered by pytest and provides
shared fixtures for all test modules.

Every test gets its own in-memory SQLite database (aiosqlite + StaticPool),
an application built by ``create_app`` with an ``AppContext`` installed on
``app.state`` (the lifespan does not run under ``ASGITransport``), and a
fake media store that records uploads instead of calling Cloudinary.

References:
-----------
- Pytest Fixtures: https://docs.pytest.org/en/stable/fixture.html
- FastAPI Testing: https://fastapi.tiangolo.com/advanced/async-tests/
"""

import os
import tempfile

# Settings are read once at import time, so the test environment has to be
# in place before anything from videotube is imported.
os.environ.update({
    "APP_ENV": "test",
    "DEBUG": "false",
    "DATABASE_URL": "sqlite+aiosqlite://",
    "JWT_SECRET_KEY": "t3st-access-7f9c2b8e41d6a05f93c7e2b1d4a6f8c0",
    "REFRESH_TOKEN_SECRET_KEY": "r3fresh-9a8b7c6d5e4f3a2b1c0d9e8f7a6b5c4d",
    "BCRYPT_ROUNDS": "4",
    "CLOUDINARY_CLOUD_NAME": "demo-cloud",
    "CLOUDINARY_API_KEY": "1234567890",
    "CLOUDINARY_API_SECRET": "cloudinary-test-signing-value",
    "UPLOAD_TEMP_DIR": os.path.join(tempfile.gettempdir(), "videotube-test-uploads"),
    "LOG_LEVEL": "WARNING",
    "LOG_FORMAT": "text",
})

from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from videotube.core.config import Settings, get_settings
from videotube.core.context import AppContext
from videotube.core.errors import MediaUploadError
from videotube.core.security import create_access_token, get_password_hash
from videotube.db.base import Base
from videotube.db.deps import get_db
from videotube.db.session import build_engine, build_session_factory
from videotube.main import create_app
from videotube.models import Comment, Playlist, Tweet, User, Video
from videotube.services.media import MediaAsset

DEFAULT_PASSWORD = "testpass123"


# ================================
# Media Store
# ================================

class FakeMediaStore:
    """
    Records uploads instead of calling the media host.

    Set ``fail_folders`` to make uploads into those folders raise
    MediaUploadError, as a rejected upload would.
    """

    def __init__(self):
        self.uploads: list[dict] = []
        self.fail_folders: set[str] = set()
        self.closed = False

    async def upload(self, path: Path, *, folder: Optional[str] = None) -> MediaAsset:
        self.uploads.append({
            "name": path.name,
            "folder": folder,
            "existed": path.exists(),
            "content": path.read_bytes() if path.exists() else b"",
            "path": path,
        })
        if folder in self.fail_folders:
            raise MediaUploadError()
        return MediaAsset(
            url=f"https://media.test/{folder or 'root'}/{path.name}",
            public_id=f"{folder}/{path.stem}",
            resource_type="video" if folder == "videos" else "image",
            duration=42.5 if folder == "videos" else 0.0,
        )

    async def aclose(self) -> None:
        self.closed = True


# ================================
# Database Fixtures
# ================================

@pytest.fixture
def settings():
    return get_settings()


@pytest_asyncio.fixture
async def test_engine(settings) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with every table created."""
    engine = build_engine(settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    The session shared by the test body and the application.

    Test fixtures write through it and the API reads and commits through
    it, so data created in a test is immediately visible to requests.
    """
    session_factory = build_session_factory(test_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


# ================================
# FastAPI Client Fixtures
# ================================

@pytest.fixture
def app(settings, test_engine: AsyncEngine, db_session: AsyncSession, media_store: FakeMediaStore) -> FastAPI:
    """
    Application wired to the test database and the fake media store.

    Overrides the get_db dependency so requests use the test session.
    """
    application = create_app(settings)
    application.state.context = AppContext(
        settings=settings,
        engine=test_engine,
        session_factory=build_session_factory(test_engine),
        media=media_store,
        started=True,
    )

    async def override_get_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing FastAPI endpoints.

    Usage:
        async def test_something(client: AsyncClient):
            response = await client.get("/api/v1/healthcheck")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def raw_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Client that returns 500 responses instead of re-raising server errors.

    Starlette re-raises unhandled exceptions after the 500 handler has
    produced its response; this transport swallows the re-raise so the
    response can be inspected.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ================================
# Data Factories
# ================================

@pytest.fixture
def make_user(db_session: AsyncSession, settings):
    """
    Create users directly in the database.

    Usage:
        alice = await make_user("alice")
    """
    async def factory(username: str, password: str = DEFAULT_PASSWORD, **fields) -> User:
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            full_name=fields.pop("full_name", username.title()),
            password_hash=get_password_hash(password, settings.BCRYPT_ROUNDS),
            avatar=fields.pop("avatar", f"https://media.test/avatars/{username}.png"),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return factory


@pytest.fixture
def make_video(db_session: AsyncSession):
    async def factory(owner: User, title: str = "A video", **fields) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title,
            description=fields.pop("description", f"About {title}"),
            video_file=fields.pop("video_file", "https://media.test/videos/file.mp4"),
            thumbnail=fields.pop("thumbnail", "https://media.test/thumbnails/file.png"),
            duration=fields.pop("duration", 60.0),
            **fields,
        )
        db_session.add(video)
        await db_session.commit()
        await db_session.refresh(video)
        return video

    return factory


@pytest.fixture
def make_comment(db_session: AsyncSession):
    async def factory(video: Video, owner: User, content: str = "Nice!") -> Comment:
        comment = Comment(video_id=video.id, owner_id=owner.id, content=content)
        db_session.add(comment)
        await db_session.commit()
        await db_session.refresh(comment)
        return comment

    return factory


@pytest.fixture
def make_tweet(db_session: AsyncSession):
    async def factory(owner: User, content: str = "Hello") -> Tweet:
        tweet = Tweet(owner_id=owner.id, content=content)
        db_session.add(tweet)
        await db_session.commit()
        await db_session.refresh(tweet)
        return tweet

    return factory


@pytest.fixture
def make_playlist(db_session: AsyncSession):
    async def factory(owner: User, name: str = "Favourites", description: str = "") -> Playlist:
        playlist = Playlist(owner_id=owner.id, name=name, description=description)
        db_session.add(playlist)
        await db_session.commit()
        await db_session.refresh(playlist)
        return playlist

    return factory


# ================================
# User & Authentication Fixtures
# ================================

def auth_headers_for(user: User, settings: Settings) -> dict[str, str]:
    """Bearer header carrying a valid access token for ``user``."""
    token = create_access_token({"sub": user.id, "username": user.username}, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
def alice_headers(alice: User, settings) -> dict[str, str]:
    return auth_headers_for(alice, settings)


@pytest.fixture
def bob_headers(bob: User, settings) -> dict[str, str]:
    return auth_headers_for(bob, settings)


@pytest.fixture
def headers_for(settings):
    """Build auth headers for any user created inside a test."""
    return lambda user: auth_headers_for(user, settings)
