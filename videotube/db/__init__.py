"""Database utilities and session management."""

from videotube.db.base import Base, BaseModel, String50, String100, String255, String500, String1000
from videotube.db.session import (
    build_engine,
    build_session_factory,
    check_db_health,
    close_db,
    init_db,
    session_scope,
)

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    # String types
    "String50",
    "String100",
    "String255",
    "String500",
    "String1000",
    # Engine and sessions
    "build_engine",
    "build_session_factory",
    "session_scope",
    "init_db",
    "close_db",
    "check_db_health",
]
