"""
Database Base Classes and Common Utilities

Foundation for every ORM model in the application.

Key Concepts:
--------------
1. Base: the DeclarativeBase all models share (one MetaData, one registry)
2. TimestampedColumns: id / created_at / updated_at, added to every table
3. BaseModel: Base + TimestampedColumns, what models actually subclass

Learning Resources:
- SQLAlchemy Declarative Base: https://docs.sqlalchemy.org/en/20/orm/declarative_config.html
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, registry


# ================================
# Naming Convention for Constraints
# ================================
# Deterministic constraint names keep Alembic diffs stable and make
# IntegrityErrors readable:
# - uq_likes_target_type: unique constraint on likes starting at target_type
# - fk_videos_owner_id_users: foreign key videos.owner_id -> users
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

orm_registry = registry(metadata=metadata)


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


# ================================
# Base DeclarativeBase Class
# ================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        class Tweet(Base):
            __tablename__ = "tweets"
            id: Mapped[int] = mapped_column(primary_key=True)
    """

    registry = orm_registry
    metadata = metadata

    __tablename__: str


# ================================
# Shared Columns Mixin
# ================================
class TimestampedColumns:
    """
    Mixin giving every table the same bookkeeping columns.

    - id: auto-incrementing integer primary key. Ids double as the
      insertion-order tie-breaker for every ordered listing.
    - created_at: set once on insert (UTC)
    - updated_at: refreshed on every ORM update (UTC)
    """

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Timestamp when record was created (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when record was last updated (UTC)"
    )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"

    def dict(self) -> dict[str, Any]:
        """Column values keyed by column name (debugging and logging)."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }


class BaseModel(Base, TimestampedColumns):
    """
    Ready-to-use base class for all application models.

    Every subclass gets ``id``, ``created_at`` and ``updated_at``.
    """

    __abstract__ = True


# ================================
# String Length Constraints
# ================================
String50 = String(50)  # username
String100 = String(100)  # full name, playlist name
String255 = String(255)  # email, titles
String500 = String(500)  # URLs, refresh tokens
String1000 = String(1000)
