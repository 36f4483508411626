"""
User Models

Models Included:
----------------
1. User - An account. Every account is also a channel: it owns videos,
   tweets and playlists, and other users subscribe to it.
2. WatchHistoryEntry - One (user, video) pair in a user's watch history

Database Tables:
----------------
- users: Accounts, credentials and the active refresh token
- watch_history: Ordered, duplicate-free history of watched videos

Relationships:
--------------
- User (1) ←→ (Many) WatchHistoryEntry ←→ (1) Video
  History order is insertion order (entry id). The unique constraint on
  (user_id, video_id) keeps a video from appearing twice.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from videotube.db.base import BaseModel, String50, String100, String255, String500


# ================================
# User Model
# ================================

class User(BaseModel):
    """
    Platform account (and channel).

    Table: users

    Normalization:
    --------------
    ``username`` and ``email`` are stored trimmed and lowercased, so lookups
    (login, channel profile) compare against normalized input.

    Sensitive Columns:
    ------------------
    ``password_hash`` and ``refresh_token`` are never serialized; the public
    response schemas simply do not declare them.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String50,
        unique=True,
        index=True,
        nullable=False,
        comment="Lowercased, trimmed handle; doubles as the channel name"
    )

    email: Mapped[str] = mapped_column(
        String255,
        unique=True,
        index=True,
        nullable=False,
        comment="Lowercased email address"
    )

    full_name: Mapped[str] = mapped_column(
        String100,
        nullable=False,
        comment="Display name"
    )

    password_hash: Mapped[str] = mapped_column(
        String255,
        nullable=False,
        comment="bcrypt hash of the password"
    )

    avatar: Mapped[str] = mapped_column(
        String500,
        nullable=False,
        comment="Hosted avatar URL"
    )

    cover_image: Mapped[str] = mapped_column(
        String500,
        nullable=False,
        default="",
        server_default="",
        comment="Hosted cover image URL (empty when not provided)"
    )

    refresh_token: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="The single refresh token currently accepted for this user"
    )
    # Set on login / refresh, cleared on logout.

    def __repr__(self) -> str:
        return f"User(id={self.id}, username='{self.username}')"


# ================================
# Watch History
# ================================

class WatchHistoryEntry(BaseModel):
    """
    A video in a user's watch history.

    Table: watch_history

    Entries are appended with an insert that ignores conflicts on
    (user_id, video_id), so re-watching a video neither duplicates it nor
    moves it.
    """

    __tablename__ = "watch_history"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )
