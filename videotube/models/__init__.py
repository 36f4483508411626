"""
Database Models

Import models from this module so every table is registered on
``Base.metadata`` before ``create_all`` or Alembic autogenerate runs:

    from videotube.models import User, Video, Like
"""

from videotube.models.content import Comment, Tweet, Video
from videotube.models.playlist import Playlist, PlaylistVideo
from videotube.models.relationships import Like, LikeTarget, Subscription
from videotube.models.user import User, WatchHistoryEntry

__all__ = [
    # Accounts
    "User",
    "WatchHistoryEntry",
    # Content
    "Video",
    "Comment",
    "Tweet",
    "Playlist",
    "PlaylistVideo",
    # Relationships
    "Like",
    "Subscription",
    # Enums
    "LikeTarget",
]
