"""
Video, comment and tweet schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from videotube.schemas.common import CamelModel
from videotube.schemas.users import OwnerSummary


# ================================
# Videos
# ================================

class VideoOut(CamelModel):
    """A video as stored."""
    id: int
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_public: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime


class VideoWithOwner(VideoOut):
    """A video with its owner's summary inlined."""
    owner: OwnerSummary


class ViewCount(CamelModel):
    id: int
    views: int


# ================================
# Comments
# ================================

class CommentBody(CamelModel):
    """Body of POST /comments/{video_id} and PATCH /comments/c/{comment_id}."""
    content: str = Field(..., examples=["Great video!"])


class CommentOut(CamelModel):
    id: int
    content: str
    video_id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime


class CommentWithOwner(CommentOut):
    owner: OwnerSummary


# ================================
# Tweets
# ================================

class TweetBody(CamelModel):
    content: str = Field(..., examples=["New video out tomorrow"])


class TweetOut(CamelModel):
    id: int
    content: str
    owner_id: int
    created_at: datetime
    updated_at: datetime


# ================================
# Playlists
# ================================

class PlaylistCreate(CamelModel):
    name: str = Field(..., examples=["Favourites"])
    description: str = Field(default="", examples=["Videos worth rewatching"])


class PlaylistUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class PlaylistOut(CamelModel):
    id: int
    name: str
    description: str
    owner_id: int
    created_at: datetime
    updated_at: datetime


class PlaylistSummary(PlaylistOut):
    total_videos: int


class PlaylistDetail(PlaylistSummary):
    """A playlist with its videos in playlist order."""
    videos: list[VideoWithOwner]
