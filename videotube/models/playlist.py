"""
Playlist Models

Models Included:
----------------
1. Playlist - A named, ordered collection of videos owned by a user
2. PlaylistVideo - Membership of one video in one playlist

Database Tables:
----------------
- playlists: name, description, owner_id
- playlist_videos: (playlist_id, video_id), unique; order = entry id

Deleting a playlist or a video removes the membership rows
(ON DELETE CASCADE on both foreign keys).
"""

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from videotube.db.base import BaseModel, String100


class Playlist(BaseModel):
    """
    A user's playlist.

    Table: playlists
    """

    __tablename__ = "playlists"

    name: Mapped[str] = mapped_column(String100, nullable=False)

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"Playlist(id={self.id}, name='{self.name}', owner_id={self.owner_id})"


class PlaylistVideo(BaseModel):
    """
    A video's place in a playlist.

    Table: playlist_videos
    """

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_videos_playlist_video"),
    )
