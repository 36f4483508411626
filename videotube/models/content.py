"""
Content Models

Models Included:
----------------
1. Video - An uploaded video and its hosted media
2. Comment - A comment on a video
3. Tweet - A short text post on a channel

Database Tables:
----------------
- videos: Video metadata, media URLs, view count, visibility
- comments: Comments (video_id, owner_id)
- tweets: Channel posts (owner_id)

Relationships:
--------------
- User (1) ←→ (Many) Video / Comment / Tweet, through owner_id
- Video (1) ←→ (Many) Comment

Deleting a video removes its comments at the database level
(ON DELETE CASCADE). Likes point at their target through a tagged
reference with no foreign key, so they are removed by the handler that
deletes the target (see videotube.services.toggles.delete_likes_for).

Full-text Search:
-----------------
On PostgreSQL the title and description are searched through a GIN index
over ``to_tsvector('english', title || ' ' || description)``. Other
dialects (SQLite in tests) fall back to a case-insensitive substring match;
see ``AggregationService.list_videos``.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    func,
    literal_column,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from videotube.db.base import BaseModel, String255, String500


# ================================
# Video Model
# ================================

class Video(BaseModel):
    """
    An uploaded video.

    Table: videos

    View Counting:
    --------------
    ``views`` only changes through an atomic
    ``UPDATE videos SET views = views + 1`` so concurrent viewers never lose
    increments. The check constraint keeps it non-negative.

    Visibility:
    -----------
    ``is_public`` False hides the video from everyone except its owner.
    """

    __tablename__ = "videos"

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Channel (user) that uploaded the video"
    )

    video_file: Mapped[str] = mapped_column(
        String500,
        nullable=False,
        comment="Hosted video URL"
    )

    thumbnail: Mapped[str] = mapped_column(
        String500,
        nullable=False,
        comment="Hosted thumbnail URL"
    )

    title: Mapped[str] = mapped_column(
        String255,
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    duration: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="Length in seconds, as reported by the media host"
    )

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
        index=True,
    )

    __table_args__ = (
        CheckConstraint("views >= 0", name="views_non_negative"),
    )

    def __repr__(self) -> str:
        return f"Video(id={self.id}, title='{self.title}', owner_id={self.owner_id})"


def video_search_document():
    """The tsvector expression the GIN index is built on."""
    return func.to_tsvector(
        literal_column("'english'"),
        Video.title + literal_column("' '") + Video.description,
    )


Index(
    "ix_videos_search_document",
    video_search_document(),
    postgresql_using="gin",
).ddl_if(dialect="postgresql")


# ================================
# Comment Model
# ================================

class Comment(BaseModel):
    """
    A comment on a video.

    Table: comments
    """

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)

    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ================================
# Tweet Model
# ================================

class Tweet(BaseModel):
    """
    A short text post on a channel.

    Table: tweets
    """

    __tablename__ = "tweets"

    content: Mapped[str] = mapped_column(Text, nullable=False)

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
