"""
Relationship Models

Join rows between users and content. Each one is created and removed by a
toggle (see videotube.services.toggles) and carries a unique constraint on
its natural key, so concurrent toggles can never create duplicates.

Models Included:
----------------
1. LikeTarget (Enum) - What a like points at
2. Like - A user liking a video, a comment or a tweet
3. Subscription - A user subscribing to a channel (another user)

Database Tables:
----------------
- likes: (target_type, target_id, liked_by_id), unique
- subscriptions: (channel_id, subscriber_id), unique
"""

import enum

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from videotube.db.base import BaseModel


# ================================
# Enums
# ================================

class LikeTarget(str, enum.Enum):
    """
    Kind of record a like points at.

    A like references exactly one target: the pair
    (target_type, target_id) identifies it. There is no foreign key on
    target_id because it refers to a different table per type.
    """

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"

    def __str__(self) -> str:
        return self.value


# ================================
# Like Model
# ================================

class Like(BaseModel):
    """
    A user's like on a video, comment or tweet.

    Table: likes
    """

    __tablename__ = "likes"

    target_type: Mapped[LikeTarget] = mapped_column(
        nullable=False,
        comment="video, comment or tweet"
    )

    target_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Id of the liked record in the table named by target_type"
    )

    liked_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "target_type",
            "target_id",
            "liked_by_id",
            name="uq_likes_target_liked_by",
        ),
        # Counting likes per target
        Index("ix_likes_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return (
            f"Like(id={self.id}, target={self.target_type.value}:{self.target_id}, "
            f"liked_by_id={self.liked_by_id})"
        )


# ================================
# Subscription Model
# ================================

class Subscription(BaseModel):
    """
    ``subscriber`` follows ``channel``.

    Table: subscriptions

    Both columns point at users: every user is a channel.
    """

    __tablename__ = "subscriptions"

    channel_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User being subscribed to"
    )

    subscriber_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User who subscribes"
    )

    __table_args__ = (
        UniqueConstraint(
            "channel_id",
            "subscriber_id",
            name="uq_subscriptions_channel_subscriber",
        ),
    )
