"""
Likes, subscriptions and dashboard schemas.
"""

from datetime import datetime
from typing import Optional

from videotube.models.relationships import LikeTarget
from videotube.schemas.common import CamelModel


class LikeOut(CamelModel):
    id: int
    target_type: LikeTarget
    target_id: int
    liked_by_id: int
    created_at: datetime


class LikeToggleResult(CamelModel):
    """
    Outcome of a like toggle.

    ``like`` is the created record, or null when the toggle removed it.
    """
    liked: bool
    like: Optional[LikeOut] = None


class LikesCount(CamelModel):
    likes_count: int


class SubscriptionOut(CamelModel):
    id: int
    channel_id: int
    subscriber_id: int
    created_at: datetime


class SubscriptionToggleResult(CamelModel):
    subscribed: bool
    subscription: Optional[SubscriptionOut] = None


class ChannelStats(CamelModel):
    """
    Dashboard counters for a channel.

    Each counter is an independent query; all are 0 for an empty channel.
    """
    total_subscribers: int
    total_videos: int
    total_views: int
    total_likes: int
