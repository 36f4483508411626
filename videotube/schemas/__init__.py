"""
Pydantic schemas for request/response validation.

Import all schemas here for easy access.
"""

from videotube.schemas.common import ApiResponse, CamelModel, ErrorResponse, Page, ok
from videotube.schemas.engagement import (
    ChannelStats,
    LikeOut,
    LikesCount,
    LikeToggleResult,
    SubscriptionOut,
    SubscriptionToggleResult,
)
from videotube.schemas.users import (
    ChangePasswordRequest,
    ChannelProfile,
    LoginRequest,
    LoginResult,
    OwnerSummary,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserPublic,
    WatchHistoryIds,
)
from videotube.schemas.videos import (
    CommentBody,
    CommentOut,
    CommentWithOwner,
    PlaylistCreate,
    PlaylistDetail,
    PlaylistOut,
    PlaylistSummary,
    PlaylistUpdate,
    TweetBody,
    TweetOut,
    VideoOut,
    VideoWithOwner,
    ViewCount,
)

__all__ = [
    # Envelopes
    "ApiResponse",
    "CamelModel",
    "ErrorResponse",
    "Page",
    "ok",
    # Users
    "OwnerSummary",
    "UserPublic",
    "ChannelProfile",
    "LoginRequest",
    "LoginResult",
    "TokenPair",
    "RefreshRequest",
    "ChangePasswordRequest",
    "UpdateAccountRequest",
    "WatchHistoryIds",
    # Content
    "VideoOut",
    "VideoWithOwner",
    "ViewCount",
    "CommentBody",
    "CommentOut",
    "CommentWithOwner",
    "TweetBody",
    "TweetOut",
    "PlaylistCreate",
    "PlaylistUpdate",
    "PlaylistOut",
    "PlaylistSummary",
    "PlaylistDetail",
    # Engagement
    "LikeOut",
    "LikeToggleResult",
    "LikesCount",
    "SubscriptionOut",
    "SubscriptionToggleResult",
    "ChannelStats",
]
