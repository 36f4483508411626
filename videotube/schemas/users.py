"""
User and authentication schemas (Pydantic models for request/response).

Public user shapes never declare ``password_hash`` or ``refresh_token``, so
those columns cannot leak through ``from_attributes`` serialization.

References:
-----------
- Pydantic: https://docs.pydantic.dev/latest/
- FastAPI Request Body: https://fastapi.tiangolo.com/tutorial/body/
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from videotube.schemas.common import CamelModel


# ================================
# Public User Shapes
# ================================

class OwnerSummary(CamelModel):
    """
    Minimal owner details embedded in videos and comments.

    Example:
        {"id": 3, "username": "alice", "fullName": "Alice", "avatar": "https://..."}
    """
    id: int
    username: str
    full_name: str
    avatar: str


class UserPublic(CamelModel):
    """
    Public-safe user fields.

    Used for the current user, sign-up results, subscriber lists and
    subscribed-channel lists.
    """
    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChannelProfile(CamelModel):
    """
    A channel page: the user plus subscription counters.

    Example response data:
        {
            "id": 1,
            "username": "alice",
            "fullName": "Alice",
            "email": "alice@example.com",
            "avatar": "https://...",
            "coverImage": "",
            "subscribersCount": 12,
            "channelSubscribedToCount": 3,
            "isSubscribed": true
        }
    """
    id: int
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str
    subscribers_count: int = Field(..., description="Users subscribed to this channel")
    channel_subscribed_to_count: int = Field(..., description="Channels this user subscribes to")
    is_subscribed: bool = Field(..., description="Whether the viewer subscribes to this channel")


# ================================
# Authentication
# ================================

class LoginRequest(CamelModel):
    """
    Log in with email (or username) and password.

    Example request:
        POST /api/v1/users/login
        {"email": "alice@example.com", "password": "secret123"}
    """
    email: Optional[str] = Field(None, examples=["alice@example.com"])
    username: Optional[str] = Field(None, examples=["alice"])
    password: str = Field(..., examples=["secret123"])


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    """Returned by login; the same tokens are also set as httponly cookies."""
    user: UserPublic


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str = Field(..., min_length=1)
    confirm_password: str


class UpdateAccountRequest(CamelModel):
    full_name: str
    email: EmailStr


class WatchHistoryIds(CamelModel):
    """The ordered video ids in a user's watch history."""
    watch_history: list[int]
