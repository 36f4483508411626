"""
API route modules.

Import all route modules here for easy access.
"""

from videotube.api.routes import (
    comments,
    dashboard,
    healthcheck,
    likes,
    playlists,
    subscriptions,
    tweets,
    users,
    videos,
)

__all__ = [
    "comments",
    "dashboard",
    "healthcheck",
    "likes",
    "playlists",
    "subscriptions",
    "tweets",
    "users",
    "videos",
]
