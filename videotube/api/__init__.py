"""
API routes initialization.

This module aggregates all API routers and provides a single router
to include in the main application under ``API_V1_PREFIX``.
"""

from fastapi import APIRouter

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

# Create main API router
api_router = APIRouter()

api_router.include_router(healthcheck.router)
api_router.include_router(users.router)
api_router.include_router(videos.router)
api_router.include_router(comments.router)
api_router.include_router(likes.router)
api_router.include_router(tweets.router)
api_router.include_router(playlists.router)
api_router.include_router(subscriptions.router)
api_router.include_router(dashboard.router)
