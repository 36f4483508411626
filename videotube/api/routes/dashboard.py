"""
Channel dashboard endpoints.
"""

from fastapi import APIRouter

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.engagement import ChannelStats
from videotube.schemas.videos import VideoOut

router = APIRouter(prefix="/dashboard", tags=["dashboard"], responses=ERROR_RESPONSES)


@router.get("/stats/{channel_id}", response_model=ApiResponse[ChannelStats])
async def get_channel_stats(channel_id: int, current_user: CurrentUser, aggregations: Aggregations):
    """
    Totals for a channel: subscribers, videos, views and likes.

    Example response data:
        {"totalSubscribers": 4, "totalVideos": 2, "totalViews": 130, "totalLikes": 9}
    """
    stats = await aggregations.channel_stats(channel_id)
    return ok(stats, "Channel stats fetched successfully")


@router.get("/videos/{channel_id}", response_model=ApiResponse[list[VideoOut]])
async def get_channel_videos(channel_id: int, current_user: CurrentUser, aggregations: Aggregations):
    videos = await aggregations.channel_videos(channel_id, current_user.id)
    return ok(videos, "Channel videos fetched successfully")
