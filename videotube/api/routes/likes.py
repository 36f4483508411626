"""
Like endpoints.

Likes are toggles: the same request adds a like and, repeated, removes it.
Videos, comments and tweets share one ``likes`` table, told apart by
``target_type``.
"""

from fastapi import APIRouter

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.db.deps import DBSession
from videotube.models.relationships import LikeTarget
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.engagement import LikesCount, LikeToggleResult
from videotube.schemas.videos import VideoWithOwner
from videotube.services.toggles import toggle_like

router = APIRouter(prefix="/likes", tags=["likes"], responses=ERROR_RESPONSES)


def toggle_message(result: LikeToggleResult) -> str:
    return "Liked successfully" if result.liked else "Like removed successfully"


# ================================
# Toggles
# ================================

@router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_video_like(video_id: int, current_user: CurrentUser, db: DBSession):
    """
    Like or unlike a video.

    Example response data:
        {"liked": true, "like": {"id": 7, "targetType": "video", "targetId": 3, ...}}
        {"liked": false, "like": null}
    """
    result = await toggle_like(db, LikeTarget.VIDEO, video_id, current_user.id)
    return ok(result, toggle_message(result))


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_comment_like(comment_id: int, current_user: CurrentUser, db: DBSession):
    result = await toggle_like(db, LikeTarget.COMMENT, comment_id, current_user.id)
    return ok(result, toggle_message(result))


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_tweet_like(tweet_id: int, current_user: CurrentUser, db: DBSession):
    result = await toggle_like(db, LikeTarget.TWEET, tweet_id, current_user.id)
    return ok(result, toggle_message(result))


# ================================
# Feeds
# ================================

@router.get("/videos", response_model=ApiResponse[list[VideoWithOwner]])
async def get_liked_videos(current_user: CurrentUser, aggregations: Aggregations):
    """Videos the current user liked, most recent like first."""
    videos = await aggregations.liked_videos(current_user.id)
    return ok(videos, "Liked videos fetched successfully")


@router.get("/video/{video_id}", response_model=ApiResponse[LikesCount])
async def get_video_likes_count(video_id: int, current_user: CurrentUser, aggregations: Aggregations):
    count = await aggregations.video_likes_count(video_id)
    return ok(LikesCount(likes_count=count), "Likes count fetched successfully")
