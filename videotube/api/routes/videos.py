"""
Video endpoints.

This module provides:
- Search/list videos (paginated, sortable, optional owner filter)
- Publish a video (multipart: video file + thumbnail)
- Get, update and delete a video
- Toggle visibility and count a view

Visibility:
-----------
Private videos are returned only to their owner; to everyone else they do
not exist (404). Updates and deletes are owner-only (403 otherwise).
"""

from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from sqlalchemy import delete, select, update

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.core.context import AppSettings, Media
from videotube.core.errors import BadRequestError, NotFoundError
from videotube.core.logging import get_logger
from videotube.db.deps import DBSession
from videotube.models.content import Comment, Video
from videotube.models.relationships import LikeTarget
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, Page, ok
from videotube.schemas.videos import VideoOut, VideoWithOwner, ViewCount
from videotube.services.aggregation import visible_to
from videotube.services.ownership import owned_or_forbidden
from videotube.services.toggles import delete_likes_for
from videotube.services.uploads import has_content, store_upload
from videotube.services.validation import ensure_identifier, require_text

logger = get_logger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"], responses=ERROR_RESPONSES)


# ================================
# Listing & Publishing
# ================================

@router.get("", response_model=ApiResponse[Page[VideoWithOwner]])
async def list_videos(
    current_user: CurrentUser,
    aggregations: Aggregations,
    settings: AppSettings,
    page: int = 1,
    limit: Optional[int] = None,
    query: Optional[str] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "createdAt",
    sort_type: Annotated[str, Query(alias="sortType")] = "desc",
    user_id: Annotated[Optional[int], Query(alias="userId")] = None,
):
    """
    Search and list videos.

    Query Parameters:
    -----------------
    - page, limit: pagination (limit defaults to PAGE_SIZE_DEFAULT)
    - query: free-text search over title and description
    - sortBy: createdAt | updatedAt | views | duration | title
    - sortType: asc | desc
    - userId: only videos of this owner

    Example:
        GET /api/v1/videos?query=python&sortBy=views&sortType=desc&page=2
    """
    result = await aggregations.list_videos(
        page,
        settings.PAGE_SIZE_DEFAULT if limit is None else limit,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        owner_id=user_id,
        viewer_id=current_user.id,
    )
    return ok(result, "Videos fetched successfully")


@router.post("", response_model=ApiResponse[VideoOut], status_code=status.HTTP_201_CREATED)
async def publish_video(
    current_user: CurrentUser,
    db: DBSession,
    media: Media,
    settings: AppSettings,
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    video_file: Annotated[Optional[UploadFile], File(alias="videoFile")] = None,
    thumbnail: Annotated[Optional[UploadFile], File()] = None,
):
    """
    Upload a video and its thumbnail, then store the video record.

    The duration comes from the media host's response.

    Raises:
        400: missing title, description, video file or thumbnail
        500: the media host rejected an upload
    """
    clean_title = require_text(title, "Title is required")
    clean_description = require_text(description, "Description is required")
    if not has_content(video_file):
        raise BadRequestError("Video file is required")
    if not has_content(thumbnail):
        raise BadRequestError("Thumbnail is required")

    video_asset = await store_upload(media, video_file, settings.UPLOAD_TEMP_DIR, folder="videos")
    thumbnail_asset = await store_upload(media, thumbnail, settings.UPLOAD_TEMP_DIR, folder="thumbnails")

    video = Video(
        owner_id=current_user.id,
        title=clean_title,
        description=clean_description,
        video_file=video_asset.url,
        thumbnail=thumbnail_asset.url,
        duration=video_asset.duration or 0.0,
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)

    logger.info("video_published", video_id=video.id, owner_id=current_user.id)
    return ok(VideoOut.model_validate(video), "Video published successfully", status.HTTP_201_CREATED)


# ================================
# Single Video
# ================================

@router.get("/{video_id}", response_model=ApiResponse[VideoWithOwner])
async def get_video(video_id: int, current_user: CurrentUser, aggregations: Aggregations):
    video = await aggregations.get_video(video_id, current_user.id)
    return ok(video, "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoOut])
async def update_video(
    video_id: int,
    current_user: CurrentUser,
    db: DBSession,
    media: Media,
    settings: AppSettings,
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    thumbnail: Annotated[Optional[UploadFile], File()] = None,
):
    """Update title, description and/or thumbnail. At least one is required."""
    video = await owned_or_forbidden(db, Video, video_id, current_user.id, "video", "videoId")

    if title is None and description is None and not has_content(thumbnail):
        raise BadRequestError("Title, description or thumbnail is required")

    if title is not None:
        video.title = require_text(title, "Title is required")
    if description is not None:
        video.description = require_text(description, "Description is required")
    if has_content(thumbnail):
        asset = await store_upload(media, thumbnail, settings.UPLOAD_TEMP_DIR, folder="thumbnails")
        video.thumbnail = asset.url

    await db.commit()
    await db.refresh(video)
    return ok(VideoOut.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[dict])
async def delete_video(video_id: int, current_user: CurrentUser, db: DBSession):
    """
    Delete a video.

    Comments, playlist entries and watch-history entries go with it through
    ON DELETE CASCADE. Likes on the video and on its comments are deleted
    explicitly.
    """
    video = await owned_or_forbidden(db, Video, video_id, current_user.id, "video", "videoId")

    comment_ids = (
        await db.execute(select(Comment.id).where(Comment.video_id == video.id))
    ).scalars().all()
    await delete_likes_for(db, LikeTarget.COMMENT, comment_ids)
    await delete_likes_for(db, LikeTarget.VIDEO, [video.id])
    await db.execute(delete(Video).where(Video.id == video.id))
    await db.commit()

    logger.info("video_deleted", video_id=video.id, owner_id=current_user.id)
    return ok({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoOut])
async def toggle_publish_status(video_id: int, current_user: CurrentUser, db: DBSession):
    video = await owned_or_forbidden(db, Video, video_id, current_user.id, "video", "videoId")
    video.is_public = not video.is_public
    await db.commit()
    await db.refresh(video)

    logger.info("video_visibility_changed", video_id=video.id, is_public=video.is_public)
    return ok(VideoOut.model_validate(video), "Video publish status toggled")


@router.patch("/view/{video_id}", response_model=ApiResponse[ViewCount])
async def count_view(video_id: int, current_user: CurrentUser, db: DBSession):
    """Atomically add one view (UPDATE ... SET views = views + 1)."""
    identifier = ensure_identifier(video_id, "videoId")
    result = await db.execute(
        update(Video)
        .where(Video.id == identifier, visible_to(current_user.id))
        .values(views=Video.views + 1)
        .returning(Video.id, Video.views)
        .execution_options(synchronize_session=False)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Video not found")
    await db.commit()
    return ok(ViewCount(id=row.id, views=row.views), "View counted")
