"""
Comment endpoints.

- GET  /comments/{video_id}       paginated comments, newest first
- POST /comments/{video_id}       add a comment
- PATCH/DELETE /comments/c/{id}   owner-only edit and delete
"""

from typing import Optional

from fastapi import APIRouter, status

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.core.context import AppSettings
from videotube.core.logging import get_logger
from videotube.db.deps import DBSession
from videotube.models.content import Comment
from videotube.models.relationships import LikeTarget
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, Page, ok
from videotube.schemas.users import OwnerSummary
from videotube.schemas.videos import CommentBody, CommentOut, CommentWithOwner
from videotube.services.ownership import owned_or_forbidden
from videotube.services.toggles import delete_likes_for
from videotube.services.validation import require_text

logger = get_logger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"], responses=ERROR_RESPONSES)


@router.get("/{video_id}", response_model=ApiResponse[Page[CommentWithOwner]])
async def get_video_comments(
    video_id: int,
    current_user: CurrentUser,
    aggregations: Aggregations,
    settings: AppSettings,
    page: int = 1,
    limit: Optional[int] = None,
):
    """
    Comments on a video, each with its author's summary.

    Example:
        GET /api/v1/comments/12?page=1&limit=10
    """
    comments = await aggregations.comments_for_video(
        video_id,
        page,
        settings.PAGE_SIZE_DEFAULT if limit is None else limit,
    )
    return ok(comments, "Comments fetched successfully")


@router.post(
    "/{video_id}",
    response_model=ApiResponse[CommentWithOwner],
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    video_id: int,
    payload: CommentBody,
    current_user: CurrentUser,
    db: DBSession,
    aggregations: Aggregations,
):
    content = require_text(payload.content, "Content is required")
    video = await aggregations.get_video(video_id, current_user.id)

    comment = Comment(content=content, video_id=video.id, owner_id=current_user.id)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    logger.info("comment_added", comment_id=comment.id, video_id=video.id, owner_id=current_user.id)
    return ok(
        CommentWithOwner(
            **CommentOut.model_validate(comment).model_dump(),
            owner=OwnerSummary.model_validate(current_user),
        ),
        "Comment added successfully",
        status.HTTP_201_CREATED,
    )


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentOut])
async def update_comment(comment_id: int, payload: CommentBody, current_user: CurrentUser, db: DBSession):
    comment = await owned_or_forbidden(db, Comment, comment_id, current_user.id, "comment", "commentId")
    comment.content = require_text(payload.content, "Content is required")
    await db.commit()
    await db.refresh(comment)
    return ok(CommentOut.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def delete_comment(comment_id: int, current_user: CurrentUser, db: DBSession):
    comment = await owned_or_forbidden(db, Comment, comment_id, current_user.id, "comment", "commentId")
    await delete_likes_for(db, LikeTarget.COMMENT, [comment.id])
    await db.delete(comment)
    await db.commit()

    logger.info("comment_deleted", comment_id=comment.id)
    return ok({}, "Comment deleted successfully")
