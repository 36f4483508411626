"""
Idempotent-pair toggles: likes and subscriptions.

A toggle flips the existence of one (owner, target) row:

1. ``DELETE ... WHERE <pair> RETURNING id``: if a row went away, the toggle
   was an "un-" and we are done.
2. Otherwise ``INSERT ... ON CONFLICT DO NOTHING RETURNING id``. A concurrent
   toggle that inserted the same pair first makes this return nothing; the
   existing row is then reported as the created one.

Both steps rely on the unique constraint of the pair, never on a
read-then-write check, so racing toggles cannot create duplicates.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.core.errors import BadRequestError, NotFoundError
from videotube.core.logging import get_logger
from videotube.db.base import BaseModel
from videotube.db.upsert import insert_ignoring_conflicts
from videotube.models.content import Comment, Tweet, Video
from videotube.models.relationships import Like, LikeTarget, Subscription
from videotube.models.user import User
from videotube.schemas.engagement import (
    LikeOut,
    LikeToggleResult,
    SubscriptionOut,
    SubscriptionToggleResult,
)
from videotube.services.aggregation import visible_to
from videotube.services.validation import ensure_identifier

logger = get_logger(__name__)

# target type -> (model, path parameter name, not-found message)
LIKE_TARGETS: dict[LikeTarget, tuple[type[BaseModel], str, str]] = {
    LikeTarget.VIDEO: (Video, "videoId", "Video not found"),
    LikeTarget.COMMENT: (Comment, "commentId", "Comment not found"),
    LikeTarget.TWEET: (Tweet, "tweetId", "Tweet not found"),
}


@dataclass
class ToggleOutcome:
    created: bool
    record: Optional[BaseModel] = None


async def toggle_pair(session: AsyncSession, model: type[BaseModel], pair: dict[str, Any]) -> ToggleOutcome:
    """Remove the row matching ``pair`` if present, otherwise create it."""
    conditions = [getattr(model, column) == value for column, value in pair.items()]

    removed = await session.execute(
        delete(model)
        .where(*conditions)
        .returning(model.id)
        .execution_options(synchronize_session=False)
    )
    if removed.scalars().first() is not None:
        return ToggleOutcome(created=False)

    new_id = await insert_ignoring_conflicts(session, model, pair, list(pair))
    if new_id is None:
        # lost the race to an identical toggle
        stmt = select(model).where(*conditions)
    else:
        stmt = select(model).where(model.id == new_id)
    record = (await session.execute(stmt)).scalar_one()
    return ToggleOutcome(created=True, record=record)


# ================================
# Likes
# ================================

async def require_like_target(
    session: AsyncSession,
    target_type: LikeTarget,
    target_id: Any,
    viewer_id: int,
) -> int:
    """Validate the target id and make sure the record exists (404 otherwise)."""
    model, field, missing = LIKE_TARGETS[target_type]
    identifier = ensure_identifier(target_id, field)

    stmt = select(model.id).where(model.id == identifier)
    if model is Video:
        stmt = stmt.where(visible_to(viewer_id))
    if (await session.execute(stmt)).scalar_one_or_none() is None:
        raise NotFoundError(missing)
    return identifier


async def toggle_like(
    session: AsyncSession,
    target_type: LikeTarget,
    target_id: Any,
    user_id: int,
) -> LikeToggleResult:
    identifier = await require_like_target(session, target_type, target_id, user_id)
    outcome = await toggle_pair(
        session,
        Like,
        {"target_type": target_type, "target_id": identifier, "liked_by_id": user_id},
    )
    await session.commit()

    logger.info(
        "like_toggled",
        target_type=target_type.value,
        target_id=identifier,
        user_id=user_id,
        liked=outcome.created,
    )
    return LikeToggleResult(
        liked=outcome.created,
        like=LikeOut.model_validate(outcome.record) if outcome.record is not None else None,
    )


async def delete_likes_for(session: AsyncSession, target_type: LikeTarget, target_ids: Iterable[int]) -> int:
    """
    Remove every like on the given targets.

    Likes have no foreign key to their target, so deleting a video, comment
    or tweet must call this in the same transaction.
    """
    ids = list(target_ids)
    if not ids:
        return 0
    result = await session.execute(
        delete(Like)
        .where(Like.target_type == target_type, Like.target_id.in_(ids))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


# ================================
# Subscriptions
# ================================

async def toggle_subscription(session: AsyncSession, channel_id: Any, subscriber_id: int) -> SubscriptionToggleResult:
    identifier = ensure_identifier(channel_id, "channelId")
    if identifier == subscriber_id:
        raise BadRequestError("You cannot subscribe to your own channel")

    channel = await session.get(User, identifier)
    if channel is None:
        raise NotFoundError("Channel does not exist")

    outcome = await toggle_pair(
        session,
        Subscription,
        {"channel_id": identifier, "subscriber_id": subscriber_id},
    )
    await session.commit()

    logger.info(
        "subscription_toggled",
        channel_id=identifier,
        subscriber_id=subscriber_id,
        subscribed=outcome.created,
    )
    return SubscriptionToggleResult(
        subscribed=outcome.created,
        subscription=SubscriptionOut.model_validate(outcome.record) if outcome.record is not None else None,
    )
