"""
Aggregation Query Service

Builds the denormalized read models the API serves: paginated video and
comment feeds with their owners inlined, channel profiles with subscription
counters, channel statistics, liked-videos and watch-history feeds,
subscriber lists and playlist views.

Each logical query is one composed ``select()`` (filter → join → shape →
sort → paginate) executed in a single round trip. Paginated queries add a
second statement for the total count. Channel statistics are the exception:
four small independent counts, with no cross-statement consistency.

Validation happens first: identifiers, page numbers and sort options are
checked before any statement is sent to the database.

Visibility:
-----------
Private videos (``is_public`` False) appear only to their owner. Every
video-returning query applies ``visible_to(viewer_id)``.
"""

from collections.abc import Sequence
from typing import Any, Optional

from sqlalchemy import Select, and_, exists, false, func, literal_column, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from videotube.core.errors import BadRequestError, NotFoundError
from videotube.core.logging import get_logger
from videotube.db.upsert import dialect_name
from videotube.models.content import Comment, Tweet, Video, video_search_document
from videotube.models.playlist import Playlist, PlaylistVideo
from videotube.models.relationships import Like, LikeTarget, Subscription
from videotube.models.user import User, WatchHistoryEntry
from videotube.schemas.common import Page
from videotube.schemas.engagement import ChannelStats
from videotube.schemas.users import ChannelProfile, OwnerSummary, UserPublic
from videotube.schemas.videos import (
    CommentOut,
    CommentWithOwner,
    PlaylistDetail,
    PlaylistOut,
    PlaylistSummary,
    TweetOut,
    VideoOut,
    VideoWithOwner,
)
from videotube.services.pagination import PageRequest, PageResult, paginate
from videotube.services.validation import ensure_identifier, normalize_handle

logger = get_logger(__name__)

# The owner joined onto videos and comments
Owner = aliased(User, name="owner")

SORT_FIELDS = {
    "createdAt": Video.created_at,
    "created_at": Video.created_at,
    "updatedAt": Video.updated_at,
    "updated_at": Video.updated_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}
SORT_DIRECTIONS = ("asc", "desc")


# ================================
# Shaping Helpers
# ================================

def visible_to(viewer_id: Optional[int]):
    """Public videos, plus the viewer's own private ones."""
    if viewer_id is None:
        return Video.is_public.is_(True)
    return or_(Video.is_public.is_(True), Video.owner_id == viewer_id)


def video_with_owner(row: Any) -> VideoWithOwner:
    video, owner = row[0], row[1]
    return VideoWithOwner(
        **VideoOut.model_validate(video).model_dump(),
        owner=OwnerSummary.model_validate(owner),
    )


def comment_with_owner(row: Any) -> CommentWithOwner:
    comment, owner = row[0], row[1]
    return CommentWithOwner(
        **CommentOut.model_validate(comment).model_dump(),
        owner=OwnerSummary.model_validate(owner),
    )


def videos_with_owner() -> Select:
    """SELECT video, owner ... JOIN owner (no FROM for the driving table yet)."""
    return select(Video, Owner).join(Owner, Owner.id == Video.owner_id)


def to_page(result: PageResult, model: type) -> Page:
    return Page[model](
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
        total_docs=result.total_docs,
        docs=result.docs,
    )


# ================================
# Service
# ================================

class AggregationService:
    """Read-model queries over users, videos and their relationships."""

    def __init__(self, db: AsyncSession, max_page_size: int = 100):
        self.db = db
        self.max_page_size = max_page_size

    # ========================================
    # Lookups
    # ========================================

    async def require_user(self, user_id: Any, message: str = "User not found", field: str = "userId") -> User:
        identifier = ensure_identifier(user_id, field)
        user = await self.db.get(User, identifier)
        if user is None:
            raise NotFoundError(message)
        return user

    async def require_video(self, video_id: Any) -> Video:
        identifier = ensure_identifier(video_id, "videoId")
        video = await self.db.get(Video, identifier)
        if video is None:
            raise NotFoundError("Video not found")
        return video

    async def get_video(self, video_id: Any, viewer_id: Optional[int]) -> VideoWithOwner:
        """One video with its owner; private videos are hidden from non-owners."""
        identifier = ensure_identifier(video_id, "videoId")
        stmt = videos_with_owner().where(Video.id == identifier, visible_to(viewer_id))
        row = (await self.db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Video not found")
        return video_with_owner(row)

    # ========================================
    # Paginated Feeds
    # ========================================

    async def comments_for_video(self, video_id: Any, page: Any, limit: Any) -> Page[CommentWithOwner]:
        """
        Comments on a video, newest first, each with its owner.

        A video without comments (or an unknown video id) yields an empty page.
        """
        identifier = ensure_identifier(video_id, "videoId")
        request = PageRequest.validate(page, limit, self.max_page_size)

        base = (
            select(Comment, Owner)
            .join(Owner, Owner.id == Comment.owner_id)
            .where(Comment.video_id == identifier)
        )
        result = await paginate(
            self.db,
            base,
            (Comment.created_at.desc(), Comment.id.desc()),
            request,
            comment_with_owner,
        )
        return to_page(result, CommentWithOwner)

    async def list_videos(
        self,
        page: Any,
        limit: Any,
        *,
        query: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
        owner_id: Any = None,
        viewer_id: Optional[int] = None,
    ) -> Page[VideoWithOwner]:
        """
        Search and list videos.

        Pipeline: text filter → owner filter → visibility → owner join →
        sort (``id`` breaks ties in the same direction) → paginate.

        Raises:
            BadRequestError: bad page/limit, unknown sort field or direction,
                malformed owner id
        """
        request = PageRequest.validate(page, limit, self.max_page_size)

        sort_column = SORT_FIELDS.get(sort_by)
        if sort_column is None:
            raise BadRequestError("Invalid sortBy (allowed: createdAt, updatedAt, views, duration, title)")
        direction = (sort_type or "").lower()
        if direction not in SORT_DIRECTIONS:
            raise BadRequestError("Invalid sortType (allowed: asc, desc)")

        conditions = [visible_to(viewer_id)]

        if owner_id not in (None, ""):
            conditions.append(Video.owner_id == ensure_identifier(owner_id, "userId"))

        text = (query or "").strip()
        if text:
            conditions.append(self._text_match(text))

        base = videos_with_owner().where(*conditions)

        if direction == "asc":
            ordering: Sequence[Any] = (sort_column.asc(), Video.id.asc())
        else:
            ordering = (sort_column.desc(), Video.id.desc())

        result = await paginate(self.db, base, ordering, request, video_with_owner)

        logger.debug(
            "videos_listed",
            query=text or None,
            owner_id=owner_id,
            sort_by=sort_by,
            sort_type=direction,
            total_docs=result.total_docs,
        )
        return to_page(result, VideoWithOwner)

    def _text_match(self, text: str):
        if dialect_name(self.db) == "postgresql":
            return video_search_document().op("@@")(
                func.plainto_tsquery(literal_column("'english'"), text)
            )
        return or_(
            Video.title.icontains(text, autoescape=True),
            Video.description.icontains(text, autoescape=True),
        )

    # ========================================
    # Channel Views
    # ========================================

    async def channel_profile(self, username: Optional[str], viewer_id: Optional[int]) -> ChannelProfile:
        """
        A channel page by username, in one statement.

        ``subscribersCount`` counts subscriptions where the user is the
        channel, ``channelSubscribedToCount`` those where the user is the
        subscriber, and ``isSubscribed`` tells whether the viewer is among the
        subscribers.
        """
        handle = normalize_handle(username, "Username is missing")

        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        if viewer_id is None:
            is_subscribed = false()
        else:
            is_subscribed = (
                exists()
                .where(
                    Subscription.channel_id == User.id,
                    Subscription.subscriber_id == viewer_id,
                )
                .correlate(User)
            )

        stmt = select(
            User,
            subscribers_count.label("subscribers_count"),
            subscribed_to_count.label("channel_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == handle)

        row = (await self.db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Channel does not exist")

        user = row[0]
        return ChannelProfile(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            email=user.email,
            avatar=user.avatar,
            cover_image=user.cover_image,
            subscribers_count=row.subscribers_count or 0,
            channel_subscribed_to_count=row.channel_subscribed_to_count or 0,
            is_subscribed=bool(row.is_subscribed),
        )

    async def channel_stats(self, channel_id: Any) -> ChannelStats:
        """
        Dashboard counters. Four independent statements; every total is 0
        for a channel without subscribers, videos or likes.
        """
        channel = await self.require_user(channel_id, "Channel does not exist", "channelId")

        total_subscribers = await self._scalar(
            select(func.count(Subscription.id)).where(Subscription.channel_id == channel.id)
        )
        total_videos = await self._scalar(
            select(func.count(Video.id)).where(Video.owner_id == channel.id)
        )
        total_views = await self._scalar(
            select(func.coalesce(func.sum(Video.views), 0)).where(Video.owner_id == channel.id)
        )
        total_likes = await self._scalar(
            select(func.count(Like.id))
            .select_from(Like)
            .join(
                Video,
                and_(Like.target_type == LikeTarget.VIDEO, Like.target_id == Video.id),
            )
            .where(Video.owner_id == channel.id)
        )

        return ChannelStats(
            total_subscribers=total_subscribers,
            total_videos=total_videos,
            total_views=total_views,
            total_likes=total_likes,
        )

    async def channel_videos(self, channel_id: Any, viewer_id: Optional[int]) -> list[VideoOut]:
        """A channel's videos, newest first (private ones only for the owner)."""
        channel = await self.require_user(channel_id, "Channel does not exist", "channelId")
        stmt = (
            select(Video)
            .where(Video.owner_id == channel.id, visible_to(viewer_id))
            .order_by(Video.created_at.desc(), Video.id.desc())
        )
        videos = (await self.db.execute(stmt)).scalars().all()
        return [VideoOut.model_validate(video) for video in videos]

    # ========================================
    # User Feeds
    # ========================================

    async def liked_videos(self, user_id: int) -> list[VideoWithOwner]:
        """Videos the user liked, most recently liked first, owners inlined."""
        stmt = (
            select(Video, Owner)
            .select_from(Like)
            .join(
                Video,
                and_(Like.target_type == LikeTarget.VIDEO, Like.target_id == Video.id),
            )
            .join(Owner, Owner.id == Video.owner_id)
            .where(Like.liked_by_id == user_id, visible_to(user_id))
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [video_with_owner(row) for row in rows]

    async def watch_history(self, user_id: Any) -> list[VideoWithOwner]:
        """The user's watched videos in the order they were first watched."""
        user = await self.require_user(user_id)
        stmt = (
            select(Video, Owner)
            .select_from(WatchHistoryEntry)
            .join(Video, Video.id == WatchHistoryEntry.video_id)
            .join(Owner, Owner.id == Video.owner_id)
            .where(WatchHistoryEntry.user_id == user.id, visible_to(user.id))
            .order_by(WatchHistoryEntry.id.asc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [video_with_owner(row) for row in rows]

    async def watch_history_ids(self, user_id: int) -> list[int]:
        stmt = (
            select(WatchHistoryEntry.video_id)
            .where(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.id.asc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def user_tweets(self, user_id: Any) -> list[TweetOut]:
        """A user's tweets, newest first."""
        user = await self.require_user(user_id)
        stmt = (
            select(Tweet)
            .where(Tweet.owner_id == user.id)
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        )
        tweets = (await self.db.execute(stmt)).scalars().all()
        return [TweetOut.model_validate(tweet) for tweet in tweets]

    # ========================================
    # Subscriptions
    # ========================================

    async def subscribers(self, channel_id: Any) -> list[UserPublic]:
        """Users subscribed to a channel, in subscription order."""
        channel = await self.require_user(channel_id, "Channel does not exist", "channelId")
        stmt = (
            select(User)
            .join(Subscription, Subscription.subscriber_id == User.id)
            .where(Subscription.channel_id == channel.id)
            .order_by(Subscription.id.asc())
        )
        users = (await self.db.execute(stmt)).scalars().all()
        return [UserPublic.model_validate(user) for user in users]

    async def subscribed_channels(self, subscriber_id: Any) -> list[UserPublic]:
        """Channels a user subscribes to, in subscription order."""
        subscriber = await self.require_user(subscriber_id, "User not found", "subscriberId")
        stmt = (
            select(User)
            .join(Subscription, Subscription.channel_id == User.id)
            .where(Subscription.subscriber_id == subscriber.id)
            .order_by(Subscription.id.asc())
        )
        users = (await self.db.execute(stmt)).scalars().all()
        return [UserPublic.model_validate(user) for user in users]

    # ========================================
    # Likes
    # ========================================

    async def video_likes_count(self, video_id: Any) -> int:
        video = await self.require_video(video_id)
        return await self._scalar(
            select(func.count(Like.id)).where(
                Like.target_type == LikeTarget.VIDEO,
                Like.target_id == video.id,
            )
        )

    # ========================================
    # Playlists
    # ========================================

    def _visible_entries_count(self, viewer_id: Optional[int]):
        return (
            select(func.count(PlaylistVideo.id))
            .join(Video, Video.id == PlaylistVideo.video_id)
            .where(PlaylistVideo.playlist_id == Playlist.id, visible_to(viewer_id))
            .correlate(Playlist)
            .scalar_subquery()
        )

    async def user_playlists(self, user_id: Any, viewer_id: Optional[int]) -> list[PlaylistSummary]:
        """A user's playlists in creation order, each with its video count."""
        owner = await self.require_user(user_id)
        stmt = (
            select(Playlist, self._visible_entries_count(viewer_id).label("total_videos"))
            .where(Playlist.owner_id == owner.id)
            .order_by(Playlist.id.asc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            PlaylistSummary(
                **PlaylistOut.model_validate(row[0]).model_dump(),
                total_videos=row.total_videos or 0,
            )
            for row in rows
        ]

    async def playlist_detail(self, playlist_id: Any, viewer_id: Optional[int]) -> PlaylistDetail:
        """A playlist with its videos in playlist order, owners inlined."""
        identifier = ensure_identifier(playlist_id, "playlistId")
        playlist = await self.db.get(Playlist, identifier)
        if playlist is None:
            raise NotFoundError("Playlist not found")

        stmt = (
            select(Video, Owner)
            .select_from(PlaylistVideo)
            .join(Video, Video.id == PlaylistVideo.video_id)
            .join(Owner, Owner.id == Video.owner_id)
            .where(PlaylistVideo.playlist_id == playlist.id, visible_to(viewer_id))
            .order_by(PlaylistVideo.id.asc())
        )
        videos = [video_with_owner(row) for row in (await self.db.execute(stmt)).all()]

        return PlaylistDetail(
            **PlaylistOut.model_validate(playlist).model_dump(),
            total_videos=len(videos),
            videos=videos,
        )

    # ========================================
    # Helpers
    # ========================================

    async def _scalar(self, stmt: Select) -> int:
        value = (await self.db.execute(stmt)).scalar()
        return int(value or 0)


def get_aggregation_service(db: AsyncSession, max_page_size: int = 100) -> AggregationService:
    """Factory function to create an AggregationService instance."""
    return AggregationService(db, max_page_size=max_page_size)
