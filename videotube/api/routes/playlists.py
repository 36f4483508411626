"""
Playlist endpoints.

A playlist is an ordered set of videos owned by one user. Membership rows
are unique per (playlist, video): adding a video twice is a 409, removing
one that is not in the playlist is a 404. Every change is owner-only.
"""

from fastapi import APIRouter, status
from sqlalchemy import delete

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.core.errors import BadRequestError, ConflictError, NotFoundError
from videotube.core.logging import get_logger
from videotube.db.deps import DBSession
from videotube.db.upsert import insert_ignoring_conflicts
from videotube.models.playlist import Playlist, PlaylistVideo
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.videos import (
    PlaylistCreate,
    PlaylistDetail,
    PlaylistOut,
    PlaylistSummary,
    PlaylistUpdate,
)
from videotube.services.ownership import owned_or_forbidden
from videotube.services.validation import ensure_identifier, require_text

logger = get_logger(__name__)

router = APIRouter(prefix="/playlist", tags=["playlists"], responses=ERROR_RESPONSES)


# ================================
# Playlists
# ================================

@router.post("", response_model=ApiResponse[PlaylistOut], status_code=status.HTTP_201_CREATED)
async def create_playlist(payload: PlaylistCreate, current_user: CurrentUser, db: DBSession):
    playlist = Playlist(
        name=require_text(payload.name, "Name is required"),
        description=(payload.description or "").strip(),
        owner_id=current_user.id,
    )
    db.add(playlist)
    await db.commit()
    await db.refresh(playlist)

    logger.info("playlist_created", playlist_id=playlist.id, owner_id=current_user.id)
    return ok(PlaylistOut.model_validate(playlist), "Playlist created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[list[PlaylistSummary]])
async def get_user_playlists(user_id: int, current_user: CurrentUser, aggregations: Aggregations):
    playlists = await aggregations.user_playlists(user_id, current_user.id)
    return ok(playlists, "User playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def get_playlist(playlist_id: int, current_user: CurrentUser, aggregations: Aggregations):
    """A playlist with its videos (owners inlined) in the order they were added."""
    playlist = await aggregations.playlist_detail(playlist_id, current_user.id)
    return ok(playlist, "Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistOut])
async def update_playlist(playlist_id: int, payload: PlaylistUpdate, current_user: CurrentUser, db: DBSession):
    playlist = await owned_or_forbidden(db, Playlist, playlist_id, current_user.id, "playlist", "playlistId")

    if payload.name is None and payload.description is None:
        raise BadRequestError("Name or description is required")
    if payload.name is not None:
        playlist.name = require_text(payload.name, "Name is required")
    if payload.description is not None:
        playlist.description = payload.description.strip()

    await db.commit()
    await db.refresh(playlist)
    return ok(PlaylistOut.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[dict])
async def delete_playlist(playlist_id: int, current_user: CurrentUser, db: DBSession):
    playlist = await owned_or_forbidden(db, Playlist, playlist_id, current_user.id, "playlist", "playlistId")
    await db.delete(playlist)
    await db.commit()

    logger.info("playlist_deleted", playlist_id=playlist.id)
    return ok({}, "Playlist deleted successfully")


# ================================
# Membership
# ================================

@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def add_video_to_playlist(
    video_id: int,
    playlist_id: int,
    current_user: CurrentUser,
    db: DBSession,
    aggregations: Aggregations,
):
    """
    Append a video to a playlist.

    Raises:
        403: the playlist is missing or not the caller's
        404: the video does not exist (or is private to someone else)
        409: the video is already in the playlist
    """
    ensure_identifier(video_id, "videoId")
    playlist = await owned_or_forbidden(db, Playlist, playlist_id, current_user.id, "playlist", "playlistId")
    video = await aggregations.get_video(video_id, current_user.id)

    entry_id = await insert_ignoring_conflicts(
        db,
        PlaylistVideo,
        {"playlist_id": playlist.id, "video_id": video.id},
        ("playlist_id", "video_id"),
    )
    if entry_id is None:
        raise ConflictError("Video already exists in playlist")
    await db.commit()

    logger.info("playlist_video_added", playlist_id=playlist.id, video_id=video.id)
    detail = await aggregations.playlist_detail(playlist.id, current_user.id)
    return ok(detail, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistDetail])
async def remove_video_from_playlist(
    video_id: int,
    playlist_id: int,
    current_user: CurrentUser,
    db: DBSession,
    aggregations: Aggregations,
):
    video_identifier = ensure_identifier(video_id, "videoId")
    playlist = await owned_or_forbidden(db, Playlist, playlist_id, current_user.id, "playlist", "playlistId")

    removed = await db.execute(
        delete(PlaylistVideo)
        .where(
            PlaylistVideo.playlist_id == playlist.id,
            PlaylistVideo.video_id == video_identifier,
        )
        .returning(PlaylistVideo.id)
        .execution_options(synchronize_session=False)
    )
    if removed.scalars().first() is None:
        raise NotFoundError("Video not found in playlist")
    await db.commit()

    logger.info("playlist_video_removed", playlist_id=playlist.id, video_id=video_identifier)
    detail = await aggregations.playlist_detail(playlist.id, current_user.id)
    return ok(detail, "Video removed from playlist successfully")
