"""
User and authentication endpoints.

This module provides:
- Sign up (multipart, with avatar and optional cover image)
- Log in / log out / refresh-token rotation
- Password change and account updates
- Avatar and cover image replacement
- Channel profile by username
- Watch history

Tokens:
-------
Login returns an access token and a refresh token in the body and sets both
as httponly cookies (``accessToken``, ``refreshToken``). The refresh token is
stored on the user row; only the most recently issued one is accepted, so a
refresh rotates it and logout revokes it.

References:
-----------
- FastAPI Security: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
- FastAPI Request Files: https://fastapi.tiangolo.com/tutorial/request-files/
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from videotube.api.deps import Aggregations
from videotube.core.auth import (
    REFRESH_COOKIE,
    CurrentUser,
    clear_auth_cookies,
    oauth2_scheme,
    set_auth_cookies,
    subject_id,
)
from videotube.core.config import Settings
from videotube.core.context import AppSettings, Media
from videotube.core.errors import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    MediaUploadError,
    NotFoundError,
)
from videotube.core.logging import get_logger
from videotube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from videotube.db.deps import DBSession
from videotube.db.upsert import insert_ignoring_conflicts
from videotube.models.user import User, WatchHistoryEntry
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.users import (
    ChangePasswordRequest,
    ChannelProfile,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserPublic,
    WatchHistoryIds,
)
from videotube.schemas.videos import VideoWithOwner
from videotube.services.uploads import has_content, store_upload
from videotube.services.validation import normalize_email, normalize_handle, require_text

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


async def issue_tokens(db: DBSession, user: User, settings: Settings) -> TokenPair:
    """Create a fresh token pair and persist the refresh token on the user."""
    access_token = create_access_token({
        "sub": user.id,
        "username": user.username,
        "email": user.email,
    }, settings)
    refresh_token = create_refresh_token({"sub": user.id}, settings)
    user.refresh_token = refresh_token
    await db.commit()
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


# ================================
# Registration & Login
# ================================

@router.post(
    "/signup",
    response_model=ApiResponse[UserPublic],
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(
    db: DBSession,
    media: Media,
    settings: AppSettings,
    username: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    full_name: Annotated[Optional[str], Form(alias="fullName")] = None,
    password: Annotated[Optional[str], Form()] = None,
    avatar: Annotated[Optional[UploadFile], File()] = None,
    cover_image: Annotated[Optional[UploadFile], File(alias="coverImage")] = None,
):
    """
    Register a new user.

    Request Format:
    ---------------
    Content-Type: multipart/form-data

    username, email, fullName, password (text fields)
    avatar (file, required), coverImage (file, optional)

    Raises:
        400: a field is missing or blank, the email is malformed, the avatar
            is missing or its upload failed
        409: username or email already taken
    """
    handle = normalize_handle(username, "Username is required")
    address = normalize_email(email)
    name = require_text(full_name, "Full name is required")
    if password is None or not password.strip():
        raise BadRequestError("Password is required")
    if not has_content(avatar):
        raise BadRequestError("Avatar file is required")

    existing = await db.execute(
        select(User.id).where(or_(User.username == handle, User.email == address))
    )
    if existing.first() is not None:
        raise ConflictError("User with email or username already exists")

    try:
        avatar_asset = await store_upload(media, avatar, settings.UPLOAD_TEMP_DIR, folder="avatars")
    except MediaUploadError:
        raise BadRequestError("Avatar upload failed") from None

    cover_url = ""
    if has_content(cover_image):
        try:
            cover_url = (
                await store_upload(media, cover_image, settings.UPLOAD_TEMP_DIR, folder="covers")
            ).url
        except MediaUploadError as e:
            logger.warning("cover_image_upload_failed", username=handle, error=e.message)

    user = User(
        username=handle,
        email=address,
        full_name=name,
        password_hash=get_password_hash(password, settings.BCRYPT_ROUNDS),
        avatar=avatar_asset.url,
        cover_image=cover_url,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent sign-up took the name between the check and the insert
        await db.rollback()
        raise ConflictError("User with email or username already exists") from None
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, username=user.username)
    return ok(UserPublic.model_validate(user), "User registered successfully", status.HTTP_201_CREATED)


@router.post("/login", response_model=ApiResponse[LoginResult])
async def login(payload: LoginRequest, response: Response, db: DBSession, settings: AppSettings):
    """
    Log in with email or username and password.

    Example request:
        POST /api/v1/users/login
        {"email": "alice@example.com", "password": "secret123"}

    Raises:
        400: neither email nor username given
        404: no such user
        401: wrong password
    """
    if not (payload.email and payload.email.strip()) and not (payload.username and payload.username.strip()):
        raise BadRequestError("Username or email is required")

    conditions = []
    if payload.username and payload.username.strip():
        conditions.append(User.username == payload.username.strip().lower())
    if payload.email and payload.email.strip():
        conditions.append(User.email == payload.email.strip().lower())

    user = (await db.execute(select(User).where(or_(*conditions)))).scalars().first()
    if user is None:
        raise NotFoundError("User does not exist")

    if not verify_password(payload.password, user.password_hash):
        logger.info("login_failed", user_id=user.id)
        raise AuthenticationError("Invalid user credentials")

    tokens = await issue_tokens(db, user, settings)
    set_auth_cookies(response, settings, tokens.access_token, tokens.refresh_token)

    logger.info("user_logged_in", user_id=user.id)
    return ok(
        LoginResult(
            user=UserPublic.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        "User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(current_user: CurrentUser, response: Response, db: DBSession, settings: AppSettings):
    """Revoke the stored refresh token and clear the auth cookies."""
    current_user.refresh_token = None
    await db.commit()
    clear_auth_cookies(response, settings)
    logger.info("user_logged_out", user_id=current_user.id)
    return ok({}, "User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    db: DBSession,
    settings: AppSettings,
    payload: Optional[RefreshRequest] = None,
    bearer_token: Annotated[Optional[str], Depends(oauth2_scheme)] = None,
):
    """
    Exchange a refresh token for a new token pair.

    The token is read from the JSON body (``refreshToken``), the bearer
    header or the ``refreshToken`` cookie, in that order. It must be the one
    currently stored for the user; the stored value is rotated.
    """
    token = (payload.refresh_token if payload else None) or bearer_token or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise AuthenticationError("Unauthorized request")

    claims = decode_refresh_token(token, settings)
    user_id = subject_id(claims) if claims else None
    if user_id is None:
        raise AuthenticationError("Invalid refresh token")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid refresh token")
    if token != user.refresh_token:
        raise AuthenticationError("Refresh token is expired or used")

    tokens = await issue_tokens(db, user, settings)
    set_auth_cookies(response, settings, tokens.access_token, tokens.refresh_token)
    return ok(tokens, "Access token refreshed")


# ================================
# Account
# ================================

@router.post("/update-password", response_model=ApiResponse[dict])
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser,
    db: DBSession,
    settings: AppSettings,
):
    if payload.new_password != payload.confirm_password:
        raise BadRequestError("New password and confirm password do not match")
    if not verify_password(payload.old_password, current_user.password_hash):
        raise BadRequestError("Invalid old password")

    current_user.password_hash = get_password_hash(payload.new_password, settings.BCRYPT_ROUNDS)
    await db.commit()
    logger.info("password_changed", user_id=current_user.id)
    return ok({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserPublic])
async def get_current_user_profile(current_user: CurrentUser):
    return ok(UserPublic.model_validate(current_user), "Current user fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserPublic])
async def update_account(payload: UpdateAccountRequest, current_user: CurrentUser, db: DBSession):
    """Change full name and email. An email used by another account is a 409."""
    full_name = require_text(payload.full_name, "Full name is required")
    email = normalize_email(payload.email)

    taken = await db.execute(
        select(User.id).where(User.email == email, User.id != current_user.id)
    )
    if taken.first() is not None:
        raise ConflictError("Email is already in use")

    current_user.full_name = full_name
    current_user.email = email
    await db.commit()
    await db.refresh(current_user)
    return ok(UserPublic.model_validate(current_user), "Account details updated successfully")


@router.patch("/update-avatar", response_model=ApiResponse[UserPublic])
async def update_avatar(
    current_user: CurrentUser,
    db: DBSession,
    media: Media,
    settings: AppSettings,
    avatar: Annotated[Optional[UploadFile], File()] = None,
):
    if not has_content(avatar):
        raise BadRequestError("Avatar file is missing")

    asset = await store_upload(media, avatar, settings.UPLOAD_TEMP_DIR, folder="avatars")
    current_user.avatar = asset.url
    await db.commit()
    await db.refresh(current_user)
    return ok(UserPublic.model_validate(current_user), "Avatar updated successfully")


@router.patch("/update-cover-image", response_model=ApiResponse[UserPublic])
async def update_cover_image(
    current_user: CurrentUser,
    db: DBSession,
    media: Media,
    settings: AppSettings,
    cover_image: Annotated[Optional[UploadFile], File(alias="coverImage")] = None,
):
    if not has_content(cover_image):
        raise BadRequestError("Cover image file is missing")

    asset = await store_upload(media, cover_image, settings.UPLOAD_TEMP_DIR, folder="covers")
    current_user.cover_image = asset.url
    await db.commit()
    await db.refresh(current_user)
    return ok(UserPublic.model_validate(current_user), "Cover image updated successfully")


# ================================
# Channel & History
# ================================

@router.get("/channel/{username}", response_model=ApiResponse[ChannelProfile])
async def get_channel_profile(username: str, current_user: CurrentUser, aggregations: Aggregations):
    """
    A channel page with subscription counters.

    Example response data:
        {"username": "alice", "subscribersCount": 12,
         "channelSubscribedToCount": 3, "isSubscribed": true, ...}
    """
    profile = await aggregations.channel_profile(username, current_user.id)
    return ok(profile, "User channel fetched successfully")


@router.get("/watch-history", response_model=ApiResponse[list[VideoWithOwner]])
async def get_watch_history(current_user: CurrentUser, aggregations: Aggregations):
    history = await aggregations.watch_history(current_user.id)
    return ok(history, "Watch history fetched successfully")


@router.patch("/watch-history/{video_id}", response_model=ApiResponse[WatchHistoryIds])
async def add_to_watch_history(
    video_id: int,
    current_user: CurrentUser,
    db: DBSession,
    aggregations: Aggregations,
):
    """Append a video to the history; a video already in it is left in place."""
    video = await aggregations.get_video(video_id, current_user.id)

    await insert_ignoring_conflicts(
        db,
        WatchHistoryEntry,
        {"user_id": current_user.id, "video_id": video.id},
        ("user_id", "video_id"),
    )
    await db.commit()

    ids = await aggregations.watch_history_ids(current_user.id)
    return ok(WatchHistoryIds(watch_history=ids), "Video added to watch history")
