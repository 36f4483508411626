"""
Authentication dependencies for FastAPI.

This module provides:
- Token extraction (``Authorization: Bearer`` header or ``accessToken`` cookie)
- ``get_current_user`` / ``CurrentUser`` for protected routes
- Cookie helpers used by login, refresh and logout

Token Lookup Order:
-------------------
1. ``Authorization: Bearer <token>`` header
2. ``accessToken`` cookie (browsers)

An explicit header wins so API clients that also carry cookies from an
earlier login act as the user they name.

References:
-----------
- FastAPI Security Tutorial: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
"""

from typing import Annotated, Optional

from fastapi import Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer

from videotube.core.config import Settings
from videotube.core.context import AppSettings
from videotube.core.errors import AuthenticationError
from videotube.core.security import decode_access_token
from videotube.db.deps import DBSession
from videotube.models.user import User

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# ================================
# Bearer Scheme
# ================================

# auto_error=False: a missing header is not an error yet, the cookie may
# still carry the token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/users/login", auto_error=False)


def subject_id(payload: dict) -> Optional[int]:
    """The user id stored in a token's ``sub`` claim, or None."""
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None


async def get_current_user(
    request: Request,
    db: DBSession,
    settings: AppSettings,
    bearer_token: Annotated[Optional[str], Depends(oauth2_scheme)] = None,
) -> User:
    """
    Resolve the authenticated user for this request.

    Raises:
        AuthenticationError (401): no token, invalid/expired token, or the
            user no longer exists
    """
    token = bearer_token or request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise AuthenticationError("Unauthorized access")

    payload = decode_access_token(token, settings)
    if payload is None:
        raise AuthenticationError("Invalid access token")

    user_id = subject_id(payload)
    if user_id is None:
        raise AuthenticationError("Invalid access token")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid access token")

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


# ================================
# Cookies
# ================================

def set_auth_cookies(response: Response, settings: Settings, access_token: str, refresh_token: str) -> None:
    """Send both tokens as httponly cookies."""
    for name, value, max_age in (
        (ACCESS_COOKIE, access_token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60),
        (REFRESH_COOKIE, refresh_token, settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60),
    ):
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
