"""
Security utilities for authentication.

This module provides:
- Password hashing and verification (bcrypt, used directly)
- Access / refresh JWT creation and validation (python-jose)

Token Model:
------------
- Access token: short-lived, signed with JWT_SECRET_KEY, sent on every
  request (``accessToken`` cookie or ``Authorization: Bearer``).
- Refresh token: long-lived, signed with REFRESH_TOKEN_SECRET_KEY, stored on
  the user row. Only the stored value can be exchanged for a new pair, so
  logging out (clearing the stored value) revokes it.

Both carry ``sub`` (the user id as a string, per RFC 7519),
``type`` ("access" or "refresh") and a random ``jti`` so two tokens minted in
the same second are still distinct.

Secrets, algorithm and lifetimes come from the ``Settings`` passed in by
the caller (the running application's ``AppContext``), never from a global.

References:
-----------
- FastAPI Security: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
- JWT Standard: https://jwt.io/introduction
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from jose import JWTError, jwt

from videotube.core.config import Settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# ================================
# Password Hashing
# ================================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    bcrypt.checkpw re-hashes with the salt embedded in the stored hash and
    compares in constant time.

    Example:
        >>> hashed = get_password_hash("secret", rounds=4)
        >>> verify_password("secret", hashed)
        True
        >>> verify_password("wrong", hashed)
        False
    """
    if not hashed_password:
        return False
    password_bytes = plain_password.encode("utf-8")[:72]
    hashed_bytes = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str, rounds: int) -> str:
    """
    Hash a plaintext password with a fresh salt.

    Args:
        password: The plaintext password
        rounds: bcrypt cost factor (BCRYPT_ROUNDS)

    Returns:
        The hash string ($2b$<cost>$<salt><hash>), safe to store
    """
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


# ================================
# JWT Tokens
# ================================

def _encode(
    data: dict[str, Any],
    token_type: str,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "type": token_type,
        "jti": secrets.token_hex(8),
    })
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def _decode(token: str, token_type: str, secret: str, algorithm: str) -> Optional[dict[str, Any]]:
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload


def create_access_token(
    data: dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to include; ``sub`` should be the user id
        settings: The application settings (secret, algorithm, lifetime)
        expires_delta: Lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

    Example:
        >>> token = create_access_token({"sub": 42, "username": "alice"}, settings)
    """
    return _encode(
        data,
        ACCESS_TOKEN_TYPE,
        settings.JWT_SECRET_KEY,
        settings.JWT_ALGORITHM,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    data: dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed refresh token (separate secret, longer lifetime)."""
    return _encode(
        data,
        REFRESH_TOKEN_TYPE,
        settings.REFRESH_TOKEN_SECRET_KEY,
        settings.JWT_ALGORITHM,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_access_token(token: str, settings: Settings) -> Optional[dict[str, Any]]:
    """
    Decode and verify an access token.

    Returns:
        The claims, or None when the token is malformed, expired, signed with
        another key or is not an access token.
    """
    return _decode(token, ACCESS_TOKEN_TYPE, settings.JWT_SECRET_KEY, settings.JWT_ALGORITHM)


def decode_refresh_token(token: str, settings: Settings) -> Optional[dict[str, Any]]:
    """Decode and verify a refresh token (None when invalid)."""
    return _decode(token, REFRESH_TOKEN_TYPE, settings.REFRESH_TOKEN_SECRET_KEY, settings.JWT_ALGORITHM)
