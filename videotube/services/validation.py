"""
Input checks shared by handlers and the aggregation service.

Every check raises ``BadRequestError`` and runs before any statement is
sent to the database.
"""

from typing import Any, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

from videotube.core.errors import BadRequestError

# Largest value an INTEGER primary key can hold
MAX_IDENTIFIER = 2_147_483_647


def ensure_identifier(value: Any, name: str = "id") -> int:
    """
    Validate and normalize a record identifier.

    Accepts positive integers and strings of digits; anything else (bools,
    negatives, "abc", "1.5") is rejected.

    Example:
        >>> ensure_identifier("42", "videoId")
        42
        >>> ensure_identifier("abc", "videoId")
        Traceback (most recent call last):
        BadRequestError: Invalid videoId
    """
    if isinstance(value, bool):
        raise BadRequestError(f"Invalid {name}")

    if isinstance(value, int):
        identifier = value
    elif isinstance(value, str) and value.strip().isdecimal():
        identifier = int(value.strip())
    else:
        raise BadRequestError(f"Invalid {name}")

    if identifier < 1 or identifier > MAX_IDENTIFIER:
        raise BadRequestError(f"Invalid {name}")
    return identifier


def require_text(value: Optional[str], message: str) -> str:
    """Return ``value`` stripped, or raise when it is missing or blank."""
    if value is None or not value.strip():
        raise BadRequestError(message)
    return value.strip()


def normalize_handle(value: Optional[str], message: str = "Username is required") -> str:
    """Usernames and emails are compared trimmed and lowercased."""
    return require_text(value, message).lower()


_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: Optional[str], message: str = "Email is required") -> str:
    """Validate an email address and return it trimmed and lowercased."""
    email = normalize_handle(value, message)
    try:
        _email_adapter.validate_python(email)
    except ValidationError:
        raise BadRequestError("Invalid email") from None
    return email
