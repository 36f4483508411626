"""
Owner-only access to mutable records.

Editing or deleting a video, comment, tweet or playlist first loads it with
``owned_or_forbidden``. A record that does not exist and a record owned by
someone else produce the same 403, so callers cannot probe which ids exist.
"""

from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from videotube.core.errors import PermissionDeniedError
from videotube.services.validation import ensure_identifier

ModelT = TypeVar("ModelT")


async def owned_or_forbidden(
    session: AsyncSession,
    model: type[ModelT],
    record_id: Any,
    user_id: int,
    resource: str,
    field: str,
) -> ModelT:
    """
    Load ``model`` by id if ``user_id`` owns it.

    Raises:
        BadRequestError: malformed id
        PermissionDeniedError: missing record, or owned by another user
    """
    identifier = ensure_identifier(record_id, field)
    record = await session.get(model, identifier)
    if record is None or record.owner_id != user_id:
        raise PermissionDeniedError(f"You are not allowed to modify this {resource}")
    return record
