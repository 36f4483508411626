"""
Pagination for aggregation queries.

Contract (every paginated endpoint):
------------------------------------
- ``page`` >= 1 and 1 <= ``limit`` <= PAGE_SIZE_MAX, otherwise the request
  is rejected with 400 before any query runs. Nothing is silently clamped.
- The total count and the page itself are two statements over the same
  filtered base query.
- total_pages = ceil(total_docs / limit), which is 0 when nothing matched.
- len(docs) <= limit.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.core.errors import BadRequestError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """A validated (page, limit) pair."""

    page: int
    limit: int

    @classmethod
    def validate(cls, page: Any, limit: Any, max_limit: int) -> "PageRequest":
        """
        Build a request from raw values.

        Raises:
            BadRequestError: non-integer page/limit, page < 1, limit < 1 or
                limit > max_limit
        """
        page_number = _as_int(page, "page")
        page_size = _as_int(limit, "limit")

        if page_number < 1:
            raise BadRequestError("page must be greater than or equal to 1")
        if page_size < 1:
            raise BadRequestError("limit must be greater than or equal to 1")
        if page_size > max_limit:
            raise BadRequestError(f"limit must not exceed {max_limit}")

        return cls(page=page_number, limit=page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PageResult(Generic[T]):
    page: int
    limit: int
    total_pages: int
    total_docs: int
    docs: list[T]


def total_pages(total_docs: int, limit: int) -> int:
    return math.ceil(total_docs / limit) if total_docs else 0


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise BadRequestError(f"Invalid {name}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise BadRequestError(f"Invalid {name}")


async def paginate(
    session: AsyncSession,
    base: Select,
    ordering: Sequence[Any],
    request: PageRequest,
    shape: Callable[[Any], T],
) -> PageResult[T]:
    """
    Run ``base`` as a count and as one ordered page.

    Args:
        session: Database session
        base: Filtered/joined select without ORDER BY, LIMIT or OFFSET
        ordering: ORDER BY clauses (must end with a unique tie-breaker)
        request: Validated page request
        shape: Turns one result row into a response document

    Returns:
        PageResult with the page metadata and shaped documents
    """
    count_stmt = select(func.count()).select_from(base.order_by(None).subquery())
    total_docs = (await session.execute(count_stmt)).scalar_one()

    docs: list[T] = []
    if total_docs and request.offset < total_docs:
        rows = await session.execute(
            base.order_by(*ordering).limit(request.limit).offset(request.offset)
        )
        docs = [shape(row) for row in rows.all()]

    return PageResult(
        page=request.page,
        limit=request.limit,
        total_pages=total_pages(total_docs, request.limit),
        total_docs=total_docs,
        docs=docs,
    )
