"""
Shared response schemas.

Every JSON key leaving the API is camelCase (``fullName``, ``totalDocs``);
Python code keeps snake_case attribute names. ``CamelModel`` does the
translation through an alias generator, accepts either spelling on input,
and reads ORM objects directly (``from_attributes``).

Envelopes:
----------
Success:
    {"statusCode": 200, "data": {...}, "message": "Video fetched successfully"}

Error (built by videotube.core.errors):
    {"status": "error", "statusCode": 404, "message": "Video not found"}
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every request/response schema."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope."""

    status_code: int = Field(default=200, description="HTTP status, repeated in the body")
    data: T
    message: str = Field(default="Success")


class ErrorResponse(CamelModel):
    """Uniform error envelope (documented for OpenAPI)."""

    status: str = "error"
    status_code: int
    message: str


class Page(CamelModel, Generic[T]):
    """
    One page of an ordered result.

    total_pages = ceil(total_docs / limit), 0 when nothing matched.
    """

    page: int
    limit: int
    total_pages: int
    total_docs: int
    docs: List[T]


def ok(data, message: str, status_code: int = 200) -> ApiResponse:
    """Wrap ``data`` in the success envelope."""
    return ApiResponse(status_code=status_code, data=data, message=message)


# Documented on every router so OpenAPI shows the error envelope
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Not allowed"},
    404: {"model": ErrorResponse, "description": "Not found"},
}
