"""
API error hierarchy and the single place that turns errors into responses.

Handlers and services raise one of the typed errors below; they never build
error responses themselves. ``register_exception_handlers`` installs the
translation stage on the application, which produces the uniform envelope:

    {"status": "error", "statusCode": 404, "message": "Video not found"}

Anything that is not an ``ApiError`` (and not a framework HTTP or request
validation error) becomes a 500 with a generic message. The traceback is
logged server-side and never sent to the client.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from videotube.core.logging import get_logger

logger = get_logger(__name__)


# ================================
# Error Classes
# ================================

class ApiError(Exception):
    """
    Base class for errors that map to an HTTP response.

    Attributes:
        status_code: HTTP status sent to the client
        message: Human-readable message sent to the client
        headers: Optional extra response headers (e.g. WWW-Authenticate)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.status_code}, {self.message!r})"


class BadRequestError(ApiError):
    """Missing or malformed client input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class AuthenticationError(ApiError):
    """Caller is not authenticated (missing, invalid or revoked token)."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized access"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class PermissionDeniedError(ApiError):
    """Caller is authenticated but may not act on the resource."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ApiError):
    """A referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ApiError):
    """The request collides with existing state (duplicate account, entry...)."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class MediaUploadError(ApiError):
    """The media host rejected or failed an upload."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Error while uploading file to media storage"


class RequestTimeoutError(ApiError):
    """The request did not finish within its deadline."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Request timed out"


# ================================
# Envelope
# ================================

def error_response(
    status_code: int,
    message: str,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the uniform error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "statusCode": status_code, "message": message},
        headers=headers,
    )


def describe_validation_error(errors: list[dict[str, Any]]) -> str:
    """
    Turn the first pydantic/FastAPI validation error into a readable message.

    Examples:
        missing body field "title"      -> "title is required"
        path param "video_id" = "abc"   -> "Invalid videoId"
    """
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header", "cookie")]
    field = location[-1] if location else "request"
    if "_" in field:
        field = to_camel(field)

    if first.get("type") == "missing":
        return f"{field} is required"
    return f"Invalid {field}"


# ================================
# Handlers
# ================================

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "api_error",
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
            method=request.method,
        )
    else:
        logger.info(
            "api_error",
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
        )
    return error_response(exc.status_code, exc.message, exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(list(exc.errors()))
    logger.info("request_validation_failed", path=request.url.path, message=message)
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.

    Logs the full traceback and returns a generic 500 so internal details
    never reach the client.
    """
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ApiError.default_message,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every error translator on the application (call once)."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
