"""
HTTP middleware: request logging context and per-request deadline.

RequestContextMiddleware
    Binds ``request_id``, ``method`` and ``path`` into structlog's context
    variables so every log line emitted while handling the request carries
    them, echoes the id in ``X-Request-ID`` and logs one
    ``request_completed`` event per request.

RequestDeadlineMiddleware
    Cancels a request that runs longer than ``REQUEST_TIMEOUT_SECONDS`` and
    answers 504 with the usual error envelope. Written as a plain ASGI
    middleware: the handler must be cancelled together with the wait, which
    ``BaseHTTPMiddleware`` does not do.
"""

import asyncio
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from videotube.core.errors import RequestTimeoutError, error_response
from videotube.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Per-request logging context."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=elapsed_ms,
        )
        return response


class RequestDeadlineMiddleware:
    """
    Enforce a wall-clock deadline on every HTTP request.

    If the deadline passes before the response has started, the handler is
    cancelled and a 504 envelope is sent instead. Once the response has
    started there is nothing left to replace, so the request is only
    cancelled.
    """

    def __init__(self, app: ASGIApp, timeout: float):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.timeout:
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "request_timed_out",
                path=scope.get("path"),
                timeout_seconds=self.timeout,
                response_started=response_started,
            )
            if not response_started:
                response = error_response(RequestTimeoutError.status_code, RequestTimeoutError.default_message)
                await response(scope, receive, send)
