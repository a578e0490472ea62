"""Custom middleware for the API."""

import time

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.utils.logging import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware:
    """Middleware to log all requests.

    Written as plain ASGI so long-lived event streams pass through untouched.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        headers = dict(scope.get("headers") or [])
        request_id = headers.get(b"x-request-id", b"").decode() or str(time.time_ns())
        method = scope["method"]
        path = scope["path"]

        structlog.contextvars.bind_contextvars(request_id=request_id)
        logger.info("request.started", method=method, path=path)

        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                duration_ms = (time.perf_counter() - start_time) * 1000
                response_headers = MutableHeaders(scope=message)
                response_headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
                response_headers["X-Request-ID"] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request.completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")
