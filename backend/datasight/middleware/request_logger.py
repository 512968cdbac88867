"""
Request logging for the DataSight API.

One log line per request (method, path, status, duration) and an
``x-response-time-ms`` header on every response. Pure ASGI middleware.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("datasight.middleware.request_logger")


class RequestLoggerMiddleware:
    """Logs method, path, status and latency of every HTTP request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 0

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        async def send_wrapper(message: Message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
                headers = list(message.get("headers", []))
                headers.append([b"x-response-time-ms", str(elapsed_ms()).encode()])
                message = {**message, "headers": headers}
            elif message["type"] == "http.response.body" and not message.get("more_body", False):
                level = logging.WARNING if status_code >= 500 else logging.INFO
                logger.log(
                    level, "%s %s -> %s (%.2fms)",
                    scope.get("method", "?"), scope.get("path", "?"), status_code, elapsed_ms(),
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
