"""
Last-resort error handling for the DataSight API.

Any exception that escapes the routes and the registered exception handlers
becomes a JSON 500 response carrying the request path. Pure ASGI middleware,
so it wraps streaming responses without buffering them.
"""

import json
import logging
import traceback

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("datasight.middleware.error_handler")


class ErrorHandlerMiddleware:
    """Turns unhandled exceptions into structured JSON 500 responses."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            path = scope.get("path", "unknown")
            method = scope.get("method", "unknown")
            logger.error("Unhandled %s on %s %s: %s", type(exc).__name__, method, path, exc)
            logger.debug(traceback.format_exc())

            # Headers already went out; nothing sensible can be sent
            if response_started:
                raise

            body = json.dumps({
                "error": "internal_server_error",
                "message": "The analysis could not be completed due to an unexpected error.",
                "path": path,
            }).encode("utf-8")

            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })
