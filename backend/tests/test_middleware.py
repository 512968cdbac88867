"""
Tests for the ASGI middleware stack.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from datasight.middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware


async def failing_app(scope, receive, send):
    raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_unhandled_exception_becomes_json_500():
    app = RequestLoggerMiddleware(ErrorHandlerMiddleware(failing_app))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/explode")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "internal_server_error"
    assert data["path"] == "/explode"
    assert "x-response-time-ms" in response.headers


@pytest.mark.asyncio
async def test_unknown_route_passes_through(test_client: AsyncClient):
    response = await test_client.get("/api/v1/nowhere")
    assert response.status_code == 404
