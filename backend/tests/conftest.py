"""
Shared pytest fixtures for the DataSight test suite.
"""

import pytest
from typing import AsyncGenerator, Dict, List, Any

from httpx import AsyncClient, ASGITransport
from datasight.main import app


OUTLIER_ROW = 15


def _linear_revenue(n: int = 30) -> List[float]:
    return [1000 + i * 1000 / (n - 1) for i in range(n)]


@pytest.fixture
def revenue_rows() -> List[Dict[str, Any]]:
    """30 days of revenue rising linearly from 1000 to 2000."""
    return [
        {"day": f"2024-01-{i + 1:02d}", "revenue": value, "region": "North" if i % 2 else "South"}
        for i, value in enumerate(_linear_revenue())
    ]


@pytest.fixture
def revenue_with_outlier(revenue_rows) -> List[Dict[str, Any]]:
    """The linear revenue series with one row at 10x its local value."""
    rows = [dict(r) for r in revenue_rows]
    rows[OUTLIER_ROW]["revenue"] = rows[OUTLIER_ROW]["revenue"] * 10
    return rows


@pytest.fixture
def mixed_rows() -> List[Dict[str, Any]]:
    """Small dataset with one column of every inferred type."""
    regions = ["North", "South", "East", "West"]
    return [
        {
            "order_id": f"ORD-{i:03d}",
            "amount": 100 + (i * 37) % 50,
            "quantity": i % 5 + 1,
            "region": regions[i % 4],
            "active": "true" if i % 3 else "false",
            "created": f"2024-02-{i + 1:02d}",
        }
        for i in range(20)
    ]


@pytest.fixture
def correlated_rows() -> List[Dict[str, Any]]:
    """Perfectly related numeric columns and two associated categorical ones."""
    return [
        {
            "x": float(i),
            "double_x": 2.0 * i,
            "reverse_x": float(10 - i),
            "segment": "retail" if i < 5 else "wholesale",
            "channel": "store" if i < 5 else "online",
        }
        for i in range(10)
    ]


@pytest.fixture
async def test_client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
