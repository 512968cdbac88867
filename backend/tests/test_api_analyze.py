"""
Tests for Analysis API endpoints.
"""

import pytest
from httpx import AsyncClient

from datasight.core.config import settings
from datasight.services.query_router import NO_DATA_TEXT


def _csv(n: int = 12) -> bytes:
    lines = ["day,revenue,region"]
    lines += [f"2024-03-{i + 1:02d},{100 + 10 * i},{'East' if i % 2 else 'West'}" for i in range(n)]
    return "\n".join(lines).encode("utf-8")


@pytest.mark.asyncio
async def test_analyze_rows(test_client: AsyncClient, revenue_rows):
    """Test POST /api/v1/analyze answers a question about JSON rows."""
    response = await test_client.post(
        "/api/v1/analyze", json={"query": "forecast revenue", "rows": revenue_rows}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "forecast revenue"
    assert data["intent"] == "forecast"
    assert data["recommendedCharts"] == ["line", "area"]
    forecast = data["insights"]["forecasts"][0]
    assert forecast["column"] == "revenue"
    assert len(forecast["predictions"]) == 7


@pytest.mark.asyncio
async def test_analyze_empty_rows(test_client: AsyncClient):
    response = await test_client.post("/api/v1/analyze", json={"query": "anything", "rows": []})

    assert response.status_code == 200
    data = response.json()
    assert data["textSummary"] == NO_DATA_TEXT
    assert data["insights"] == {}


@pytest.mark.asyncio
async def test_analyze_requires_query(test_client: AsyncClient):
    response = await test_client.post("/api/v1/analyze", json={"rows": []})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_analyze_row_limit(test_client: AsyncClient, revenue_rows, monkeypatch):
    monkeypatch.setattr(settings, "MAX_ROWS", 2)
    response = await test_client.post(
        "/api/v1/analyze", json={"query": "profile", "rows": revenue_rows}
    )
    assert response.status_code == 413


@pytest.mark.asyncio
async def test_analyze_csv_upload(test_client: AsyncClient):
    """Test POST /api/v1/analyze/csv parses the file and routes the query."""
    response = await test_client.post(
        "/api/v1/analyze/csv",
        files={"file": ("sales.csv", _csv(), "text/csv")},
        data={"query": "profile"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["intent"] == "profile"
    profile = data["insights"]["profile"]
    assert profile["rowCount"] == 12
    assert [c["name"] for c in profile["columns"]] == ["day", "revenue", "region"]


@pytest.mark.asyncio
async def test_analyze_csv_default_query(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/analyze/csv", files={"file": ("sales.csv", _csv(), "text/csv")}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "summarize this dataset"
    assert data["insights"]["statistics"]["narrative"]


@pytest.mark.asyncio
async def test_analyze_csv_without_rows(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/analyze/csv", files={"file": ("empty.csv", b"day,revenue\n", "text/csv")}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "No data found in file"


@pytest.mark.asyncio
async def test_profile_rows(test_client: AsyncClient, mixed_rows):
    """Test POST /api/v1/profile returns a camelCase dataset profile."""
    response = await test_client.post("/api/v1/profile", json={"rows": mixed_rows})

    assert response.status_code == 200
    data = response.json()
    assert data["rowCount"] == 20
    assert data["columnCount"] == 6
    assert data["completeness"] == 100.0
    assert "memoryEstimate" in data


@pytest.mark.asyncio
async def test_analyze_csv_malformed_file(test_client: AsyncClient):
    response = await test_client.post(
        "/api/v1/analyze/csv",
        files={"file": ("broken.csv", b'a,b\n1,"x\n2,3\n', "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "No data found in file"
