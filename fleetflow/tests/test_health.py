"""
Tests for the health and root endpoints.
"""

import pytest


@pytest.mark.asyncio
async def test_health_reports_redis(client, mock_redis):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "up"
    assert "X-Correlation-ID" in response.headers


@pytest.mark.asyncio
async def test_health_with_redis_down(client, mock_redis):
    await mock_redis.aclose()

    response = await client.get("/health")

    assert response.json()["redis"] == "down"


@pytest.mark.asyncio
async def test_correlation_id_is_propagated(client):
    response = await client.get("/", headers={"X-Correlation-ID": "abc-123"})

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "abc-123"
