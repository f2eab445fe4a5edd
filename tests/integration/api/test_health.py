"""Tests for health check endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError


pytestmark = pytest.mark.integration


async def test_liveness_endpoint(client: AsyncClient):
    """Test that liveness endpoint returns 200."""
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


async def test_readiness_endpoint(client: AsyncClient):
    """Readiness reports ok when the database and Redis answer."""
    with (
        patch("taskflow.api.router.settings") as mock_settings,
        patch("taskflow.api.router.ping_redis", AsyncMock(return_value=True)),
    ):
        mock_settings.rate_limit_enabled = True
        response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "redis": "ok"}


async def test_readiness_degraded_when_redis_is_down(client: AsyncClient):
    with (
        patch("taskflow.api.router.settings") as mock_settings,
        patch(
            "taskflow.api.router.ping_redis",
            AsyncMock(side_effect=RedisConnectionError("refused")),
        ),
    ):
        mock_settings.rate_limit_enabled = True
        response = await client.get("/health/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["redis"] == "unavailable"


async def test_info_endpoint(client: AsyncClient):
    """Test that info endpoint returns application metadata."""
    response = await client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert "app" in data
    assert "version" in data
    assert "environment" in data


async def test_health_paths_skip_admission(client: AsyncClient):
    """Health probes never carry rate limit headers or need a token."""
    response = await client.get("/health/live")

    assert "X-RateLimit-Limit" not in response.headers
    assert "X-Request-ID" in response.headers
