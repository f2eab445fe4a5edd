"""End-to-end admission tests: rate limiter and authentication gate together."""

import pytest
from httpx import ASGITransport, AsyncClient

from taskflow.config import settings
from taskflow.core.auth import AuthenticationGate
from taskflow.core.database import get_db
from taskflow.core.rate_limit import FixedWindowRateLimiter, RateLimitStage
from taskflow.main import create_app
from tests.unit.rate_limit.test_backend import FakeCounterStore


pytestmark = pytest.mark.integration


@pytest.fixture
async def limited_client(db):
    application = create_app(
        stages=[
            RateLimitStage(FixedWindowRateLimiter(store=FakeCounterStore()), limit=2),
            AuthenticationGate(settings.secret_key, settings.jwt_algorithm),
        ]
    )

    async def override_get_db():
        yield db

    application.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=application),
        base_url="http://test",
    ) as client:
        yield client


async def test_unauthenticated_requests_still_count(limited_client: AsyncClient):
    first = await limited_client.get("/api/v1/tasks")
    second = await limited_client.get("/api/v1/tasks")
    third = await limited_client.get("/api/v1/tasks")

    assert first.status_code == 401
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert second.status_code == 401
    assert second.headers["X-RateLimit-Remaining"] == "0"
    assert third.status_code == 429
    assert third.json() == {"error": settings.rate_limit_error_message}


async def test_authenticated_request_carries_limit_headers(
    limited_client: AsyncClient, auth_headers
):
    response = await limited_client.get("/api/v1/tasks", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "2"
    assert response.headers["X-RateLimit-Remaining"] == "1"
    assert "X-Request-ID" in response.headers


async def test_public_routes_are_limited_but_not_gated(limited_client: AsyncClient):
    response = await limited_client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "whatever-password"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "invalid credentials"
    assert response.headers["X-RateLimit-Remaining"] == "1"
