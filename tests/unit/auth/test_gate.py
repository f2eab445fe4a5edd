"""Unit tests for the authentication gate."""

from datetime import timedelta

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from taskflow.core.admission import AdmissionMiddleware, AdmissionPipeline
from taskflow.core.auth.backend import create_access_token
from taskflow.core.auth.middleware import AuthenticationGate


SECRET = "gate-test-secret-that-is-long-enough-12345"


def make_app() -> FastAPI:
    app = FastAPI()
    gate = AuthenticationGate(SECRET, include_prefixes=("/protected",))
    app.add_middleware(AdmissionMiddleware, pipeline=AdmissionPipeline([gate]))

    @app.get("/protected")
    async def protected(request: Request) -> dict[str, str]:
        return {"user_id": request.state.user_id}

    @app.get("/public")
    async def public() -> dict[str, str]:
        return {"status": "ok"}

    return app


@pytest.fixture
async def gate_client():
    async with AsyncClient(
        transport=ASGITransport(app=make_app()),
        base_url="http://test",
    ) as client:
        yield client


class TestAuthenticationGate:
    """Tests for AuthenticationGate inside the admission pipeline."""

    async def test_valid_token_exposes_subject_downstream(self, gate_client):
        token = create_access_token("user-123", secret=SECRET)

        response = await gate_client.get(
            "/protected", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json() == {"user_id": "user-123"}

    async def test_missing_header(self, gate_client):
        response = await gate_client.get("/protected")

        assert response.status_code == 401
        assert response.json() == {"error": "missing or invalid token"}

    async def test_non_bearer_scheme(self, gate_client):
        response = await gate_client.get(
            "/protected", headers={"Authorization": "Basic dXNlcjpwYXNz"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "missing or invalid token"}

    async def test_lowercase_bearer_is_not_accepted(self, gate_client):
        token = create_access_token("user-123", secret=SECRET)

        response = await gate_client.get(
            "/protected", headers={"Authorization": f"bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "missing or invalid token"}

    @pytest.mark.parametrize("token", ["garbage", ". . .", "a.b.c"])
    async def test_malformed_token(self, gate_client, token):
        response = await gate_client.get(
            "/protected", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    async def test_wrong_secret(self, gate_client):
        token = create_access_token(
            "user-123", secret="another-secret-that-is-also-long-enough"
        )

        response = await gate_client.get(
            "/protected", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    async def test_expired_token(self, gate_client):
        token = create_access_token(
            "user-123", expires_delta=timedelta(seconds=-1), secret=SECRET
        )

        response = await gate_client.get(
            "/protected", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    async def test_unprotected_path_skips_gate(self, gate_client):
        response = await gate_client.get("/public")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
