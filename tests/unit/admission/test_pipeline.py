"""Unit tests for the admission pipeline."""

from typing import ClassVar

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from taskflow.core.admission import (
    Admission,
    AdmissionMiddleware,
    AdmissionPipeline,
    AdmissionStage,
    error_response,
)


class RecordingStage(AdmissionStage):
    """Stage that records calls and admits or rejects as configured."""

    name: ClassVar[str] = "recording"

    def __init__(self, label, *, reject_with=None, headers=None, include_prefixes=None):
        super().__init__(include_prefixes)
        self.label = label
        self.reject_with = reject_with
        self.headers = headers or {}
        self.calls = 0

    async def admit(self, request: Request) -> Admission:
        self.calls += 1
        if self.reject_with is not None:
            return Admission.reject(
                error_response(self.reject_with, f"{self.label} says no"),
                headers=self.headers,
            )
        return Admission.proceed(self.headers)


def make_app(*stages: AdmissionStage) -> tuple[FastAPI, list[int]]:
    app = FastAPI()
    handled: list[int] = []
    app.add_middleware(AdmissionMiddleware, pipeline=AdmissionPipeline(stages))

    @app.get("/items")
    async def items() -> dict[str, str]:
        handled.append(1)
        return {"ok": "yes"}

    @app.get("/health/live")
    async def live() -> dict[str, str]:
        handled.append(1)
        return {"status": "alive"}

    return app, handled


async def get(app: FastAPI, path: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path)


class TestAdmission:
    """Tests for the Admission value object."""

    def test_proceed_is_admitted(self):
        assert Admission.proceed({"X-A": "1"}).admitted is True

    def test_reject_is_not_admitted(self):
        assert Admission.reject(error_response(401, "no")).admitted is False


class TestAdmissionStage:
    """Tests for path scoping."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/api/v1/tasks", True),
            ("/api/v1/tasks/123", True),
            ("/api/v1/tasksearch", False),
            ("/api/v1/auth/login", False),
        ],
    )
    def test_applies_to_prefix_segments(self, path, expected):
        stage = RecordingStage("a", include_prefixes=("/api/v1/tasks",))

        assert stage.applies_to(path) is expected

    def test_no_prefixes_applies_everywhere(self):
        assert RecordingStage("a").applies_to("/anything") is True


class TestAdmissionPipeline:
    """Tests for AdmissionPipeline run through AdmissionMiddleware."""

    async def test_all_stages_admit_and_headers_are_merged(self):
        first = RecordingStage("first", headers={"X-First": "1"})
        second = RecordingStage("second", headers={"X-Second": "2"})
        app, handled = make_app(first, second)

        response = await get(app, "/items")

        assert response.status_code == 200
        assert response.headers["X-First"] == "1"
        assert response.headers["X-Second"] == "2"
        assert handled == [1]

    async def test_first_rejection_stops_the_chain(self):
        first = RecordingStage("first", reject_with=429, headers={"X-First": "0"})
        second = RecordingStage("second")
        app, handled = make_app(first, second)

        response = await get(app, "/items")

        assert response.status_code == 429
        assert response.json() == {"error": "first says no"}
        assert response.headers["X-First"] == "0"
        assert second.calls == 0
        assert handled == []

    async def test_earlier_headers_survive_later_rejection(self):
        first = RecordingStage("first", headers={"X-RateLimit-Remaining": "4"})
        second = RecordingStage("second", reject_with=401)
        app, handled = make_app(first, second)

        response = await get(app, "/items")

        assert response.status_code == 401
        assert response.headers["X-RateLimit-Remaining"] == "4"
        assert handled == []

    async def test_stage_out_of_scope_is_skipped(self):
        scoped = RecordingStage("scoped", reject_with=401, include_prefixes=("/other",))
        app, handled = make_app(scoped)

        response = await get(app, "/items")

        assert response.status_code == 200
        assert scoped.calls == 0
        assert handled == [1]

    async def test_excluded_path_bypasses_pipeline(self):
        blocker = RecordingStage("blocker", reject_with=503)
        app, handled = make_app(blocker)

        response = await get(app, "/health/live")

        assert response.status_code == 200
        assert blocker.calls == 0
        assert handled == [1]
