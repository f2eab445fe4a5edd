"""Tests for task schemas."""

from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from taskflow.modules.tasks.models import Tag
from taskflow.modules.tasks.schemas import TaskCreate, TaskResponse, TaskStatus
from tests.factories import TaskFactory


class TestTaskCreate:
    def test_naive_due_date_is_utc(self):
        data = TaskCreate(title="t", content="c", due_date="2026-05-01T10:00:00")

        assert data.due_date == datetime(2026, 5, 1, 10, tzinfo=UTC)

    def test_offset_due_date_is_converted_to_utc(self):
        data = TaskCreate(title="t", content="c", due_date="2026-05-01T10:00:00+02:00")

        assert data.due_date == datetime(2026, 5, 1, 8, tzinfo=UTC)
        assert data.due_date.tzinfo == UTC

    def test_invalid_due_date_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="t", content="c", due_date="next tuesday")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="t", content="c", status="someday")

    def test_title_too_long_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="x" * 256, content="c")


class TestTaskResponse:
    def test_from_model_flattens_tags(self):
        now = datetime(2026, 1, 1, 12, 0)
        task = TaskFactory.build(
            status=TaskStatus.IN_PROGRESS.value,
            created_at=now,
            updated_at=now,
        )
        task.tags = [Tag(id=1, name="home"), Tag(id=2, name="urgent")]

        response = TaskResponse.model_validate(task)

        assert response.tags == ["home", "urgent"]
        assert response.status is TaskStatus.IN_PROGRESS
        assert response.created_at.tzinfo == UTC

    def test_due_date_from_naive_storage_is_utc(self):
        due = datetime(2026, 1, 2, 9, 0)
        now = datetime.now(timezone(timedelta(hours=1)))

        response = TaskResponse(
            id=uuid4(),
            title="t",
            content="c",
            status="todo",
            priority="medium",
            due_date=due,
            archived=False,
            created_at=now,
            updated_at=now,
        )

        assert response.due_date == datetime(2026, 1, 2, 9, 0, tzinfo=UTC)
