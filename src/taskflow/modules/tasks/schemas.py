"""Pydantic schemas for task operations."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskflow.core.constants import MAX_TAG_NAME_LENGTH, MAX_TASK_TITLE_LENGTH


class TaskStatus(StrEnum):
    """Workflow status of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(StrEnum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ============================================================
# Request Schemas
# ============================================================


class TaskCreate(BaseModel):
    """Schema for creating a task.

    Emptiness of title and content is checked by the service so both
    create and update answer with the same error.
    """

    title: str = Field(..., max_length=MAX_TASK_TITLE_LENGTH)
    content: str
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class TaskUpdate(TaskCreate):
    """Schema for replacing a task.

    Title and content are required; status and priority are kept when
    omitted; due date is always replaced (omitting it clears it).
    """


class StatusUpdate(BaseModel):
    """Schema for changing a task's status."""

    status: TaskStatus


class PriorityUpdate(BaseModel):
    """Schema for changing a task's priority."""

    priority: TaskPriority


class TagRequest(BaseModel):
    """Schema for attaching a tag to a task."""

    tag: str = Field(..., max_length=MAX_TAG_NAME_LENGTH)


class BulkDeleteRequest(BaseModel):
    """Schema for soft-deleting several tasks at once."""

    ids: list[UUID] = Field(default_factory=list)


class BulkStatusRequest(BaseModel):
    """Schema for setting the status of several tasks at once."""

    ids: list[UUID] = Field(default_factory=list)
    status: TaskStatus


# ============================================================
# Response Schemas
# ============================================================


class TaskResponse(BaseModel):
    """Schema for task response data."""

    id: UUID
    title: str
    content: str
    status: TaskStatus
    priority: TaskPriority
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    archived: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, v: Any) -> list[str]:
        """Flatten tag rows into their names."""
        return [tag if isinstance(tag, str) else tag.name for tag in v or []]

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class TaskStats(BaseModel):
    """Task counts per status plus the total."""

    todo: int = 0
    in_progress: int = 0
    done: int = 0
    blocked: int = 0
    total: int = 0
