"""Task and tag database models.

This module defines:
- Task: A unit of work owned by a single user
- Tag: A shared label name
- task_tags: Junction table linking tasks to tags
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskflow.core.constants import (
    MAX_ENUM_LENGTH,
    MAX_TAG_NAME_LENGTH,
    MAX_TASK_TITLE_LENGTH,
)
from taskflow.core.database.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin
from taskflow.modules.tasks.schemas import TaskPriority, TaskStatus


# Junction table for Task <-> Tag many-to-many relationship
task_tags = Table(
    "task_tags",
    Base.metadata,
    Column(
        "task_id", Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tag(Base):
    """A label that can be attached to any number of tasks.

    Tag names are global; ownership is carried by the task, so attaching a
    tag never exposes one user's tasks to another.

    Attributes:
        name: Unique tag name
    """

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(MAX_TAG_NAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name})>"


class Task(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """A task owned by one user.

    Attributes:
        user_id: Owner of the task
        title: Short title (required)
        content: Free-form body (required)
        status: Workflow status (todo, in_progress, done, blocked)
        priority: Priority (low, medium, high)
        due_date: Optional deadline, stored in UTC
        archived: Whether the task has been archived
        tags: Attached tags
    """

    __tablename__ = "tasks"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_TASK_TITLE_LENGTH),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_ENUM_LENGTH),
        default=TaskStatus.TODO.value,
        nullable=False,
        index=True,
    )
    priority: Mapped[str] = mapped_column(
        String(MAX_ENUM_LENGTH),
        default=TaskPriority.MEDIUM.value,
        nullable=False,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    archived: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    tags: Mapped[list[Tag]] = relationship(
        Tag,
        secondary=task_tags,
        lazy="selectin",
        order_by=Tag.name,
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, status={self.status})>"
