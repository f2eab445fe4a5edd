"""Task repository for database operations."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.exc import IntegrityError

from taskflow.api.dependencies import DBSession
from taskflow.modules.tasks.models import Tag, Task
from taskflow.modules.tasks.schemas import TaskStatus


class TaskRepository:
    """Repository for Task database operations.

    Every query is scoped to the owning user and skips soft-deleted rows,
    so a task of another user looks exactly like a missing one.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    def _owned(self, user_id: UUID) -> Select[tuple[Task]]:
        return select(Task).where(Task.user_id == user_id, Task.deleted_at.is_(None))

    async def _all(self, stmt: Select[tuple[Task]]) -> list[Task]:
        result = await self.session.execute(stmt.order_by(Task.created_at, Task.id))
        return list(result.scalars().all())

    async def _reload(self, task: Task) -> Task:
        """Re-read a task after a write so server-side columns and tags are fresh."""
        stmt = (
            select(Task)
            .where(Task.id == task.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, task: Task) -> Task:
        """Create a new task.

        Args:
            task: Task instance to create

        Returns:
            The created task with ID and timestamps populated
        """
        self.session.add(task)
        await self.session.flush()
        return await self._reload(task)

    async def get_by_id(self, task_id: UUID, user_id: UUID) -> Task | None:
        """Get a task by ID if it belongs to ``user_id``."""
        result = await self.session.execute(self._owned(user_id).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: UUID,
        *,
        status: str | None = None,
        priority: str | None = None,
        tag: str | None = None,
    ) -> list[Task]:
        """List a user's tasks, optionally filtered.

        Args:
            user_id: Owner of the tasks
            status: Only tasks with this status
            priority: Only tasks with this priority
            tag: Only tasks carrying a tag with this exact name

        Returns:
            Matching tasks, oldest first
        """
        stmt = self._owned(user_id)
        if status is not None:
            stmt = stmt.where(Task.status == status)
        if priority is not None:
            stmt = stmt.where(Task.priority == priority)
        if tag is not None:
            stmt = stmt.where(Task.tags.any(Tag.name == tag))
        return await self._all(stmt)

    async def search(self, user_id: UUID, query: str) -> list[Task]:
        """Case-insensitive substring search over title and content."""
        stmt = self._owned(user_id).where(
            or_(
                Task.title.icontains(query, autoescape=True),
                Task.content.icontains(query, autoescape=True),
            )
        )
        return await self._all(stmt)

    async def list_due_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Task]:
        """List tasks whose due date falls in ``[start, end)``."""
        stmt = self._owned(user_id).where(Task.due_date >= start, Task.due_date < end)
        return await self._all(stmt)

    async def list_overdue(self, user_id: UUID, now: datetime) -> list[Task]:
        """List tasks due before ``now`` that are not done."""
        stmt = self._owned(user_id).where(
            Task.due_date < now,
            Task.status != TaskStatus.DONE.value,
        )
        return await self._all(stmt)

    async def update(self, task: Task, **fields: Any) -> Task:
        """Apply ``fields`` to ``task`` and persist them."""
        for field, value in fields.items():
            setattr(task, field, value)
        await self.session.flush()
        return await self._reload(task)

    async def soft_delete(self, task: Task) -> None:
        """Mark a task as deleted."""
        task.deleted_at = datetime.now(UTC)
        await self.session.flush()

    async def get_tag_by_name(self, name: str) -> Tag | None:
        """Get a tag by its exact name."""
        result = await self.session.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def get_or_create_tag(self, name: str) -> Tag:
        """Return the tag called ``name``, creating it on first use.

        A concurrent insert of the same name is resolved by re-reading the
        row the other writer created.
        """
        tag = await self.get_tag_by_name(name)
        if tag is not None:
            return tag

        try:
            async with self.session.begin_nested():
                tag = Tag(name=name)
                self.session.add(tag)
                await self.session.flush()
        except IntegrityError:
            existing = await self.get_tag_by_name(name)
            if existing is None:
                raise
            return existing
        return tag

    async def add_tag(self, task: Task, tag: Tag) -> Task:
        """Attach ``tag`` to ``task`` unless it is already attached."""
        if all(existing.id != tag.id for existing in task.tags):
            task.tags.append(tag)
            await self.session.flush()
        return await self._reload(task)

    async def remove_tag(self, task: Task, tag: Tag) -> Task:
        """Detach ``tag`` from ``task`` if attached."""
        task.tags = [existing for existing in task.tags if existing.id != tag.id]
        await self.session.flush()
        return await self._reload(task)

    async def bulk_soft_delete(self, user_id: UUID, task_ids: Sequence[UUID]) -> int:
        """Soft-delete the user's tasks among ``task_ids``.

        Returns:
            Number of tasks deleted
        """
        stmt = (
            update(Task)
            .where(
                Task.user_id == user_id,
                Task.id.in_(task_ids),
                Task.deleted_at.is_(None),
            )
            .values(deleted_at=datetime.now(UTC))
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def bulk_update_status(
        self, user_id: UUID, task_ids: Sequence[UUID], status: str
    ) -> int:
        """Set ``status`` on the user's tasks among ``task_ids``.

        Returns:
            Number of tasks updated
        """
        stmt = (
            update(Task)
            .where(
                Task.user_id == user_id,
                Task.id.in_(task_ids),
                Task.deleted_at.is_(None),
            )
            .values(status=status)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def count_by_status(self, user_id: UUID) -> dict[str, int]:
        """Count the user's tasks per status.

        Every known status is present (zero when unused), plus ``total``.
        """
        stmt = (
            select(Task.status, func.count())
            .where(Task.user_id == user_id, Task.deleted_at.is_(None))
            .group_by(Task.status)
        )
        result = await self.session.execute(stmt)

        counts = {status.value: 0 for status in TaskStatus}
        for status, count in result.all():
            counts[status] = count
        counts["total"] = sum(counts.values())
        return counts


TaskRepo = Annotated[TaskRepository, Depends(TaskRepository)]
