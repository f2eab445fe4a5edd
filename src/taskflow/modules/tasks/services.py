"""Task service for business logic."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from taskflow.core.errors import BadRequestError, NotFoundError
from taskflow.modules.tasks.models import Task
from taskflow.modules.tasks.repos import TaskRepo
from taskflow.modules.tasks.schemas import (
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)


logger = structlog.get_logger()


def _require_text(title: str, content: str) -> None:
    if not title:
        raise BadRequestError("task title is empty", error_code="task_title_empty")
    if not content:
        raise BadRequestError("task content is empty", error_code="task_content_empty")


class TaskService:
    """Service for task management operations.

    Every method takes the caller's ``user_id``; tasks owned by anyone else
    are reported as not found.
    """

    def __init__(self, repo: TaskRepo) -> None:
        self.repo = repo

    async def create_task(self, user_id: UUID, data: TaskCreate) -> Task:
        """Create a task for ``user_id``.

        Args:
            user_id: Owner of the new task
            data: Task creation data

        Returns:
            The created task

        Raises:
            BadRequestError: If title or content is empty
        """
        _require_text(data.title, data.content)

        task = Task(
            user_id=user_id,
            title=data.title,
            content=data.content,
            status=(data.status or TaskStatus.TODO).value,
            priority=(data.priority or TaskPriority.MEDIUM).value,
            due_date=data.due_date,
            archived=False,
        )
        task = await self.repo.create(task)
        logger.info("task_created", task_id=str(task.id))
        return task

    async def list_tasks(self, user_id: UUID) -> list[Task]:
        """List every task of ``user_id``."""
        return await self.repo.list_for_user(user_id)

    async def get_task(self, task_id: UUID, user_id: UUID) -> Task:
        """Get a task by ID.

        Raises:
            NotFoundError: If the task does not exist or belongs to someone else
        """
        task = await self.repo.get_by_id(task_id, user_id)
        if not task:
            raise NotFoundError(
                "task not found", resource="task", resource_id=str(task_id)
            )
        return task

    async def update_task(self, task_id: UUID, user_id: UUID, data: TaskUpdate) -> Task:
        """Replace a task's fields.

        Status and priority are kept when omitted; the due date is always
        replaced.

        Raises:
            NotFoundError: If the task is not found
            BadRequestError: If title or content is empty
        """
        task = await self.get_task(task_id, user_id)
        _require_text(data.title, data.content)

        fields: dict[str, object] = {
            "title": data.title,
            "content": data.content,
            "due_date": data.due_date,
        }
        if data.status is not None:
            fields["status"] = data.status.value
        if data.priority is not None:
            fields["priority"] = data.priority.value

        task = await self.repo.update(task, **fields)
        logger.info("task_updated", task_id=str(task.id))
        return task

    async def delete_task(self, task_id: UUID, user_id: UUID) -> None:
        """Soft-delete a task.

        Raises:
            NotFoundError: If the task is not found
        """
        task = await self.get_task(task_id, user_id)
        await self.repo.soft_delete(task)
        logger.info("task_deleted", task_id=str(task_id))

    async def change_status(
        self, task_id: UUID, user_id: UUID, status: TaskStatus
    ) -> Task:
        """Set a task's status."""
        task = await self.get_task(task_id, user_id)
        return await self.repo.update(task, status=status.value)

    async def change_priority(
        self, task_id: UUID, user_id: UUID, priority: TaskPriority
    ) -> Task:
        """Set a task's priority."""
        task = await self.get_task(task_id, user_id)
        return await self.repo.update(task, priority=priority.value)

    async def archive_task(self, task_id: UUID, user_id: UUID) -> Task:
        """Archive a task."""
        task = await self.get_task(task_id, user_id)
        return await self.repo.update(task, archived=True)

    async def unarchive_task(self, task_id: UUID, user_id: UUID) -> Task:
        """Bring an archived task back."""
        task = await self.get_task(task_id, user_id)
        return await self.repo.update(task, archived=False)

    async def list_by_status(self, user_id: UUID, status: TaskStatus) -> list[Task]:
        return await self.repo.list_for_user(user_id, status=status.value)

    async def list_by_priority(
        self, user_id: UUID, priority: TaskPriority
    ) -> list[Task]:
        return await self.repo.list_for_user(user_id, priority=priority.value)

    async def list_by_tag(self, user_id: UUID, tag: str) -> list[Task]:
        return await self.repo.list_for_user(user_id, tag=tag.strip())

    async def search_tasks(self, user_id: UUID, query: str) -> list[Task]:
        """Search title and content; a blank query matches nothing."""
        query = query.strip()
        if not query:
            return []
        return await self.repo.search(user_id, query)

    async def list_due_today(
        self, user_id: UUID, now: datetime | None = None
    ) -> list[Task]:
        """List tasks due within the current UTC day."""
        now = now or datetime.now(UTC)
        start = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
        return await self.repo.list_due_between(user_id, start, start + timedelta(days=1))

    async def list_overdue(
        self, user_id: UUID, now: datetime | None = None
    ) -> list[Task]:
        """List tasks past their due date that are not done."""
        now = now or datetime.now(UTC)
        return await self.repo.list_overdue(user_id, now.astimezone(UTC))

    async def add_tag(self, task_id: UUID, user_id: UUID, tag_name: str) -> Task:
        """Attach a tag to a task, creating the tag on first use.

        Adding a tag the task already carries changes nothing.

        Raises:
            NotFoundError: If the task is not found
            BadRequestError: If the tag name is blank
        """
        name = tag_name.strip()
        if not name:
            raise BadRequestError("tag empty", error_code="tag_empty")

        task = await self.get_task(task_id, user_id)
        tag = await self.repo.get_or_create_tag(name)
        return await self.repo.add_tag(task, tag)

    async def remove_tag(self, task_id: UUID, user_id: UUID, tag_name: str) -> Task:
        """Detach a tag from a task.

        Raises:
            NotFoundError: If the task or the tag is not found
        """
        task = await self.get_task(task_id, user_id)
        name = tag_name.strip()
        tag = await self.repo.get_tag_by_name(name)
        if not tag:
            raise NotFoundError("tag not found", resource="tag", resource_id=name)
        return await self.repo.remove_tag(task, tag)

    async def bulk_delete(self, user_id: UUID, task_ids: Sequence[UUID]) -> int:
        """Soft-delete the caller's tasks among ``task_ids``.

        IDs that are unknown or owned by someone else are skipped.

        Returns:
            Number of tasks deleted
        """
        if not task_ids:
            return 0
        deleted = await self.repo.bulk_soft_delete(user_id, task_ids)
        logger.info("tasks_bulk_deleted", requested=len(task_ids), deleted=deleted)
        return deleted

    async def bulk_update_status(
        self, user_id: UUID, task_ids: Sequence[UUID], status: TaskStatus
    ) -> int:
        """Set ``status`` on the caller's tasks among ``task_ids``.

        Returns:
            Number of tasks updated
        """
        if not task_ids:
            return 0
        updated = await self.repo.bulk_update_status(user_id, task_ids, status.value)
        logger.info(
            "tasks_bulk_status_updated",
            status=status.value,
            requested=len(task_ids),
            updated=updated,
        )
        return updated

    async def stats(self, user_id: UUID) -> dict[str, int]:
        """Count the caller's tasks per status, plus the total."""
        return await self.repo.count_by_status(user_id)


TaskSvc = Annotated[TaskService, Depends(TaskService)]
