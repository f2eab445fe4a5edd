"""Task API routes.

Every route is behind the authentication gate; the caller's identity
comes from ``CurrentUserId``. Static paths are declared before
``/{task_id}`` so they are not captured as IDs.
"""

from uuid import UUID

from fastapi import Query, Response, status

from taskflow.core.auth.dependencies import CurrentUserId
from taskflow.modules.tasks import router
from taskflow.modules.tasks.models import Task
from taskflow.modules.tasks.schemas import (
    BulkDeleteRequest,
    BulkStatusRequest,
    PriorityUpdate,
    StatusUpdate,
    TagRequest,
    TaskCreate,
    TaskPriority,
    TaskResponse,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)
from taskflow.modules.tasks.services import TaskSvc


def _to_response(tasks: list[Task]) -> list[TaskResponse]:
    return [TaskResponse.model_validate(task) for task in tasks]


# ============================================================
# Collection Routes
# ============================================================


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
)
async def create_task(
    data: TaskCreate,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    """Create a task owned by the caller."""
    task = await service.create_task(user_id, data)
    return TaskResponse.model_validate(task)


@router.get(
    "",
    response_model=list[TaskResponse],
    summary="List tasks",
)
async def list_tasks(service: TaskSvc, user_id: CurrentUserId) -> list[TaskResponse]:
    """List all of the caller's tasks."""
    return _to_response(await service.list_tasks(user_id))


@router.get(
    "/search",
    response_model=list[TaskResponse],
    summary="Search tasks",
    description="Case-insensitive substring match on title and content.",
)
async def search_tasks(
    service: TaskSvc,
    user_id: CurrentUserId,
    q: str = Query("", description="Search text"),
) -> list[TaskResponse]:
    """Search the caller's tasks."""
    return _to_response(await service.search_tasks(user_id, q))


@router.get(
    "/today",
    response_model=list[TaskResponse],
    summary="Tasks due today",
)
async def tasks_due_today(service: TaskSvc, user_id: CurrentUserId) -> list[TaskResponse]:
    """Tasks due within the current UTC day."""
    return _to_response(await service.list_due_today(user_id))


@router.get(
    "/overdue",
    response_model=list[TaskResponse],
    summary="Overdue tasks",
)
async def overdue_tasks(service: TaskSvc, user_id: CurrentUserId) -> list[TaskResponse]:
    """Tasks past their due date that are not done."""
    return _to_response(await service.list_overdue(user_id))


@router.get(
    "/stats",
    response_model=TaskStats,
    summary="Task statistics",
)
async def task_stats(service: TaskSvc, user_id: CurrentUserId) -> TaskStats:
    """Count the caller's tasks per status."""
    return TaskStats(**await service.stats(user_id))


@router.get(
    "/status/{task_status}",
    response_model=list[TaskResponse],
    summary="Tasks by status",
)
async def tasks_by_status(
    task_status: TaskStatus,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> list[TaskResponse]:
    return _to_response(await service.list_by_status(user_id, task_status))


@router.get(
    "/priority/{priority}",
    response_model=list[TaskResponse],
    summary="Tasks by priority",
)
async def tasks_by_priority(
    priority: TaskPriority,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> list[TaskResponse]:
    return _to_response(await service.list_by_priority(user_id, priority))


@router.get(
    "/tag/{tag}",
    response_model=list[TaskResponse],
    summary="Tasks by tag",
)
async def tasks_by_tag(
    tag: str,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> list[TaskResponse]:
    return _to_response(await service.list_by_tag(user_id, tag))


@router.post(
    "/bulk-delete",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete several tasks",
)
async def bulk_delete(
    data: BulkDeleteRequest,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> Response:
    """Soft-delete the caller's tasks among the given IDs."""
    await service.bulk_delete(user_id, data.ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/bulk-status",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Set the status of several tasks",
)
async def bulk_status(
    data: BulkStatusRequest,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> Response:
    """Set the status of the caller's tasks among the given IDs."""
    await service.bulk_update_status(user_id, data.ids, data.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================
# Single Task Routes
# ============================================================


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get task",
)
async def get_task(
    task_id: UUID,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.get_task(task_id, user_id)
    return TaskResponse.model_validate(task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update task",
    description="Replace title, content and due date. Status and priority "
    "are kept when omitted.",
)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.update_task(task_id, user_id, data)
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete task",
)
async def delete_task(
    task_id: UUID,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> Response:
    await service.delete_task(task_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{task_id}/status",
    response_model=TaskResponse,
    summary="Change task status",
)
async def change_status(
    task_id: UUID,
    data: StatusUpdate,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.change_status(task_id, user_id, data.status)
    return TaskResponse.model_validate(task)


@router.patch(
    "/{task_id}/priority",
    response_model=TaskResponse,
    summary="Change task priority",
)
async def change_priority(
    task_id: UUID,
    data: PriorityUpdate,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.change_priority(task_id, user_id, data.priority)
    return TaskResponse.model_validate(task)


@router.patch(
    "/{task_id}/archive",
    response_model=TaskResponse,
    summary="Archive task",
)
async def archive_task(
    task_id: UUID,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.archive_task(task_id, user_id)
    return TaskResponse.model_validate(task)


@router.patch(
    "/{task_id}/unarchive",
    response_model=TaskResponse,
    summary="Unarchive task",
)
async def unarchive_task(
    task_id: UUID,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.unarchive_task(task_id, user_id)
    return TaskResponse.model_validate(task)


@router.post(
    "/{task_id}/tags",
    response_model=TaskResponse,
    summary="Add tag",
    description="Attach a tag, creating it on first use. Adding an attached tag "
    "is a no-op.",
)
async def add_tag(
    task_id: UUID,
    data: TagRequest,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.add_tag(task_id, user_id, data.tag)
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}/tags/{tag}",
    response_model=TaskResponse,
    summary="Remove tag",
)
async def remove_tag(
    task_id: UUID,
    tag: str,
    service: TaskSvc,
    user_id: CurrentUserId,
) -> TaskResponse:
    task = await service.remove_tag(task_id, user_id, tag)
    return TaskResponse.model_validate(task)
