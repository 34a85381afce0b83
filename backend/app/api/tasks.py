"""Task API endpoints: create, list, complete, soft-delete and restore tasks."""

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from redis.asyncio import Redis

from app.core.config import settings
from app.core.redis_client import get_redis
from app.core.security import get_current_owner
from app.services.task_service import (
    create_task,
    delete_task,
    get_task,
    list_tasks,
    restore_task,
    update_task_completion,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CreateTaskRequest(BaseModel):
    description: str
    category: str = ""


class UpdateTaskCompletionRequest(BaseModel):
    completed: bool


# ---------------------------------------------------------------------------
# Task Routes
# ---------------------------------------------------------------------------

@router.get("/")
async def api_list_tasks(
    category: str | None = Query(None, description="Only tasks in this category"),
    completed: bool | None = Query(None, description="Filter by completion"),
    include_deleted: bool = Query(False, description="Append soft-deleted tasks"),
    limit: int | None = Query(None, description="Page size, 0-1000"),
    offset: int = Query(0, description="Number of tasks to skip"),
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """List the current owner's tasks."""
    return await list_tasks(
        redis,
        owner_id,
        category=category,
        completed=completed,
        include_deleted=include_deleted,
        limit=settings.default_page_size if limit is None else limit,
        offset=offset,
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def api_create_task(
    body: CreateTaskRequest,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Create a new task."""
    return await create_task(redis, owner_id, description=body.description, category=body.category)


@router.get("/{task_id}")
async def api_get_task(
    task_id: str,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Get a single task."""
    return await get_task(redis, owner_id, task_id)


@router.put("/{task_id}/complete")
async def api_update_task_completion(
    task_id: str,
    body: UpdateTaskCompletionRequest,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Mark a task completed or not completed."""
    return await update_task_completion(redis, owner_id, task_id, body.completed)


@router.delete("/{task_id}")
async def api_delete_task(
    task_id: str,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Soft-delete a task."""
    return await delete_task(redis, owner_id, task_id)


@router.post("/{task_id}/restore")
async def api_restore_task(
    task_id: str,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Restore a task deleted within the last 7 days."""
    return await restore_task(redis, owner_id, task_id)
