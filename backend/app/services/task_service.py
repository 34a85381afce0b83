"""Task service: request-level task and category operations for the API."""

import logging
import uuid
from datetime import datetime

from redis.asyncio import Redis

from app.core.errors import ConflictError, ValidationError
from app.models.task import RESTORE_WINDOW, Task, TaskFilter, utcnow
from app.services import task_index, task_query
from app.services.task_expiry import sweep_expired_tasks

logger = logging.getLogger(__name__)

__all__ = [
    "create_task",
    "get_task",
    "list_tasks",
    "update_task_completion",
    "delete_task",
    "restore_task",
    "get_categories",
    "rename_category",
    "delete_category",
    "sweep_expired_tasks",
]


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

async def create_task(
    redis: Redis,
    owner_id: str,
    description: str,
    category: str = "",
    now: datetime | None = None,
) -> dict:
    """Create a new active task."""
    if not owner_id or not owner_id.strip():
        raise ValidationError("owner ID is required")
    now = now or utcnow()
    task = Task(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        description=(description or "").strip(),
        category=(category or "").strip(),
        completed=False,
        created_at=now,
        updated_at=now,
    )
    await task_index.index_task(redis, task)
    logger.info("Task created id=%s owner=%s category=%r", task.id, owner_id, task.category)
    return _serialize_task(task)


async def get_task(redis: Redis, owner_id: str, task_id: str) -> dict:
    """Get a single task, active or deleted."""
    task = await task_query.get_task(redis, owner_id, task_id)
    return _serialize_task(task)


async def list_tasks(
    redis: Redis,
    owner_id: str,
    category: str | None = None,
    completed: bool | None = None,
    include_deleted: bool = False,
    limit: int | None = None,
    offset: int = 0,
) -> dict:
    """List tasks for an owner, optionally filtered and paginated."""
    task_filter = TaskFilter(
        category=category,
        completed=completed,
        include_deleted=include_deleted,
        limit=limit,
        offset=offset,
    )
    tasks = await task_query.list_tasks(redis, owner_id, task_filter)
    return {
        "tasks": [_serialize_task(t) for t in tasks],
        "total": len(tasks),
    }


async def update_task_completion(
    redis: Redis,
    owner_id: str,
    task_id: str,
    completed: bool,
) -> dict:
    """Mark a task completed or not completed."""
    task = await task_index.set_completion(redis, owner_id, task_id, completed)
    logger.info("Task completion id=%s completed=%s", task_id, completed)
    return _serialize_task(task)


async def delete_task(redis: Redis, owner_id: str, task_id: str) -> dict:
    """Soft-delete a task; it stays restorable for 7 days."""
    await task_index.soft_delete(redis, owner_id, task_id)
    logger.info("Task soft-deleted id=%s owner=%s", task_id, owner_id)
    return {"status": "deleted"}


async def restore_task(
    redis: Redis,
    owner_id: str,
    task_id: str,
    now: datetime | None = None,
) -> dict:
    """Restore a soft-deleted task if it is still inside the recovery window."""
    now = now or utcnow()
    task = await task_query.get_task(redis, owner_id, task_id)
    if not task.is_deleted:
        raise ConflictError("task is not deleted")
    if task.deleted_at < now - RESTORE_WINDOW:
        raise ConflictError("task cannot be restored after 7 days")

    task = await task_index.restore(redis, owner_id, task_id, now=now)
    logger.info("Task restored id=%s owner=%s", task_id, owner_id)
    return _serialize_task(task)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

async def get_categories(redis: Redis, owner_id: str) -> dict:
    """Categories in use with their active task counts."""
    categories = await task_query.list_categories(redis, owner_id)
    return {
        "categories": [{"name": c.name, "task_count": c.task_count} for c in categories],
    }


async def rename_category(redis: Redis, owner_id: str, old_name: str, new_name: str) -> dict:
    """Rename a category across all of the owner's active tasks."""
    updated = await task_index.rename_category(redis, owner_id, old_name, new_name)
    logger.info("Category renamed owner=%s %r -> %r tasks=%d", owner_id, old_name, new_name, updated)
    return {"status": "renamed", "tasks_updated": updated}


async def delete_category(redis: Redis, owner_id: str, name: str) -> dict:
    """Remove a category; its tasks become uncategorized."""
    updated = await task_index.delete_category(redis, owner_id, name)
    logger.info("Category deleted owner=%s %r tasks=%d", owner_id, name, updated)
    return {"status": "deleted", "tasks_updated": updated}


def _serialize_task(task: Task) -> dict:
    return {
        "id": task.id,
        "owner_id": task.owner_id,
        "description": task.description,
        "category": task.category,
        "completed": task.completed,
        "created_at": task.created_at.isoformat(),
        "updated_at": task.updated_at.isoformat(),
        "deleted_at": task.deleted_at.isoformat() if task.deleted_at else None,
    }
