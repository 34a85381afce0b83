"""Task index maintainer.

Each mutation rewrites the task record and every structure derived from it
in one MULTI/EXEC batch. Operations that read before writing WATCH the keys
they read, so a concurrent change aborts the batch with ConflictError instead
of leaving the indexes half-updated.
"""

from datetime import datetime

from redis.asyncio import Redis

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.store import (
    active_order_key,
    active_set_key,
    atomic_batch,
    categories_key,
    category_members_key,
    deleted_order_key,
    task_key,
)
from app.models.task import Task, utcnow
from app.services.task_query import get_task, require_id


def _category_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("category name cannot be empty")
    return name


# ---------------------------------------------------------------------------
# Task lifecycle
# ---------------------------------------------------------------------------

async def index_task(redis: Redis, task: Task) -> Task:
    """Store a new task and add it to the active and category indexes."""
    task.validate()
    if task.is_deleted:
        raise ValidationError("a new task cannot be deleted")

    owner_id = task.owner_id
    async with atomic_batch(redis) as pipe:
        pipe.hset(task_key(task.id), mapping=task.to_hash())
        pipe.sadd(active_set_key(owner_id), task.id)
        pipe.zadd(active_order_key(owner_id), {task.id: task.created_at.timestamp()})
        if task.category.strip():
            pipe.sadd(categories_key(owner_id), task.category)
            pipe.sadd(category_members_key(owner_id, task.category), task.id)
    return task


async def set_completion(
    redis: Redis,
    owner_id: str,
    task_id: str,
    completed: bool,
    *,
    now: datetime | None = None,
) -> Task:
    """Flip the completed flag. Only the record changes; no index tracks it."""
    require_id(owner_id, "owner ID")
    require_id(task_id, "task ID")
    now = now or utcnow()

    key = task_key(task_id)
    async with atomic_batch(redis, key) as pipe:
        task = await get_task(pipe, owner_id, task_id)
        pipe.multi()
        pipe.hset(key, mapping={"completed": "1" if completed else "0", "updated_at": now.isoformat()})

    task.completed = completed
    task.updated_at = now
    return task


async def soft_delete(
    redis: Redis,
    owner_id: str,
    task_id: str,
    *,
    now: datetime | None = None,
) -> Task:
    """Move an active task into the deleted index.

    The owner's category set is left alone even when this was the last
    active task of its category; only delete_category prunes it.
    """
    require_id(owner_id, "owner ID")
    require_id(task_id, "task ID")
    now = now or utcnow()

    key = task_key(task_id)
    async with atomic_batch(redis, key) as pipe:
        task = await get_task(pipe, owner_id, task_id)
        if task.is_deleted:
            raise ConflictError("task is already deleted")
        pipe.multi()
        pipe.hset(key, mapping={"deleted_at": now.isoformat(), "updated_at": now.isoformat()})
        pipe.srem(active_set_key(owner_id), task_id)
        pipe.zrem(active_order_key(owner_id), task_id)
        if task.category.strip():
            pipe.srem(category_members_key(owner_id, task.category), task_id)
        pipe.zadd(deleted_order_key(owner_id), {task_id: now.timestamp()})

    task.deleted_at = now
    task.updated_at = now
    return task


async def restore(
    redis: Redis,
    owner_id: str,
    task_id: str,
    *,
    now: datetime | None = None,
) -> Task:
    """Bring a deleted task back to the active indexes.

    Recency order uses the original creation time. The recovery window is
    the caller's policy and is not checked here.
    """
    require_id(owner_id, "owner ID")
    require_id(task_id, "task ID")
    now = now or utcnow()

    key = task_key(task_id)
    async with atomic_batch(redis, key) as pipe:
        task = await get_task(pipe, owner_id, task_id)
        if not task.is_deleted:
            raise ConflictError("task is not deleted")
        pipe.multi()
        pipe.hdel(key, "deleted_at")
        pipe.hset(key, "updated_at", now.isoformat())
        pipe.sadd(active_set_key(owner_id), task_id)
        pipe.zadd(active_order_key(owner_id), {task_id: task.created_at.timestamp()})
        if task.category.strip():
            # The category may have been renamed or deleted while the task was away.
            pipe.sadd(categories_key(owner_id), task.category)
            pipe.sadd(category_members_key(owner_id, task.category), task_id)
        pipe.zrem(deleted_order_key(owner_id), task_id)

    task.deleted_at = None
    task.updated_at = now
    return task


# ---------------------------------------------------------------------------
# Category fan-out
# ---------------------------------------------------------------------------

async def rename_category(
    redis: Redis,
    owner_id: str,
    old_name: str,
    new_name: str,
    *,
    now: datetime | None = None,
) -> int:
    """Rename a category on every active task in it. Returns the task count.

    Renaming onto an existing category merges the two member sets.
    """
    require_id(owner_id, "owner ID")
    old_name = _category_name(old_name)
    new_name = _category_name(new_name)
    if old_name == new_name:
        raise ConflictError("new category name must be different")
    now = now or utcnow()

    names_key = categories_key(owner_id)
    old_key = category_members_key(owner_id, old_name)
    async with atomic_batch(redis, names_key, old_key) as pipe:
        if not await pipe.sismember(names_key, old_name):
            if await pipe.sismember(names_key, new_name):
                raise ConflictError(f"category '{old_name}' no longer exists")
            raise NotFoundError("category not found")
        task_ids = sorted(await pipe.smembers(old_key))

        pipe.multi()
        for task_id in task_ids:
            pipe.hset(task_key(task_id), mapping={"category": new_name, "updated_at": now.isoformat()})
        if task_ids:
            pipe.sadd(category_members_key(owner_id, new_name), *task_ids)
        pipe.srem(names_key, old_name)
        pipe.sadd(names_key, new_name)
        pipe.delete(old_key)

    return len(task_ids)


async def delete_category(
    redis: Redis,
    owner_id: str,
    name: str,
    *,
    now: datetime | None = None,
) -> int:
    """Remove a category and uncategorize its active tasks. Returns the task count."""
    require_id(owner_id, "owner ID")
    name = _category_name(name)
    now = now or utcnow()

    names_key = categories_key(owner_id)
    members_key = category_members_key(owner_id, name)
    async with atomic_batch(redis, names_key, members_key) as pipe:
        if not await pipe.sismember(names_key, name):
            raise NotFoundError("category not found")
        task_ids = sorted(await pipe.smembers(members_key))

        pipe.multi()
        for task_id in task_ids:
            pipe.hset(task_key(task_id), mapping={"category": "", "updated_at": now.isoformat()})
        pipe.srem(names_key, name)
        pipe.delete(members_key)

    return len(task_ids)
