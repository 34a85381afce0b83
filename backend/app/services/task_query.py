"""Task query engine: ownership-checked lookups, filtered listing, categories."""

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline

from app.core.errors import NotFoundError, ValidationError
from app.core.store import (
    active_order_key,
    categories_key,
    category_members_key,
    deleted_order_key,
    storage_errors,
    task_key,
)
from app.models.task import CategoryInfo, Task, TaskFilter


def require_id(value: str, label: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{label} is required")
    return value


def owns(task: Task | None, owner_id: str) -> bool:
    """The one ownership check every read path goes through.

    A foreign task is reported exactly like a missing one.
    """
    return task is not None and task.owner_id == owner_id


def _parse(data: dict[str, str] | None) -> Task | None:
    if not data:
        return None
    try:
        return Task.from_hash(data)
    except ValueError:
        return None


async def fetch_task(redis: Redis | Pipeline, task_id: str) -> Task | None:
    """Read a record without any ownership check. None if missing or unreadable."""
    with storage_errors("read task"):
        data = await redis.hgetall(task_key(task_id))
    return _parse(data)


async def get_task(redis: Redis | Pipeline, owner_id: str, task_id: str) -> Task:
    """Load a task owned by ``owner_id``, active or deleted.

    Accepts a watching pipeline so callers can read and mutate atomically.
    """
    require_id(owner_id, "owner ID")
    require_id(task_id, "task ID")
    task = await fetch_task(redis, task_id)
    if not owns(task, owner_id):
        raise NotFoundError("task not found")
    return task


async def _candidate_ids(redis: Redis, owner_id: str, task_filter: TaskFilter) -> list[str]:
    category = task_filter.category_name
    with storage_errors("read task indexes"):
        if category:
            # Category members carry no order; sort so pagination windows are stable.
            ids = sorted(await redis.smembers(category_members_key(owner_id, category)))
        else:
            ids = await redis.zrevrange(active_order_key(owner_id), 0, -1)
        if task_filter.include_deleted:
            ids = list(ids) + await redis.zrevrange(deleted_order_key(owner_id), 0, -1)
    return list(ids)


async def _hydrate(redis: Redis, task_ids: list[str]) -> list[Task]:
    if not task_ids:
        return []
    with storage_errors("read tasks"):
        async with redis.pipeline(transaction=False) as pipe:
            for task_id in task_ids:
                pipe.hgetall(task_key(task_id))
            rows = await pipe.execute()
    return [task for task in map(_parse, rows) if task is not None]


async def list_tasks(redis: Redis, owner_id: str, task_filter: TaskFilter) -> list[Task]:
    """Resolve a filter into an ordered page of the owner's tasks.

    Active tasks come first, newest created first; with ``include_deleted``
    the deleted tasks follow, most recently deleted first. Offset and limit
    window the id sequence before hydration, so a page can come back short
    when ids vanish or the completed filter drops tasks.
    """
    require_id(owner_id, "owner ID")
    task_filter.validate()

    task_ids = await _candidate_ids(redis, owner_id, task_filter)
    start = task_filter.offset
    end = None if task_filter.limit is None else start + task_filter.limit

    tasks = [t for t in await _hydrate(redis, task_ids[start:end]) if owns(t, owner_id)]
    if task_filter.completed is not None:
        tasks = [t for t in tasks if t.completed is task_filter.completed]
    return tasks


async def list_categories(redis: Redis, owner_id: str) -> list[CategoryInfo]:
    """Category names in use, with the number of active tasks in each."""
    require_id(owner_id, "owner ID")
    with storage_errors("read categories"):
        names = sorted(n for n in await redis.smembers(categories_key(owner_id)) if n.strip())
        if not names:
            return []
        async with redis.pipeline(transaction=False) as pipe:
            for name in names:
                pipe.scard(category_members_key(owner_id, name))
            counts = await pipe.execute()
    return [CategoryInfo(name=name, task_count=int(count)) for name, count in zip(names, counts)]
