"""Redis key layout and the atomic batch every mutation goes through.

One task lives in up to six structures:

    task:{id}                       hash        primary record
    user:{owner}:tasks              set         active ids
    user:{owner}:tasks:sorted       sorted set  active ids by creation time
    user:{owner}:categories         set         category names in use
    user:{owner}:category:{name}    set         active ids in a category
    user:{owner}:tasks:deleted      sorted set  deleted ids by deletion time
"""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError, WatchError

from app.core.errors import ConflictError, StorageError

TASK_KEY_PREFIX = "task"
USER_KEY_PREFIX = "user"

DELETED_ORDER_PATTERN = f"{USER_KEY_PREFIX}:*:tasks:deleted"


def generate_key(prefix: str, identifier: str) -> str:
    return f"{prefix}:{identifier}"


def task_key(task_id: str) -> str:
    return generate_key(TASK_KEY_PREFIX, task_id)


def _user_key(owner_id: str) -> str:
    return generate_key(USER_KEY_PREFIX, owner_id)


def active_set_key(owner_id: str) -> str:
    return f"{_user_key(owner_id)}:tasks"


def active_order_key(owner_id: str) -> str:
    return f"{_user_key(owner_id)}:tasks:sorted"


def deleted_order_key(owner_id: str) -> str:
    return f"{_user_key(owner_id)}:tasks:deleted"


def categories_key(owner_id: str) -> str:
    return f"{_user_key(owner_id)}:categories"


def category_members_key(owner_id: str, category: str) -> str:
    return f"{_user_key(owner_id)}:category:{category}"


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise Redis failures inside the block as StorageError."""
    try:
        yield
    except RedisError as exc:
        raise StorageError(f"failed to {action}") from exc


@asynccontextmanager
async def atomic_batch(redis: Redis, *watch_keys: str) -> AsyncIterator[Pipeline]:
    """Queue commands on a MULTI/EXEC pipeline and apply them on exit.

    With ``watch_keys`` the pipeline starts in immediate mode so the caller
    can read the watched keys; it must call ``pipe.multi()`` before queueing
    writes. If any watched key changes before EXEC, nothing is applied and
    ConflictError is raised. Exceptions from the body discard the batch.
    """
    async with redis.pipeline(transaction=True) as pipe:
        try:
            if watch_keys:
                await pipe.watch(*watch_keys)
            yield pipe
            await pipe.execute()
        except WatchError as exc:
            raise ConflictError("concurrent modification, batch not applied") from exc
        except RedisError as exc:
            raise StorageError("atomic batch could not be applied") from exc
