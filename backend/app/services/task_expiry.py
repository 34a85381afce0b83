"""Expiry collector: permanently erase tasks deleted more than 7 days ago."""

import logging
from datetime import datetime

from redis.asyncio import Redis

from app.core.errors import ConflictError, StorageError
from app.core.store import DELETED_ORDER_PATTERN, atomic_batch, storage_errors, task_key
from app.models.task import RESTORE_WINDOW, utcnow

logger = logging.getLogger(__name__)


async def _erase_expired(redis: Redis, deleted_key: str, cutoff: float) -> int:
    # Watching the deleted index keeps a concurrent restore from being erased.
    async with atomic_batch(redis, deleted_key) as pipe:
        expired = await pipe.zrangebyscore(deleted_key, "-inf", cutoff)
        pipe.multi()
        for task_id in expired:
            pipe.delete(task_key(task_id))
            pipe.zrem(deleted_key, task_id)
    return len(expired)


async def sweep_expired_tasks(redis: Redis, *, now: datetime | None = None) -> int:
    """Erase every task whose deletion time is at or before now - 7 days.

    Owners are processed independently: a failed batch is logged and left
    for the next sweep. Returns the number of tasks erased.
    """
    now = now or utcnow()
    cutoff = (now - RESTORE_WINDOW).timestamp()

    with storage_errors("scan deleted task indexes"):
        deleted_keys = [key async for key in redis.scan_iter(match=DELETED_ORDER_PATTERN)]

    erased = 0
    for deleted_key in deleted_keys:
        try:
            erased += await _erase_expired(redis, deleted_key, cutoff)
        except (StorageError, ConflictError) as exc:
            logger.warning("Sweep skipped %s: %s", deleted_key, exc)

    logger.info("Sweep erased %d expired task(s) across %d owner(s)", erased, len(deleted_keys))
    return erased
