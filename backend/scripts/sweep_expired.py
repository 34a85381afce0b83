"""Permanently erase tasks that were soft-deleted more than 7 days ago.

Meant to be run by an external scheduler (cron, a k8s CronJob), roughly daily.

Usage:
    python -m scripts.sweep_expired
    python -m scripts.sweep_expired --redis-url redis://localhost:6379/0
"""
import argparse
import asyncio

from redis.asyncio import Redis

from app.core.logging_config import configure_logging
from app.core.redis_client import get_redis
from app.services.task_service import sweep_expired_tasks


async def run(redis: Redis) -> int:
    try:
        return await sweep_expired_tasks(redis)
    finally:
        await redis.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Erase expired soft-deleted tasks")
    parser.add_argument("--redis-url", help="Override the configured Redis URL")
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    if args.redis_url:
        redis = Redis.from_url(args.redis_url, decode_responses=True)
    else:
        redis = get_redis()

    erased = asyncio.run(run(redis))
    print(f"Erased {erased} expired task(s).")
    return erased


if __name__ == "__main__":
    main()
