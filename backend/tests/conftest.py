from __future__ import annotations

import asyncio

import fakeredis
import pytest


@pytest.fixture()
def server() -> fakeredis.FakeServer:
    """One in-memory Redis server per test."""
    return fakeredis.FakeServer()


@pytest.fixture()
def run(server):
    """
    Run ``scenario(redis)`` to completion and return its result.

    The client is created inside the event loop it is used in, and closed
    afterwards; data lives on the shared FakeServer.
    """

    def _run(scenario):
        async def main():
            redis = fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
            try:
                return await scenario(redis)
            finally:
                await redis.aclose()

        return asyncio.run(main())

    return _run
