from __future__ import annotations

import asyncio

import fakeredis
import httpx

from app.core.redis_client import get_redis
from app.main import app


def _run_with_client(server, scenario):
    async def main():
        redis = fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
        app.dependency_overrides[get_redis] = lambda: redis
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                return await scenario(client)
        finally:
            app.dependency_overrides.clear()
            await redis.aclose()

    return asyncio.run(main())


ALICE = {"X-Owner-Id": "alice"}
BOB = {"X-Owner-Id": "bob"}


def test_task_api_lifecycle(server) -> None:
    async def scenario(client):
        resp = await client.post("/api/tasks/", json={"description": "Prepare slides", "category": "work"}, headers=ALICE)
        assert resp.status_code == 201
        task = resp.json()
        task_id = task["id"]
        assert task["category"] == "work"

        resp = await client.put(f"/api/tasks/{task_id}/complete", json={"completed": True}, headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["completed"] is True

        resp = await client.get("/api/tasks/", params={"completed": "true"}, headers=ALICE)
        assert resp.json()["total"] == 1

        resp = await client.delete(f"/api/tasks/{task_id}", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json() == {"status": "deleted"}

        resp = await client.get("/api/tasks/", headers=ALICE)
        assert resp.json() == {"tasks": [], "total": 0}

        resp = await client.get("/api/tasks/", params={"include_deleted": "true"}, headers=ALICE)
        assert resp.json()["tasks"][0]["deleted_at"] is not None

        resp = await client.delete(f"/api/tasks/{task_id}", headers=ALICE)
        assert resp.status_code == 409

        resp = await client.post(f"/api/tasks/{task_id}/restore", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["deleted_at"] is None

        resp = await client.post(f"/api/tasks/{task_id}/restore", headers=ALICE)
        assert resp.status_code == 409

        resp = await client.get(f"/api/tasks/{task_id}", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["description"] == "Prepare slides"

    _run_with_client(server, scenario)


def test_other_owners_tasks_look_missing(server) -> None:
    async def scenario(client):
        resp = await client.post("/api/tasks/", json={"description": "private"}, headers=ALICE)
        task_id = resp.json()["id"]

        foreign = await client.get(f"/api/tasks/{task_id}", headers=BOB)
        missing = await client.get("/api/tasks/does-not-exist", headers=BOB)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json()

        resp = await client.delete(f"/api/tasks/{task_id}", headers=BOB)
        assert resp.status_code == 404

    _run_with_client(server, scenario)


def test_bad_requests_map_to_client_errors(server) -> None:
    async def scenario(client):
        resp = await client.post("/api/tasks/", json={"description": "   "}, headers=ALICE)
        assert resp.status_code == 400

        resp = await client.get("/api/tasks/", params={"limit": 5000}, headers=ALICE)
        assert resp.status_code == 400

        resp = await client.get("/api/tasks/", params={"offset": -1}, headers=ALICE)
        assert resp.status_code == 400

        resp = await client.get("/api/tasks/")
        assert resp.status_code == 401

    _run_with_client(server, scenario)


def test_category_api(server) -> None:
    async def scenario(client):
        for description in ("a", "b"):
            await client.post("/api/tasks/", json={"description": description, "category": "work"}, headers=ALICE)

        resp = await client.get("/api/categories/", headers=ALICE)
        assert resp.json() == {"categories": [{"name": "work", "task_count": 2}]}

        resp = await client.put("/api/categories/work", json={"new_name": "job"}, headers=ALICE)
        assert resp.status_code == 200
        assert resp.json() == {"status": "renamed", "tasks_updated": 2}

        resp = await client.put("/api/categories/job", json={"new_name": "job"}, headers=ALICE)
        assert resp.status_code == 409

        resp = await client.put("/api/categories/missing", json={"new_name": "x"}, headers=ALICE)
        assert resp.status_code == 404

        resp = await client.delete("/api/categories/job", headers=ALICE)
        assert resp.json() == {"status": "deleted", "tasks_updated": 2}

        resp = await client.get("/api/tasks/", headers=ALICE)
        assert {t["category"] for t in resp.json()["tasks"]} == {""}

        resp = await client.delete("/api/categories/job", headers=ALICE)
        assert resp.status_code == 404

    _run_with_client(server, scenario)


def test_health_check_pings_redis(server) -> None:
    async def scenario(client):
        return await client.get("/api/health")

    resp = _run_with_client(server, scenario)
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
