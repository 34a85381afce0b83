"""Category API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from redis.asyncio import Redis

from app.core.redis_client import get_redis
from app.core.security import get_current_owner
from app.services.task_service import delete_category, get_categories, rename_category

router = APIRouter(prefix="/api/categories", tags=["categories"])


class RenameCategoryRequest(BaseModel):
    new_name: str


@router.get("/")
async def api_list_categories(
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """List categories with their active task counts."""
    return await get_categories(redis, owner_id)


@router.put("/{category_name}")
async def api_rename_category(
    category_name: str,
    body: RenameCategoryRequest,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Rename a category on all of its tasks."""
    return await rename_category(redis, owner_id, category_name, body.new_name)


@router.delete("/{category_name}")
async def api_delete_category(
    category_name: str,
    owner_id: str = Depends(get_current_owner),
    redis: Redis = Depends(get_redis),
):
    """Delete a category and uncategorize its tasks."""
    return await delete_category(redis, owner_id, category_name)
