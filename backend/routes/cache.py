"""Cache maintenance routes."""

import asyncio

from fastapi import APIRouter, Depends

from dependencies import get_cache
from services.cache import DiskCache

router = APIRouter(prefix="/api/cache")


@router.delete("")
async def clear_cache(cache: DiskCache = Depends(get_cache)) -> dict:
    """Drop every cached entry, valid or not."""
    removed = await asyncio.to_thread(cache.clear)
    return {"removed": removed}


@router.post("/cleanup")
async def cleanup_cache(cache: DiskCache = Depends(get_cache)) -> dict:
    """Drop expired entries only."""
    removed = await asyncio.to_thread(cache.cleanup_expired)
    return {"removed": removed}
