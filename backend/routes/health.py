"""Health and readiness check routes."""

import asyncio
import logging
import os

from fastapi import APIRouter, Depends

from config import Settings
from dependencies import get_cache, get_settings
from services.cache import DiskCache

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "poe-gem-calculator"


@router.get("/ready")
async def ready(settings: Settings = Depends(get_settings)) -> dict:
    """Lightweight readiness check, no I/O."""
    return {"status": "ok", "service": SERVICE_NAME, "commit": settings.git_sha}


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings),
    cache: DiskCache = Depends(get_cache),
) -> dict:
    """Deep health check that verifies the cache directory is usable."""
    result = {"status": "ok", "service": SERVICE_NAME, "commit": settings.git_sha, "cache": "not_tested"}

    try:
        result["cache_entries"] = await asyncio.to_thread(cache.entry_count)
        result["cache"] = "writable" if os.access(cache.root, os.W_OK) else "read_only"
    except OSError as e:
        logger.exception("Cache health check failed")
        result["cache"] = "error"
        result["cache_error"] = str(e)

    if result["cache"] != "writable":
        result["status"] = "degraded"
    return result
