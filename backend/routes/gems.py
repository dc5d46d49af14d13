"""Market data routes: leagues, skill gem prices, gem colours and the EV calculator.

GET /api/leagues      → economy leagues (official API, fallback to permanent leagues)
GET /api/skill-gems   → poe.ninja skill gem listing for a league
GET /api/gem-colors   → transfigured gems grouped by colour
GET /api/calculate    → expected value of a transfigured gem roll per colour
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Query

from config import Settings
from dependencies import get_cache, get_http_client, get_settings
from models import CalculationResponse, GemColorsResponse, LeaguesApiResponse, SkillGemResponse
from services import poe_api
from services.cache import DiskCache
from services.calculator import DEFAULT_IGNORE_AFTER_CHAOS, calculate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/leagues", response_model=LeaguesApiResponse)
async def leagues(
    client: httpx.AsyncClient = Depends(get_http_client),
    cache: DiskCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> LeaguesApiResponse:
    return await poe_api.get_leagues(client, cache, settings)


@router.get("/skill-gems", response_model=SkillGemResponse)
async def skill_gems(
    league: str = Query(poe_api.DEFAULT_LEAGUE, min_length=1),
    client: httpx.AsyncClient = Depends(get_http_client),
    cache: DiskCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> SkillGemResponse:
    return await poe_api.get_skill_gems(client, cache, settings, league)


@router.get("/gem-colors", response_model=GemColorsResponse)
async def gem_colors(
    league: str = Query(poe_api.DEFAULT_LEAGUE, min_length=1),
    client: httpx.AsyncClient = Depends(get_http_client),
    cache: DiskCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> GemColorsResponse:
    return await poe_api.get_gem_colors(client, cache, settings, league)


@router.get("/calculate", response_model=CalculationResponse)
async def calculate_roi(
    league: str = Query(poe_api.DEFAULT_LEAGUE, min_length=1),
    ignore_after_chaos: float = Query(DEFAULT_IGNORE_AFTER_CHAOS, ge=0),
    gem_level: int = Query(1, ge=1),
    gem_quality: int = Query(0, ge=0),
    client: httpx.AsyncClient = Depends(get_http_client),
    cache: DiskCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> CalculationResponse:
    """Expected chaos value of picking the best of three transfigured gems, per colour."""
    logger.info(
        "Calculating ROI for league: %s, level: %d, quality: %d, ignore_threshold: %s",
        league, gem_level, gem_quality, ignore_after_chaos,
    )
    gems = await poe_api.get_skill_gems(client, cache, settings, league)
    return calculate(gems.lines, ignore_after_chaos, gem_level, gem_quality)
