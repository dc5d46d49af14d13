"""Upstream clients for the official PoE leagues API and poe.ninja.

Every fetch checks the disk cache first and writes fresh data back. Cache
problems never fail a request: a broken read is treated as a miss and a
failed write is only logged.
"""

import asyncio
import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from config import Settings
from errors import UpstreamError, UpstreamUnavailableError
from models import GemColorsResponse, League, LeaguesApiResponse, OfficialLeague, SkillGemResponse
from services.cache import CacheError, DiskCache
from services.gem_colors import classify_gems

logger = logging.getLogger(__name__)

LEAGUES_KEY = "leagues"
DEFAULT_LEAGUE = "Standard"

_official_leagues = TypeAdapter(list[OfficialLeague])

# Permanent leagues, served when the official API is unreachable.
FALLBACK_LEAGUES = LeaguesApiResponse(
    leagues=[
        League(name="Standard", display_name="Standard", hardcore=False, indexed=True),
        League(name="Hardcore", display_name="Hardcore", hardcore=True, indexed=True),
    ]
)


def skill_gems_key(league: str) -> str:
    return f"skillGems_{league}"


def gem_colors_key(league: str) -> str:
    return f"gemColors_{league}"


async def cached_get(cache: DiskCache, key: str, schema):
    try:
        return await asyncio.to_thread(cache.get, key, schema)
    except (OSError, CacheError) as e:
        logger.warning("Cache read failed for %s, refetching: %s", key, e)
        return None


async def cached_set(cache: DiskCache, key: str, value, ttl_minutes: int) -> None:
    try:
        await asyncio.to_thread(cache.set, key, value, ttl_minutes)
    except OSError as e:
        logger.error("Failed to cache %s: %s", key, e)


def is_economy_league(league: OfficialLeague) -> bool:
    """poe.ninja only tracks trade leagues: no SSF, no Ruthless."""
    if "SSF" in league.id or "Solo Self-Found" in league.id:
        return False
    return "Ruthless" not in league.id


def to_league(official: OfficialLeague) -> League:
    hardcore = any(rule.id == "Hardcore" for rule in official.rules or [])
    return League(name=official.id, display_name=official.id, hardcore=hardcore, indexed=True)


async def get_leagues(client: httpx.AsyncClient, cache: DiskCache, settings: Settings) -> LeaguesApiResponse:
    """Current economy leagues, falling back to the permanent ones on any upstream failure."""
    cached = await cached_get(cache, LEAGUES_KEY, LeaguesApiResponse)
    if cached is not None:
        logger.info("Returning cached leagues data")
        return cached

    logger.info("Fetching fresh leagues data from official PoE API")
    try:
        resp = await client.get(settings.leagues_url)
    except httpx.HTTPError as e:
        logger.error("Failed to fetch leagues from PoE API: %s", e)
        return FALLBACK_LEAGUES

    if not resp.is_success:
        logger.warning("PoE API returned non-success status: %s", resp.status_code)
        return FALLBACK_LEAGUES

    body = resp.text
    if not body.strip():
        logger.warning("PoE API returned empty response body")
        return FALLBACK_LEAGUES

    try:
        official = _official_leagues.validate_json(body)
    except ValidationError as e:
        logger.error("Failed to parse leagues response: %s. Body preview: %s", e, body[:200])
        return FALLBACK_LEAGUES

    result = LeaguesApiResponse(leagues=[to_league(lg) for lg in official if is_economy_league(lg)])
    await cached_set(cache, LEAGUES_KEY, result, settings.cache_ttl_minutes)

    logger.info("Successfully fetched and cached %d leagues", len(result.leagues))
    return result


async def get_skill_gems(
    client: httpx.AsyncClient, cache: DiskCache, settings: Settings, league: str = DEFAULT_LEAGUE
) -> SkillGemResponse:
    """poe.ninja skill gem overview for a league."""
    key = skill_gems_key(league)
    cached = await cached_get(cache, key, SkillGemResponse)
    if cached is not None:
        logger.info("Returning cached skill gems data for league: %s", league)
        return cached

    logger.info("Fetching fresh skill gems data for league: %s", league)
    params = {"league": league, "type": "SkillGem", "language": "en"}
    try:
        resp = await client.get(settings.poe_ninja_url, params=params)
    except httpx.HTTPError as e:
        logger.error("Failed to fetch skill gems from poe.ninja: %s", e)
        raise UpstreamUnavailableError("poe.ninja", str(e)) from e

    if not resp.is_success:
        logger.error("poe.ninja returned error status: %s", resp.status_code)
        raise UpstreamError("poe.ninja", f"HTTP {resp.status_code}")

    try:
        result = SkillGemResponse.model_validate_json(resp.content)
    except ValidationError as e:
        logger.error("Failed to parse skill gems response: %s", e)
        raise UpstreamError("poe.ninja", "unparsable skill gem listing") from e

    await cached_set(cache, key, result, settings.cache_ttl_minutes)

    logger.info("Successfully fetched and cached %d skill gems for league: %s", len(result.lines), league)
    return result


async def get_gem_colors(
    client: httpx.AsyncClient, cache: DiskCache, settings: Settings, league: str = DEFAULT_LEAGUE
) -> GemColorsResponse:
    """Transfigured gem names by colour, derived from the skill gem listing."""
    key = gem_colors_key(league)
    cached = await cached_get(cache, key, GemColorsResponse)
    if cached is not None:
        return cached

    gems = await get_skill_gems(client, cache, settings, league)
    result = classify_gems(gems.lines)
    await cached_set(cache, key, result, settings.gem_colors_ttl_minutes)
    return result
