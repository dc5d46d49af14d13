"""Shared fixtures: fake clock, temp cache, canned poe.ninja payloads, mock upstream."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# app.py builds a module-level app (and its cache dir) on import
os.environ.setdefault("CACHE_DIR", tempfile.mkdtemp(prefix="poe-gem-cache-"))

import httpx
import pytest

from config import Settings
from services.cache import DiskCache

ICON_BASE = "https://web.poecdn.com/gen/image"
RED_ICON = f"{ICON_BASE}/WzMwLDE0LHsiZiI6IjJESXRlbXMvR2Vtcy9Nb2x0ZW5TdHJpa2UiLCJ3IjoxLCJoIjoxLCJzY2FsZSI6MSwiZ2QiOjV9XQ/b3e2ef9d6c/MoltenStrike.png"
GREEN_ICON = f"{ICON_BASE}/WzMwLDE0LHsiZiI6IjJESXRlbXMvR2Vtcy9WaXBlclN0cmlrZSIsInciOjEsImgiOjEsInNjYWxlIjoxLCJnZCI6OX1d/8b37a8f02e/ViperStrike.png"
BLUE_ICON = f"{ICON_BASE}/WzMwLDE0LHsiZiI6IjJESXRlbXMvR2Vtcy9TcGFyayIsInciOjEsImgiOjEsInNjYWxlIjoxLCJnZCI6MTR9XQ/c9038eb883/Spark.png"
SUPPORT_ICON = f"{ICON_BASE}/WzI1LDE0LHsiZiI6IjJESXRlbXMvR2Vtcy9TdXBwb3J0L1N1cHBvcnRQbHVzL0luY3JlYXNlZEFPRVBsdXMiLCJ3IjoxLCJoIjoxLCJzY2FsZSI6MX1d/360e9e4ed5/IncreasedAOEPlus.png"


class FakeClock:
    """Callable clock for DiskCache that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock) -> DiskCache:
    return DiskCache(tmp_path / "cache", clock=clock)


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings()
    s.cache_dir = str(tmp_path / "cache")
    s.leagues_url = "https://api.test/leagues"
    s.poe_ninja_url = "https://ninja.test/api/data/itemoverview"
    return s


def gem_line(
    name: str,
    chaos: float | None,
    icon: str | None = RED_ICON,
    level: int | None = None,
    quality: int | None = None,
    corrupted: bool | None = None,
    tradable: bool = True,
) -> dict:
    """One poe.ninja itemoverview line, camelCase like the real API."""
    line = {"id": len(name), "name": name, "chaosValue": chaos, "icon": icon, "listingCount": 12}
    if level is not None:
        line["gemLevel"] = level
    if quality is not None:
        line["gemQuality"] = quality
    if corrupted is not None:
        line["corrupted"] = corrupted
    if tradable:
        line["tradeFilter"] = {"query": {"type": name}}
    return line


@pytest.fixture
def icons() -> dict:
    return {"red": RED_ICON, "green": GREEN_ICON, "blue": BLUE_ICON, "support": SUPPORT_ICON}


@pytest.fixture
def make_gem():
    return gem_line


@pytest.fixture
def skill_gem_payload() -> dict:
    return {
        "lines": [
            gem_line("Molten Strike of the Zenith", 120.0, RED_ICON),
            gem_line("Cleave of Rage", 40.0, RED_ICON),
            gem_line("Sunder of Earthbreaking", 8.0, RED_ICON),
            gem_line("Boneshatter of Carnage", 2.0, RED_ICON),
            gem_line("Molten Strike", 1.0, RED_ICON),
            gem_line("Viper Strike of the Mamba", 15.0, GREEN_ICON),
            gem_line("Split Arrow of Splitting", 3.0, GREEN_ICON),
            gem_line("Spark of Unpredictability", 60.0, BLUE_ICON),
            gem_line("Spark of the Nova", 30.0, BLUE_ICON),
            gem_line("Arc of Surging", 20.0, BLUE_ICON),
            gem_line("Awakened Increased Area of Effect Support", 500.0, SUPPORT_ICON),
        ],
        "currencyDetails": [{"id": 1, "name": "Chaos Orb", "tradeId": "chaos"}],
    }


@pytest.fixture
def official_leagues_payload() -> list:
    return [
        {"id": "Standard", "realm": "pc"},
        {"id": "Hardcore", "realm": "pc", "rules": [{"id": "Hardcore", "name": "Hardcore"}]},
        {"id": "SSF Standard", "realm": "pc", "rules": [{"id": "NoParties", "name": "Solo"}]},
        {"id": "Ruthless", "realm": "pc"},
        {"id": "Settlers", "realm": "pc", "endAt": "2026-12-01T20:00:00Z"},
        {
            "id": "Hardcore Settlers",
            "realm": "pc",
            "endAt": "2026-12-01T20:00:00Z",
            "rules": [{"id": "Hardcore", "name": "Hardcore"}],
        },
    ]


class Upstream:
    """Routes requests to canned responses and counts upstream calls per host."""

    def __init__(self):
        self.responses: dict[str, tuple[int, dict] | Exception] = {}
        self.calls: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] = self.calls.get(host, 0) + 1
        self.requests.append(request)
        response = self.responses.get(host)
        if response is None:
            return httpx.Response(404, text="no canned response")
        if isinstance(response, Exception):
            raise response
        status, kwargs = response
        return httpx.Response(status, **kwargs)

    def respond(self, host: str, status: int = 200, **kwargs) -> None:
        self.responses[host] = (status, kwargs)

    def fail(self, host: str, exc: Exception) -> None:
        self.responses[host] = exc

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def upstream(official_leagues_payload, skill_gem_payload) -> Upstream:
    up = Upstream()
    up.respond("api.test", json=official_leagues_payload)
    up.respond("ninja.test", json=skill_gem_payload)
    return up
