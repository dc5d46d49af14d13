"""Pydantic models for upstream payloads and API responses.

Field aliases follow the camelCase names used by poe.ninja and the official
Path of Exile API, so cached payloads round-trip unchanged.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class League(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: str | None = Field(None, alias="displayName")
    hardcore: bool = False
    indexed: bool = True


class LeagueRule(BaseModel):
    id: str
    name: str | None = None


class OfficialLeague(BaseModel):
    """One league as returned by api.pathofexile.com/leagues."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    realm: str | None = None
    end_at: str | None = Field(None, alias="endAt")
    rules: list[LeagueRule] | None = None


class LeaguesApiResponse(BaseModel):
    leagues: list[League]


class SkillGem(BaseModel):
    """One poe.ninja itemoverview line. Fields we don't use are kept as extras."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | None = None
    name: str
    chaos_value: float | None = Field(None, alias="chaosValue")
    divine_value: float | None = Field(None, alias="divineValue")
    gem_level: int | None = Field(None, alias="gemLevel")
    gem_quality: int | None = Field(None, alias="gemQuality")
    corrupted: bool | None = None
    icon: str | None = None
    details_id: str | None = Field(None, alias="detailsId")
    trade_filter: Any | None = Field(None, alias="tradeFilter")
    listing_count: int | None = Field(None, alias="listingCount")


class SkillGemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    lines: list[SkillGem]
    currency_details: list[dict[str, Any]] | None = Field(None, alias="currencyDetails")


class GemColorsResponse(BaseModel):
    red: list[str] = []
    green: list[str] = []
    blue: list[str] = []


class GemValue(BaseModel):
    name: str
    chaos_value: float
    probability: float


class CalculationResponse(BaseModel):
    red_roi: float
    green_roi: float
    blue_roi: float
    red_gems: list[GemValue]
    green_gems: list[GemValue]
    blue_gems: list[GemValue]
