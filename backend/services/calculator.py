"""Expected value of a transfigured-gem roll, per gem colour.

A roll shows three distinct random transfigured gems of the chosen colour and
you keep the most valuable one. With n gems sorted by value (rank 1 = best),
the best of three is rank i with probability C(n-i, 2) / C(n, 3); the two
cheapest gems can never be the best of three.
"""

import logging
from math import comb

import pandas as pd

from models import CalculationResponse, GemValue, SkillGem
from services.gem_colors import GemColor, color_from_icon_url, is_transfigured_gem

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_AFTER_CHAOS = 5.0
MAX_UNCORRUPTED = 20


def pick_probabilities(n: int) -> list[float]:
    """Probability that rank 1..n-2 is the best of three picks. Empty if n < 3."""
    if n < 3:
        return []
    total = comb(n, 3)
    return [comb(n - rank, 2) / total for rank in range(1, n - 1)]


def expected_value(values: list[float], ignore_below: float = DEFAULT_IGNORE_AFTER_CHAOS) -> float:
    """EV of the best-of-three pick. `values` must be sorted descending.

    Gems worth less than `ignore_below` chaos count as worthless.
    """
    probabilities = pick_probabilities(len(values))
    return sum(
        p * (value if value >= ignore_below else 0.0)
        for p, value in zip(probabilities, values)
    )


def gems_frame(lines: list[SkillGem]) -> pd.DataFrame:
    """Flatten poe.ninja lines into a frame of the columns the filters need."""
    rows = [
        {
            "name": gem.name,
            "chaos_value": gem.chaos_value if gem.chaos_value is not None else 0.0,
            "gem_level": gem.gem_level if gem.gem_level is not None else 1,
            "gem_quality": gem.gem_quality if gem.gem_quality is not None else 0,
            "corrupted": bool(gem.corrupted),
            "tradable": gem.trade_filter is not None,
            "color": color_from_icon_url(gem.icon) if is_transfigured_gem(gem.name) else None,
        }
        for gem in lines
    ]
    columns = ["name", "chaos_value", "gem_level", "gem_quality", "corrupted", "tradable", "color"]
    return pd.DataFrame(rows, columns=columns)


def filter_gems(df: pd.DataFrame, gem_level: int, gem_quality: int) -> pd.DataFrame:
    """Keep tradable, coloured listings matching the requested level/quality.

    Anything above level or quality 20 only exists corrupted; at or below it,
    corrupted listings are excluded.
    """
    if df.empty:
        return df
    needs_corruption = gem_level > MAX_UNCORRUPTED or gem_quality > MAX_UNCORRUPTED
    mask = (
        df["tradable"]
        & df["color"].notna()
        & (df["gem_level"] == gem_level)
        & (df["gem_quality"] == gem_quality)
        & (df["corrupted"] == needs_corruption)
    )
    return df[mask]


def _gem_values(group: pd.DataFrame) -> list[GemValue]:
    probabilities = pick_probabilities(len(group))
    return [
        GemValue(name=name, chaos_value=float(value), probability=p)
        for (name, value), p in zip(group[["name", "chaos_value"]].itertuples(index=False), probabilities)
    ]


def calculate(
    lines: list[SkillGem],
    ignore_after_chaos: float = DEFAULT_IGNORE_AFTER_CHAOS,
    gem_level: int = 1,
    gem_quality: int = 0,
) -> CalculationResponse:
    """Per-colour EV and per-gem pick probabilities for one league listing."""
    df = filter_gems(gems_frame(lines), gem_level, gem_quality)
    df = df.sort_values("chaos_value", ascending=False, kind="stable")

    result: dict = {}
    for color in GemColor:
        group = df[df["color"] == color]
        values = [float(v) for v in group["chaos_value"]]
        result[f"{color.value}_roi"] = expected_value(values, ignore_after_chaos)
        result[f"{color.value}_gems"] = _gem_values(group)

    logger.info(
        "ROI calculation complete - Red: %.2f, Green: %.2f, Blue: %.2f",
        result["red_roi"], result["green_roi"], result["blue_roi"],
    )
    return CalculationResponse(**result)
