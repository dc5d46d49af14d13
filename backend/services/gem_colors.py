"""Gem colour classification from poe.ninja icon URLs.

Icon URLs look like:
    https://web.poecdn.com/gen/image/<base64 json>/<hash>/<name>.png

The base64 segment decodes to e.g. [30,14,{"f":"...","gd":5}] where `gd`
(gem display) encodes the socket colour.
"""

import base64
import binascii
import json
import logging
from enum import Enum

from models import GemColorsResponse, SkillGem

logger = logging.getLogger(__name__)


class GemColor(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


GD_COLORS = {
    5: GemColor.RED,
    6: GemColor.RED,
    9: GemColor.GREEN,
    10: GemColor.GREEN,
    13: GemColor.BLUE,
    14: GemColor.BLUE,
}


def color_from_icon_url(icon_url: str | None) -> GemColor | None:
    """Decode the `gd` value from an icon URL. None if absent or undecodable."""
    if not icon_url or "/image/" not in icon_url:
        return None

    encoded = icon_url.split("/image/", 1)[1].split("/", 1)[0]
    # URLs drop the base64 padding
    encoded += "=" * (-len(encoded) % 4)
    try:
        decoded = json.loads(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError):
        return None

    if not isinstance(decoded, list):
        return None
    for part in decoded:
        if isinstance(part, dict) and isinstance(part.get("gd"), int):
            return GD_COLORS.get(part["gd"])
    return None


def is_transfigured_gem(gem_name: str) -> bool:
    """Transfigured gems are named '<base> of <variant>'."""
    return " of " in gem_name


def classify_gems(lines: list[SkillGem]) -> GemColorsResponse:
    """Group transfigured gem names by colour; each name listed once."""
    colors: dict[GemColor, list[str]] = {color: [] for color in GemColor}
    seen: set[str] = set()
    for gem in lines:
        if gem.name in seen or not is_transfigured_gem(gem.name):
            continue
        color = color_from_icon_url(gem.icon)
        if color is None:
            continue
        seen.add(gem.name)
        colors[color].append(gem.name)

    logger.debug(
        "Classified transfigured gems: %d red, %d green, %d blue",
        len(colors[GemColor.RED]), len(colors[GemColor.GREEN]), len(colors[GemColor.BLUE]),
    )
    return GemColorsResponse(
        red=sorted(colors[GemColor.RED]),
        green=sorted(colors[GemColor.GREEN]),
        blue=sorted(colors[GemColor.BLUE]),
    )
