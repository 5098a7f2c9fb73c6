"""
Level definitions.

A level is the initialisation script of a game: the bottles' contents from
bottom to top, stored as JSON::

    {"name": "classic", "bottles": [["red", "red", "orange", "blue"], [], ...]}

Colors are given by name (case-insensitive) or by integer tag.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any

from watersort.errors import ConfigurationError
from watersort.game.session import WaterSorting
from watersort.puzzles.watersort import CAPACITY
from watersort.utils.palette import parse_color

logger = logging.getLogger(__name__)

DATA_PACKAGE = "watersort.levels"
DATA_DIR = "data"

__all__ = ["Level", "available_levels", "load_level", "parse_level"]


@dataclass(frozen=True)
class Level:
    """Bottle contents of a level, bottom to top, as color tags."""

    name: str
    bottles: tuple[tuple[int, ...], ...]
    description: str = ""

    def apply(self, game: WaterSorting) -> WaterSorting:
        """Append this level's bottles to ``game`` and return it."""
        for colors in self.bottles:
            game.init_bottle(*colors)
        return game

    def new_game(self) -> WaterSorting:
        return self.apply(WaterSorting())


def parse_level(data: dict[str, Any], name: str = "level") -> Level:
    """Build a :class:`Level` from decoded JSON.

    Raises:
        ConfigurationError: If the structure, a bottle size or a color is invalid.
    """
    if not isinstance(data, dict) or "bottles" not in data:
        raise ConfigurationError(f"Level {name!r} must be an object with a 'bottles' list")
    raw_bottles = data["bottles"]
    if not isinstance(raw_bottles, list):
        raise ConfigurationError(f"Level {name!r}: 'bottles' must be a list")

    name = str(data.get("name", name))
    bottles = []
    for index, raw in enumerate(raw_bottles):
        if not isinstance(raw, list):
            raise ConfigurationError(f"Level {name!r}, bottle {index}: expected a list of colors")
        if len(raw) > CAPACITY:
            raise ConfigurationError(
                f"Level {name!r}, bottle {index}: holds {len(raw)} units, at most {CAPACITY} fit"
            )
        try:
            bottles.append(tuple(parse_color(color) for color in raw))
        except ValueError as exc:
            raise ConfigurationError(f"Level {name!r}, bottle {index}: {exc}") from exc

    counts = Counter(color for bottle in bottles for color in bottle)
    uneven = sorted(color for color, count in counts.items() if count % CAPACITY)
    if uneven:
        logger.warning(
            "Level %r cannot be won: colors %s do not fill whole bottles", name, uneven
        )

    return Level(name=name, bottles=tuple(bottles), description=str(data.get("description", "")))


def available_levels() -> list[str]:
    """Names of the bundled levels."""
    resource = files(DATA_PACKAGE) / DATA_DIR
    return sorted(
        entry.name[: -len(".json")]
        for entry in resource.iterdir()
        if entry.name.endswith(".json")
    )


def load_level(name_or_path: str | Path) -> Level:
    """Load a bundled level by name, or any level file by path.

    Raises:
        FileNotFoundError: If neither a bundled level nor a file matches.
        ConfigurationError: If the file content is not a valid level.
    """
    path = Path(name_or_path).expanduser()
    if path.is_file():
        text = path.read_text(encoding="utf-8")
        default_name = path.stem
    else:
        resource = files(DATA_PACKAGE) / DATA_DIR / f"{name_or_path}.json"
        if not resource.is_file():
            available = ", ".join(available_levels())
            raise FileNotFoundError(
                f"No level file at {path} and no bundled level {str(name_or_path)!r} "
                f"(available: {available})"
            )
        text = resource.read_text(encoding="utf-8")
        default_name = str(name_or_path)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Level {default_name!r} is not valid JSON: {exc}") from exc
    return parse_level(data, name=default_name)
