"""
Liquid colors.

``Color`` names the fourteen liquids of the bundled levels. The engine itself
only sees integer tags: ``0`` is the reserved empty slot and any value in
``1..MAX_COLOR`` is a liquid, so larger palettes need no code change.
"""

from enum import IntEnum

from watersort.utils.util import hex_to_rgb

EMPTY = 0
MAX_COLOR = 255


class Color(IntEnum):
    EMPTY = 0
    BLUE = 1
    RED = 2
    GRAY = 3
    ORANGE = 4
    BROWN = 5
    YELLOW = 6
    GREEN = 7
    MAGENTA = 8
    LIME = 9
    TEAL = 10
    PURPLE = 11
    LIGHTBLUE = 12
    PEACH = 13
    OLIVE = 14

    def __str__(self) -> str:
        return self.name.capitalize()


COLOR_HEX = {
    Color.EMPTY: "#FFFFFF",
    Color.BLUE: "#000080",
    Color.RED: "#FB0606",
    Color.GRAY: "#808080",
    Color.ORANGE: "#F08000",
    Color.BROWN: "#7B2525",
    Color.YELLOW: "#F0F000",
    Color.GREEN: "#008000",
    Color.MAGENTA: "#7F1894",
    Color.LIME: "#7AA402",
    Color.TEAL: "#55B08D",
    Color.PURPLE: "#AB64D4",
    Color.LIGHTBLUE: "#2688AB",
    Color.PEACH: "#CB9486",
    Color.OLIVE: "#194E24",
}

# Tags outside the named palette render in a neutral gray.
_FALLBACK_RGB = (160, 160, 160)


def color_rgb(tag: int) -> tuple[int, int, int]:
    """Return the display color for a color tag."""
    try:
        return hex_to_rgb(COLOR_HEX[Color(tag)])
    except ValueError:
        return _FALLBACK_RGB


def color_label(tag: int) -> str:
    """Return a one-character label for a color tag (``.`` for empty)."""
    if tag == EMPTY:
        return "."
    try:
        return Color(tag).name[0]
    except ValueError:
        return "?"


def parse_color(value) -> int:
    """Convert a color name or integer tag into a liquid tag.

    Names are matched case-insensitively against :class:`Color`.

    Raises:
        ValueError: If the value names no color, is the empty tag, or is outside
            ``1..MAX_COLOR``.
    """
    if isinstance(value, str):
        key = value.strip().upper()
        if key not in Color.__members__:
            raise ValueError(f"Unknown color name {value!r}")
        tag = int(Color[key])
    elif isinstance(value, bool):
        raise ValueError(f"Invalid color tag {value!r}")
    else:
        try:
            tag = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid color tag {value!r}") from exc
        if tag != value:
            raise ValueError(f"Invalid color tag {value!r}")

    if tag == EMPTY:
        raise ValueError("The empty tag cannot be used as a liquid color")
    if not 0 < tag <= MAX_COLOR:
        raise ValueError(f"Color tag {tag} is outside 1..{MAX_COLOR}")
    return tag
