"""
Utility functions and constants for watersort.

This module provides the color palette and terminal coloring helpers shared by
the environment, the interactive game and the command line.
"""

from watersort.utils.palette import (
    EMPTY,
    MAX_COLOR,
    Color,
    color_label,
    color_rgb,
    parse_color,
)
from watersort.utils.util import coloring_bg_str, hex_to_rgb

__all__ = [
    "EMPTY",
    "MAX_COLOR",
    "Color",
    "color_label",
    "color_rgb",
    "parse_color",
    "coloring_bg_str",
    "hex_to_rgb",
]
