def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Convert a ``#RRGGBB`` string into an ``(r, g, b)`` tuple."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a #RRGGBB color, got {value!r}")
    return tuple(int(value[i : i + 2], 16) for i in (0, 2, 4))


def coloring_bg_str(string: str, color: tuple[int, int, int]) -> str:
    r, g, b = color
    return f"\x1b[48;2;{r};{g};{b}m{string}\x1b[0m"
