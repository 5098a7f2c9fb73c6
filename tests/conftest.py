import pytest

from watersort import Color, WaterSorting

R, B = Color.RED, Color.BLUE


def _make_game(*bottles) -> WaterSorting:
    game = WaterSorting()
    for colors in bottles:
        game.init_bottle(*colors)
    return game


@pytest.fixture
def make_game():
    """Factory building a game from bottle lists given bottom to top."""
    return _make_game


@pytest.fixture
def two_color_game():
    """Solvable in exactly three pours: 0->2, 1->0, 1->2."""
    return _make_game([R, R, B, B], [B, B, R, R], [])


@pytest.fixture
def striped_game():
    """Alternating stripes with two spare bottles; needs a longer solution."""
    return _make_game([R, B, R, B], [B, R, B, R], [], [])
