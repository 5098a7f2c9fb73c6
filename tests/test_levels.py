"""Tests for bundled and file-based levels."""

import json
import logging
from collections import Counter

import pytest

from watersort import (
    CAPACITY,
    Color,
    ConfigurationError,
    WaterSorting,
    available_levels,
    load_level,
    replay,
    solve,
)
from watersort.levels import parse_level


class TestBundledLevels:
    """The levels shipped with the package."""

    def test_available(self):
        names = available_levels()
        assert "classic" in names
        assert "terminal" in names

    @pytest.mark.parametrize("name, bottles", [("classic", 7), ("terminal", 9)])
    def test_load_and_apply(self, name, bottles):
        level = load_level(name)
        assert level.name == name
        game = level.new_game()
        assert game.bottle_count() == bottles
        assert not game.win()

    @pytest.mark.parametrize("name", ["classic", "terminal"])
    def test_colors_fill_whole_bottles(self, name):
        level = load_level(name)
        counts = Counter(color for bottle in level.bottles for color in bottle)
        assert counts
        assert all(count == CAPACITY for count in counts.values())
        assert all(len(bottle) <= CAPACITY for bottle in level.bottles)

    @pytest.mark.parametrize("name", ["classic", "terminal"])
    def test_solvable_within_default_budget(self, name):
        game = load_level(name).new_game()
        result = solve(game, max_moves=20)
        assert result.solved
        assert len(result.solution) <= 20

        assert replay(game, result.solution) == len(result.solution)
        assert game.win()

    def test_apply_appends_to_existing_game(self):
        game = WaterSorting()
        game.init_empty_bottle()
        load_level("classic").apply(game)
        assert game.bottle_count() == 8

    def test_unknown_level(self):
        with pytest.raises(FileNotFoundError, match="classic"):
            load_level("no-such-level")


class TestLevelFiles:
    """Levels read from disk."""

    def write(self, tmp_path, data, name="custom.json"):
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        return path

    def test_load_from_path(self, tmp_path):
        path = self.write(tmp_path, {"bottles": [["red", "Blue", 2], [], [1]]})
        level = load_level(path)
        assert level.name == "custom"
        assert level.bottles == ((Color.RED, Color.BLUE, Color.RED), (), (Color.BLUE,))

    def test_name_and_description_from_file(self, tmp_path):
        path = self.write(
            tmp_path, {"name": "tiny", "description": "two bottles", "bottles": [[], []]}
        )
        level = load_level(str(path))
        assert level.name == "tiny"
        assert level.description == "two bottles"

    def test_invalid_json(self, tmp_path):
        path = self.write(tmp_path, "{not json")
        with pytest.raises(ConfigurationError, match="JSON"):
            load_level(path)

    @pytest.mark.parametrize(
        "data",
        [
            [["red"]],
            {"levels": []},
            {"bottles": "red"},
            {"bottles": ["red"]},
            {"bottles": [["red"] * 5]},
            {"bottles": [["violet"]]},
            {"bottles": [[0]]},
        ],
    )
    def test_invalid_content(self, data):
        with pytest.raises(ConfigurationError):
            parse_level(data)

    def test_uneven_colors_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="watersort.levels"):
            level = parse_level({"bottles": [["red", "red"], []]}, name="half")
        assert level.bottles == ((Color.RED, Color.RED), ())
        assert "cannot be won" in caplog.text
