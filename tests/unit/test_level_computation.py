"""Level curve tests."""

import pytest

from voidspace.progression.level_thresholds import (
    LEVEL_THRESHOLDS,
    LEVEL_TITLES,
    MAX_LEVEL,
    all_levels,
    get_level,
    title_for_level,
)


class TestLevelComputation:

    def test_level_1_at_zero_xp(self):
        result = get_level(0)
        assert result["level"] == 1
        assert result["current_xp"] == 0
        assert result["next_level_xp"] == 100
        assert result["progress"] == 0
        assert result["title"] == "Void Initiate"

    def test_level_2_at_100_xp(self):
        result = get_level(100)
        assert result["level"] == 2
        assert result["title"] == "Curious Coder"

    def test_level_boundary_99_xp(self):
        result = get_level(99)
        assert result["level"] == 1
        assert result["progress"] == pytest.approx(99.0)

    def test_current_xp_into_level(self):
        result = get_level(325)  # 75 into level 3 (250..500)
        assert result["level"] == 3
        assert result["current_xp"] == 75
        assert result["next_level_xp"] == 250
        assert result["progress"] == pytest.approx(30.0)

    def test_next_title(self):
        assert get_level(0)["next_title"] == "Curious Coder"

    def test_negative_xp_treated_as_zero(self):
        assert get_level(-50) == get_level(0)

    def test_max_level(self):
        result = get_level(25000)
        assert result["level"] == MAX_LEVEL == 15
        assert result["current_xp"] == 0
        assert result["next_level_xp"] == 4500
        assert result["progress"] == 100.0

    def test_beyond_max_level(self):
        result = get_level(10_000_000)
        assert result["level"] == MAX_LEVEL
        assert result["progress"] == 100.0
        assert result["title"] == "Mythic"
        assert result["next_title"] == "Mythic"


class TestTitles:

    def test_terminal_title_for_levels_past_table(self):
        for level in range(len(LEVEL_TITLES), MAX_LEVEL + 3):
            assert title_for_level(level) == "Mythic"

    def test_level_10(self):
        assert get_level(7500)["title"] == "Void Master"

    def test_level_11_is_mythic(self):
        assert get_level(10000)["title"] == "Mythic"


class TestCurveProperties:

    def test_monotonic_levels(self):
        previous = 0
        for xp in range(0, 30000, 37):
            level = get_level(xp)["level"]
            assert level >= previous
            previous = level

    def test_progress_bounds(self):
        for xp in list(range(0, 30000, 53)) + [25000, 24999, 10**9]:
            assert 0 <= get_level(xp)["progress"] <= 100

    def test_every_threshold_starts_its_level(self):
        for entry in LEVEL_THRESHOLDS:
            result = get_level(entry["cumulative"])
            assert result["level"] == entry["level"]
            assert result["current_xp"] == 0

    def test_all_levels_table(self):
        levels = all_levels()
        assert len(levels) == 15
        assert levels[0] == {"level": 1, "title": "Void Initiate", "xp_required": 0, "cumulative": 0}
        assert levels[1]["xp_required"] == 100
        assert levels[-1]["cumulative"] == 25000

    def test_all_levels_returns_copies(self):
        all_levels()[0]["title"] = "changed"
        assert LEVEL_THRESHOLDS[0]["title"] == "Void Initiate"
