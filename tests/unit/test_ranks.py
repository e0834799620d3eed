"""Rank computation tests. Values MUST match the bot's /xp profile."""

import pytest

from xpledger.scoring.ranks import (
    BAR_EMPTY,
    BAR_FILLED,
    RANK_THRESHOLDS,
    get_rank_and_progress,
    progress_bar,
)


class TestRankThresholds:
    """Rank table MUST match the ranks shown by the bot."""

    def test_nine_ranks(self):
        assert len(RANK_THRESHOLDS) == 9

    def test_thresholds_ascending(self):
        thresholds = [t["threshold"] for t in RANK_THRESHOLDS]
        assert thresholds == sorted(thresholds)
        assert thresholds[0] == 0

    @pytest.mark.parametrize(
        ("xp", "rank"),
        [
            (0, "Unranked"),
            (100, "Unranked"),
            (101, "Bronze"),
            (200, "Bronze"),
            (201, "Silver"),
            (350, "Silver"),
            (351, "Gold"),
            (500, "Gold"),
            (501, "Platinum"),
            (750, "Platinum"),
            (751, "Diamond"),
            (950, "Diamond"),
            (951, "Ascendant"),
            (1200, "Ascendant"),
            (1201, "Immortal"),
            (1500, "Immortal"),
            (1501, "Radiant"),
            (99_999, "Radiant"),
        ],
    )
    def test_rank_boundaries(self, xp, rank):
        assert get_rank_and_progress(xp)["rank"] == rank


class TestRankProgress:
    """Progress toward the next rank."""

    def test_zero_xp(self):
        result = get_rank_and_progress(0)
        assert result["next_threshold"] == 101
        assert result["progress_percent"] == 0
        assert result["progress_to_next"] == "0 / 101 XP (101 remaining)"
        assert result["next_milestone"] == "Bronze at 101 XP"

    def test_halfway_through_bronze(self):
        result = get_rank_and_progress(151)
        assert result["next_threshold"] == 201
        assert result["progress_percent"] == 50
        assert result["level_progress"] == " ".join([BAR_FILLED] * 5 + [BAR_EMPTY] * 5) + " 50%"
        assert result["next_milestone"] == "Silver at 201 XP"

    def test_percent_is_floored(self):
        result = get_rank_and_progress(1500)
        assert result["rank"] == "Immortal"
        assert result["progress_percent"] == 99

    def test_top_rank_rolls_forward(self):
        """Past Radiant the target is always 100 XP ahead."""
        result = get_rank_and_progress(1501)
        assert result["next_threshold"] == 1601
        assert result["progress_percent"] == 0
        assert result["next_milestone"] == "Max at 1601 XP"

        result = get_rank_and_progress(2000)
        assert result["next_threshold"] == 2100
        assert result["progress_percent"] == 83
        assert result["progress_to_next"] == "2000 / 2100 XP (100 remaining)"

    def test_result_shape(self):
        result = get_rank_and_progress(42)
        assert set(result) == {
            "rank",
            "xp",
            "next_threshold",
            "progress_percent",
            "progress_to_next",
            "level_progress",
            "next_milestone",
        }
        assert result["xp"] == 42


class TestProgressBar:
    """Ten-square progress bar rendering."""

    def test_ten_squares(self):
        assert len(progress_bar(0).split(" ")) == 10

    def test_empty_and_full(self):
        assert progress_bar(0) == " ".join([BAR_EMPTY] * 10)
        assert progress_bar(100) == " ".join([BAR_FILLED] * 10)

    def test_partial_squares_round_down(self):
        assert progress_bar(39).count(BAR_FILLED) == 3
