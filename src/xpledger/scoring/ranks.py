"""Rank thresholds and progress computation.

These values MUST match the ranks shown by the chat bot's /xp profile.
"""

from __future__ import annotations

import math

RANK_THRESHOLDS: list[dict] = [
    {"threshold": 0, "rank": "Unranked"},
    {"threshold": 101, "rank": "Bronze"},
    {"threshold": 201, "rank": "Silver"},
    {"threshold": 351, "rank": "Gold"},
    {"threshold": 501, "rank": "Platinum"},
    {"threshold": 751, "rank": "Diamond"},
    {"threshold": 951, "rank": "Ascendant"},
    {"threshold": 1201, "rank": "Immortal"},
    {"threshold": 1501, "rank": "Radiant"},
]

# Past the top rank the bar keeps moving toward a rolling target.
MAX_RANK_STEP = 100

BAR_SQUARES = 10
BAR_FILLED = "\U0001f7e6"
BAR_EMPTY = "⬜"


def progress_bar(percent: int) -> str:
    """Ten squares, one filled per 10% of progress."""
    filled = max(0, min(BAR_SQUARES, percent // 10))
    return " ".join(BAR_FILLED if i < filled else BAR_EMPTY for i in range(BAR_SQUARES))


def get_rank_and_progress(xp: int) -> dict:
    """Compute rank info from total XP."""
    current = RANK_THRESHOLDS[0]
    next_threshold = RANK_THRESHOLDS[1]["threshold"]
    next_rank = RANK_THRESHOLDS[1]["rank"]

    for i in range(len(RANK_THRESHOLDS) - 1):
        if RANK_THRESHOLDS[i]["threshold"] <= xp < RANK_THRESHOLDS[i + 1]["threshold"]:
            current = RANK_THRESHOLDS[i]
            next_threshold = RANK_THRESHOLDS[i + 1]["threshold"]
            next_rank = RANK_THRESHOLDS[i + 1]["rank"]
            break

    if xp >= RANK_THRESHOLDS[-1]["threshold"]:
        current = RANK_THRESHOLDS[-1]
        next_threshold = xp + MAX_RANK_STEP
        next_rank = "Max"

    base = current["threshold"]
    percent = math.floor((xp - base) / (next_threshold - base) * 100)

    return {
        "rank": current["rank"],
        "xp": xp,
        "next_threshold": next_threshold,
        "progress_percent": percent,
        "progress_to_next": f"{xp} / {next_threshold} XP ({next_threshold - xp} remaining)",
        "level_progress": f"{progress_bar(percent)} {percent}%",
        "next_milestone": f"{next_rank} at {next_threshold} XP",
    }
