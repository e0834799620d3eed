"""Attempt decay and dynamic base score.

A solve on attempt ``n`` is worth ``0.8 ** (n - 1)`` of the base score,
bottoming out after five wrong attempts. The base score itself follows a
two-exponential curve fitted against weighted solves: high while few users
have solved, settling at ``MIN_DYNAMIC_BASE_SCORE``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

SCORE_DECAY = 0.8
MAX_WRONG_ATTEMPTS = 5
MIN_DYNAMIC_BASE_SCORE = 25

CURVE_A1 = 8.90125
CURVE_a1 = -0.0279323  # noqa: N816
CURVE_B1 = 24.6239
CURVE_b1 = -0.402639  # noqa: N816


def wrong_attempts(attempts: int) -> int:
    """Number of penalised attempts before the solve, clamped to [0, 5]."""
    return max(0, min(MAX_WRONG_ATTEMPTS, attempts - 1))


def solve_weight(attempts: int) -> float:
    """Fraction of the base score earned by a solve on this attempt."""
    return SCORE_DECAY ** wrong_attempts(attempts)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def dynamic_base_score(weighted_solves: float) -> int:
    """Base score for a problem given its weighted solve total."""
    curved = CURVE_A1 * math.exp(CURVE_a1 * weighted_solves) + CURVE_B1 * math.exp(
        CURVE_b1 * weighted_solves
    )
    return max(MIN_DYNAMIC_BASE_SCORE, round_half_up(curved))


def weighted_solves(attempt_counts: Iterable[int]) -> float:
    """Sum of solve weights over the attempt counts of every solver."""
    return sum((solve_weight(attempts) for attempts in attempt_counts), 0.0)


def award_for(base_score: int, attempts: int) -> int:
    """XP for a solve on ``attempts`` against ``base_score``, floored per user."""
    return math.floor(base_score * solve_weight(attempts))
