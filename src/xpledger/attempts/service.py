"""Attempt tracker: per-(user, problem) attempt state and solve awards."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.attempts.schemas import AttemptResult
from xpledger.database import atomic
from xpledger.db.models import Problem, User, UserAttempt
from xpledger.db.upsert import insert_ignore_conflict
from xpledger.errors import FinalizedProblemError
from xpledger.ledger.service import adjust_xp_by_user_id, get_or_create_user
from xpledger.problems.service import (
    backfill_original_base_score,
    compute_weighted_solves,
    get_or_create_problem,
)
from xpledger.problems.source import BaseProblemSource
from xpledger.scoring.decay import award_for, dynamic_base_score

logger = logging.getLogger(__name__)


async def get_or_create_user_attempt(db: AsyncSession, user: User, problem: Problem) -> UserAttempt:
    """Get or create the attempt row for a (user, problem) pair, locked."""
    stmt = (
        select(UserAttempt)
        .where(UserAttempt.user_id == user.id, UserAttempt.problem_id == problem.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    attempt = (await db.execute(stmt)).scalar_one_or_none()
    if attempt is None:
        await insert_ignore_conflict(
            db,
            UserAttempt,
            ["user_id", "problem_id"],
            user_id=user.id,
            problem_id=problem.id,
            attempts=0,
            solved=False,
            awarded_xp=0,
            finalize_delta=0,
        )
        attempt = (await db.execute(stmt)).scalar_one()
    return attempt


async def record_attempt(
    db: AsyncSession,
    source: BaseProblemSource,
    user_external_id: str,
    problem_number: str,
    is_correct: bool,
) -> AttemptResult:
    """Record one reviewed attempt and award XP on a first-time solve.

    Steps:
    1. Resolve or create the problem (row-locked), rejecting finalized ones
    2. Backfill the original base score on legacy rows
    3. Bump the user's attempt count and latch ``solved``
    4. Bump problem counters, counting a solve only once per user
    5. Recompute weighted solves and the dynamic base score from scratch
    6. On a first-time solve, credit floor(original * weight) to the ledger

    Raises:
        FinalizedProblemError: If the problem is finalized.
        ExternalSourceError: If a needed base score lookup fails.
        ValidationError: If the user id or problem number is malformed.
    """
    async with atomic(db):
        problem = await get_or_create_problem(db, source, problem_number)
        if problem.is_finalized:
            msg = f"Problem #{problem.number} is finalized. Unfinalize it before recording new attempts."
            raise FinalizedProblemError(msg)

        problem = await backfill_original_base_score(db, source, problem)

        user = await get_or_create_user(db, user_external_id)
        attempt = await get_or_create_user_attempt(db, user, problem)

        previously_solved = attempt.solved
        attempt.attempts += 1
        attempt.solved = previously_solved or is_correct
        newly_solved = is_correct and not previously_solved

        problem.attempts += 1
        if newly_solved:
            problem.solves += 1
        await db.flush()

        weighted = await compute_weighted_solves(db, problem.id)
        problem.base_score = dynamic_base_score(weighted)
        problem.updated_at = datetime.now(timezone.utc)
        await db.flush()

        awarded = 0
        user_xp = user.xp
        if newly_solved:
            base_for_award = problem.original_base_score if problem.original_base_score > 0 else problem.base_score
            awarded = award_for(base_for_award, attempt.attempts)
            attempt.awarded_xp = awarded
            user_xp = await adjust_xp_by_user_id(
                db,
                user.id,
                awarded,
                source="solve",
                source_id=problem.number,
                description=f"Solved problem #{problem.number} on attempt {attempt.attempts}",
            )
            await db.flush()

        result = AttemptResult(
            awarded_xp=awarded,
            user_xp=user_xp,
            attempt_number=attempt.attempts,
            total_problem_attempts=problem.attempts,
            total_problem_solves=problem.solves,
            weighted_solves=weighted,
            original_base_score=problem.original_base_score,
            current_base_score=problem.base_score,
        )

    logger.info(
        "Recorded %s attempt #%d by %s on problem #%s (+%d XP, base now %d)",
        "correct" if is_correct else "wrong",
        result.attempt_number,
        user.external_id,
        problem.number,
        result.awarded_xp,
        result.current_base_score,
    )
    return result
