"""Problem records: lazy creation, legacy backfill and aggregate queries."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.db.models import Problem, UserAttempt
from xpledger.db.upsert import insert_ignore_conflict
from xpledger.errors import NotFoundError, ValidationError
from xpledger.problems.source import BaseProblemSource
from xpledger.scoring.decay import weighted_solves

logger = logging.getLogger(__name__)

MAX_PROBLEM_NUMBER_LENGTH = 32


def validate_problem_number(problem_number: str) -> str:
    """Return the trimmed problem number or raise ValidationError."""
    cleaned = (problem_number or "").strip()
    if not cleaned or len(cleaned) > MAX_PROBLEM_NUMBER_LENGTH:
        msg = f"Invalid problem number: {problem_number!r}"
        raise ValidationError(msg)
    return cleaned


async def get_problem(db: AsyncSession, problem_number: str, *, lock: bool = False) -> Problem | None:
    """Fetch a problem by number, optionally taking its row lock."""
    stmt = select(Problem).where(Problem.number == problem_number)
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def require_problem(db: AsyncSession, problem_number: str, *, lock: bool = False) -> Problem:
    """Fetch a problem by number or raise NotFoundError."""
    problem = await get_problem(db, validate_problem_number(problem_number), lock=lock)
    if problem is None:
        msg = f"Problem #{problem_number} not found in database."
        raise NotFoundError(msg)
    return problem


async def get_or_create_problem(
    db: AsyncSession,
    source: BaseProblemSource,
    problem_number: str,
) -> Problem:
    """Resolve a problem under its row lock, creating it from the source if new."""
    problem_number = validate_problem_number(problem_number)
    problem = await get_problem(db, problem_number, lock=True)
    if problem is None:
        original = await source.fetch_original_base_score(problem_number)
        await insert_ignore_conflict(
            db,
            Problem,
            ["number"],
            number=problem_number,
            original_base_score=original,
            base_score=original,
            attempts=0,
            solves=0,
            is_finalized=False,
        )
        problem = await get_problem(db, problem_number, lock=True)
        logger.info("Created problem #%s with base score %d", problem_number, problem.original_base_score)
    return problem


async def backfill_original_base_score(
    db: AsyncSession,
    source: BaseProblemSource,
    problem: Problem,
) -> Problem:
    """Fill in original_base_score for rows created before it was tracked."""
    if problem.original_base_score > 0:
        return problem
    problem.original_base_score = await source.fetch_original_base_score(problem.number)
    problem.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("Backfilled problem #%s original base score: %d", problem.number, problem.original_base_score)
    return problem


async def get_solved_attempts(db: AsyncSession, problem_id: int) -> list[UserAttempt]:
    """All solved attempt rows for a problem, locked, in id order."""
    result = await db.execute(
        select(UserAttempt)
        .where(UserAttempt.problem_id == problem_id, UserAttempt.solved.is_(True))
        .order_by(UserAttempt.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def compute_weighted_solves(db: AsyncSession, problem_id: int) -> float:
    """Weighted solve total recomputed from the solved rows."""
    result = await db.execute(
        select(UserAttempt.attempts)
        .where(UserAttempt.problem_id == problem_id, UserAttempt.solved.is_(True))
        .order_by(UserAttempt.id)
    )
    return weighted_solves(result.scalars().all())


async def get_problem_stats(db: AsyncSession, problem_number: str) -> dict:
    """Read-only summary of a problem's scoring state."""
    problem = await require_problem(db, problem_number)
    return {
        "problem_number": problem.number,
        "original_base_score": problem.original_base_score,
        "current_base_score": problem.base_score,
        "attempts": problem.attempts,
        "solves": problem.solves,
        "weighted_solves": await compute_weighted_solves(db, problem.id),
        "status": problem.status,
        "finalized_at": problem.finalized_at,
    }
