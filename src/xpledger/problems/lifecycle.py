"""Problem scoring lifecycle: finalize, unfinalize and reset.

State progression: open <-> finalized.

Finalize freezes a problem's base score and re-prices every solver's award
against it, recording on each solved row the award it replaced and the
ledger delta it applied. Unfinalize applies the exact inverse of those
deltas and restores the replaced awards. Each operation runs in a single
transaction under the problem's row lock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.database import atomic
from xpledger.db.models import UserAttempt
from xpledger.errors import AlreadyFinalizedError, NotFinalizedError
from xpledger.ledger.service import adjust_xp_by_user_id
from xpledger.problems.schemas import (
    FinalizeProblemResult,
    ResetProblemResult,
    UnfinalizeProblemResult,
)
from xpledger.problems.service import (
    compute_weighted_solves,
    get_solved_attempts,
    require_problem,
)
from xpledger.scoring.decay import award_for, dynamic_base_score, weighted_solves
from xpledger.scoring.pricing import LIVE, Frozen

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: dict[str, list[str]] = {
    "open": ["finalized"],
    "finalized": ["open"],
}


def validate_transition(problem_number: str, current_status: str, target_status: str) -> None:
    """Validate a lifecycle transition. Raises the matching typed error if invalid."""
    if target_status in VALID_TRANSITIONS.get(current_status, []):
        return
    if target_status == "finalized":
        msg = f"Problem #{problem_number} is already finalized."
        raise AlreadyFinalizedError(msg)
    msg = f"Problem #{problem_number} is not finalized."
    raise NotFinalizedError(msg)


async def finalize_problem_scoring(db: AsyncSession, problem_number: str) -> FinalizeProblemResult:
    """Freeze a problem's base score and re-price every solver's award.

    Rows whose baseline award is 0 predate award tracking: they are priced
    at the final score without touching the user's XP.

    Raises:
        NotFoundError: If the problem does not exist.
        AlreadyFinalizedError: If the problem is already finalized.
    """
    async with atomic(db):
        problem = await require_problem(db, problem_number, lock=True)
        validate_transition(problem.number, problem.status, "finalized")

        solved = await get_solved_attempts(db, problem.id)
        weighted = weighted_solves(row.attempts for row in solved)
        final_base_score = dynamic_base_score(weighted)

        adjusted_users = 0
        initialized_users = 0
        for row in solved:
            pricing = row.pricing
            baseline = pricing.baseline if isinstance(pricing, Frozen) else row.awarded_xp
            final_award = award_for(final_base_score, row.attempts)

            if baseline == 0:
                delta = 0
                initialized_users += 1
            else:
                delta = final_award - baseline
                if delta != 0:
                    await adjust_xp_by_user_id(
                        db,
                        row.user_id,
                        delta,
                        source="finalize",
                        source_id=problem.number,
                        description=f"Finalized problem #{problem.number} at base {final_base_score}",
                    )
                    adjusted_users += 1

            row.pricing = Frozen(baseline=baseline, delta=delta)
            row.awarded_xp = final_award

        now = datetime.now(timezone.utc)
        problem.base_score = final_base_score
        problem.is_finalized = True
        problem.finalized_at = now
        problem.updated_at = now
        await db.flush()

        result = FinalizeProblemResult(
            problem_number=problem.number,
            final_base_score=final_base_score,
            weighted_solves=weighted,
            adjusted_users=adjusted_users,
            initialized_users=initialized_users,
        )

    logger.info(
        "Finalized problem #%s: base %d, weighted solves %.3f, %d adjusted, %d initialized",
        result.problem_number,
        result.final_base_score,
        result.weighted_solves,
        result.adjusted_users,
        result.initialized_users,
    )
    return result


async def unfinalize_problem_scoring(db: AsyncSession, problem_number: str) -> UnfinalizeProblemResult:
    """Reverse a finalize: undo each frozen row's delta and restore its award.

    Raises:
        NotFoundError: If the problem does not exist.
        NotFinalizedError: If the problem is not finalized.
    """
    async with atomic(db):
        problem = await require_problem(db, problem_number, lock=True)
        validate_transition(problem.number, problem.status, "open")

        reverted_users = 0
        for row in await get_solved_attempts(db, problem.id):
            pricing = row.pricing
            if not isinstance(pricing, Frozen):
                continue

            reverse_delta = -pricing.delta
            if reverse_delta != 0:
                await adjust_xp_by_user_id(
                    db,
                    row.user_id,
                    reverse_delta,
                    source="unfinalize",
                    source_id=problem.number,
                    description=f"Unfinalized problem #{problem.number}",
                )
                reverted_users += 1

            row.awarded_xp = pricing.baseline
            row.pricing = LIVE
        await db.flush()

        weighted = await compute_weighted_solves(db, problem.id)
        restored_base_score = dynamic_base_score(weighted)

        problem.base_score = restored_base_score
        problem.is_finalized = False
        problem.finalized_at = None
        problem.updated_at = datetime.now(timezone.utc)
        await db.flush()

        result = UnfinalizeProblemResult(
            problem_number=problem.number,
            restored_base_score=restored_base_score,
            reverted_users=reverted_users,
        )

    logger.info(
        "Unfinalized problem #%s: base %d, %d reverted",
        result.problem_number,
        result.restored_base_score,
        result.reverted_users,
    )
    return result


async def reset_problem_stats(db: AsyncSession, problem_number: str) -> ResetProblemResult:
    """Purge all attempt rows for a problem and restore its base score.

    XP already credited to users is left in place.

    Raises:
        NotFoundError: If the problem does not exist.
    """
    async with atomic(db):
        problem = await require_problem(db, problem_number, lock=True)

        deleted = await db.execute(delete(UserAttempt).where(UserAttempt.problem_id == problem.id))
        cleared = deleted.rowcount or 0

        now = datetime.now(timezone.utc)
        problem.attempts = 0
        problem.solves = 0
        problem.base_score = problem.original_base_score if problem.original_base_score > 0 else problem.base_score
        problem.updated_at = now
        await db.flush()

        result = ResetProblemResult(
            problem_number=problem.number,
            cleared_user_attempts=cleared,
            original_base_score=problem.original_base_score,
            current_base_score=problem.base_score,
        )

    logger.info(
        "Reset problem #%s: cleared %d attempt rows, base score %d",
        result.problem_number,
        result.cleared_user_attempts,
        result.current_base_score,
    )
    return result
