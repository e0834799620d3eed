"""Problem scoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.auth.dependencies import require_curator
from xpledger.dependencies import get_db
from xpledger.problems.lifecycle import (
    finalize_problem_scoring,
    reset_problem_stats,
    unfinalize_problem_scoring,
)
from xpledger.problems.schemas import (
    FinalizeProblemResult,
    ProblemStatsResponse,
    ResetProblemResult,
    UnfinalizeProblemResult,
)
from xpledger.problems.service import get_problem_stats

router = APIRouter(prefix="/api/v1/problems", tags=["Problems"])


@router.get("/{problem_number}", response_model=ProblemStatsResponse)
async def problem_stats(problem_number: str, db: AsyncSession = Depends(get_db)):
    """Current scoring state of a problem."""
    return ProblemStatsResponse(**await get_problem_stats(db, problem_number))


# ── Curator endpoints ──


@router.post(
    "/{problem_number}/finalize",
    response_model=FinalizeProblemResult,
    dependencies=[Depends(require_curator)],
)
async def finalize(problem_number: str, db: AsyncSession = Depends(get_db)):
    """Freeze the problem's score and re-price every solver."""
    return await finalize_problem_scoring(db, problem_number)


@router.post(
    "/{problem_number}/unfinalize",
    response_model=UnfinalizeProblemResult,
    dependencies=[Depends(require_curator)],
)
async def unfinalize(problem_number: str, db: AsyncSession = Depends(get_db)):
    """Undo a finalize and restore every solver's original award."""
    return await unfinalize_problem_scoring(db, problem_number)


@router.post(
    "/{problem_number}/reset",
    response_model=ResetProblemResult,
    dependencies=[Depends(require_curator)],
)
async def reset(problem_number: str, db: AsyncSession = Depends(get_db)):
    """Clear all attempts for the problem. Awarded XP is kept."""
    return await reset_problem_stats(db, problem_number)
