"""Attempt review endpoint (curator only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.attempts.schemas import AttemptRequest, AttemptResult
from xpledger.attempts.service import record_attempt
from xpledger.auth.dependencies import require_curator
from xpledger.dependencies import get_db, get_problem_source_dep
from xpledger.problems.source import BaseProblemSource

router = APIRouter(prefix="/api/v1", tags=["Attempts"])


@router.post("/attempts", response_model=AttemptResult, dependencies=[Depends(require_curator)])
async def review_attempt(
    body: AttemptRequest,
    db: AsyncSession = Depends(get_db),
    source: BaseProblemSource = Depends(get_problem_source_dep),
):
    """Record a reviewed answer: wrong or correct, awarding XP on first solve."""
    return await record_attempt(db, source, body.user_id, body.problem_number, body.is_correct)
