"""User XP endpoints: profile, history and curator adjustments."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.auth.dependencies import require_curator
from xpledger.database import atomic
from xpledger.dependencies import get_db
from xpledger.ledger.schemas import (
    AllRanksResponse,
    RankEntry,
    UserXPResponse,
    XPAdjustRequest,
    XPAdjustResponse,
    XPHistoryEntry,
    XPHistoryResponse,
)
from xpledger.ledger.service import add_xp, get_or_create_user, get_xp_history, remove_xp
from xpledger.scoring.ranks import RANK_THRESHOLDS, get_rank_and_progress

router = APIRouter(prefix="/api/v1", tags=["XP"])


@router.get("/ranks", response_model=AllRanksResponse)
async def list_ranks():
    """Get all rank thresholds."""
    return AllRanksResponse(
        ranks=[RankEntry(rank=t["rank"], threshold=t["threshold"]) for t in RANK_THRESHOLDS]
    )


@router.get("/users/{user_id}/xp", response_model=UserXPResponse)
async def get_user_xp(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get a user's XP and rank progress, creating the user on first contact."""
    async with atomic(db):
        user = await get_or_create_user(db, user_id)
    rank_info = get_rank_and_progress(user.xp)

    return UserXPResponse(
        user_id=user.external_id,
        xp=user.xp,
        rank=rank_info["rank"],
        progress_to_next=rank_info["progress_to_next"],
        level_progress=rank_info["level_progress"],
        next_milestone=rank_info["next_milestone"],
        next_threshold=rank_info["next_threshold"],
        progress_percent=rank_info["progress_percent"],
    )


@router.get("/users/{user_id}/xp/history", response_model=XPHistoryResponse)
async def get_user_xp_history(
    user_id: str,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Get XP ledger history (paginated, newest first)."""
    total, entries = await get_xp_history(db, user_id, limit=per_page, offset=(page - 1) * per_page)

    return XPHistoryResponse(
        entries=[
            XPHistoryEntry(
                amount=e.amount,
                balance_after=e.balance_after,
                source=e.source,
                source_id=e.source_id,
                description=e.description,
                created_at=e.created_at,
            )
            for e in entries
        ],
        total=total,
        page=page,
        per_page=per_page,
    )


# ── Curator endpoints ──


@router.post(
    "/users/{user_id}/xp/add",
    response_model=XPAdjustResponse,
    dependencies=[Depends(require_curator)],
)
async def add_user_xp(user_id: str, body: XPAdjustRequest, db: AsyncSession = Depends(get_db)):
    """Grant XP to a user."""
    new_xp = await add_xp(db, user_id, body.amount, body.reason)
    return XPAdjustResponse(user_id=user_id.strip(), xp=new_xp)


@router.post(
    "/users/{user_id}/xp/remove",
    response_model=XPAdjustResponse,
    dependencies=[Depends(require_curator)],
)
async def remove_user_xp(user_id: str, body: XPAdjustRequest, db: AsyncSession = Depends(get_db)):
    """Remove XP from a user (never below zero)."""
    new_xp = await remove_xp(db, user_id, body.amount, body.reason)
    return XPAdjustResponse(user_id=user_id.strip(), xp=new_xp)
