"""Request/response schemas for user XP endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class XPAdjustRequest(BaseModel):
    amount: int = Field(ge=0)
    reason: str = Field(default="", max_length=256)


class XPAdjustResponse(BaseModel):
    user_id: str
    xp: int


class UserXPResponse(BaseModel):
    user_id: str
    xp: int
    rank: str
    progress_to_next: str
    level_progress: str
    next_milestone: str
    next_threshold: int
    progress_percent: int


class XPHistoryEntry(BaseModel):
    amount: int
    balance_after: int
    source: str
    source_id: str | None = None
    description: str | None = None
    created_at: datetime


class XPHistoryResponse(BaseModel):
    entries: list[XPHistoryEntry]
    total: int
    page: int
    per_page: int


class RankEntry(BaseModel):
    rank: str
    threshold: int


class AllRanksResponse(BaseModel):
    ranks: list[RankEntry]
