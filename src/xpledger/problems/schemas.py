"""Response schemas for problem scoring endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ProblemStatsResponse(BaseModel):
    problem_number: str
    original_base_score: int
    current_base_score: int
    attempts: int
    solves: int
    weighted_solves: float
    status: str
    finalized_at: datetime | None = None


class ResetProblemResult(BaseModel):
    problem_number: str
    cleared_user_attempts: int
    original_base_score: int
    current_base_score: int


class FinalizeProblemResult(BaseModel):
    problem_number: str
    final_base_score: int
    weighted_solves: float
    adjusted_users: int
    initialized_users: int


class UnfinalizeProblemResult(BaseModel):
    problem_number: str
    restored_base_score: int
    reverted_users: int
