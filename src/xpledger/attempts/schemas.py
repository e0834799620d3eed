"""Request/response schemas for attempt recording."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AttemptRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    problem_number: str = Field(min_length=1, max_length=32)
    is_correct: bool


class AttemptResult(BaseModel):
    awarded_xp: int
    user_xp: int
    attempt_number: int
    total_problem_attempts: int
    total_problem_solves: int
    weighted_solves: float
    original_base_score: int
    current_base_score: int
