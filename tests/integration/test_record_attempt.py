"""Attempt tracking and first-solve awards."""

import pytest
from conftest import fetch_attempt, fetch_problem, fetch_user

from xpledger.attempts.service import record_attempt
from xpledger.db.models import Problem
from xpledger.errors import ExternalSourceError, FinalizedProblemError, ValidationError
from xpledger.problems.service import get_problem_stats


class TestRecordAttempt:
    """Attempt counting and first-solve awards."""

    @pytest.mark.asyncio
    async def test_first_try_solve(self, db_session, problem_source):
        result = await record_attempt(db_session, problem_source, "alice", "7", True)

        assert result.awarded_xp == 100
        assert result.user_xp == 100
        assert result.attempt_number == 1
        assert result.total_problem_attempts == 1
        assert result.total_problem_solves == 1
        assert result.weighted_solves == pytest.approx(1.0)
        assert result.original_base_score == 100
        assert result.current_base_score == 25

    @pytest.mark.asyncio
    async def test_wrong_attempt_awards_nothing(self, db_session, problem_source):
        result = await record_attempt(db_session, problem_source, "bob", "7", False)

        assert result.awarded_xp == 0
        assert result.user_xp == 0
        assert result.total_problem_solves == 0
        assert result.current_base_score == 34
        attempt = await fetch_attempt(db_session, "bob", "7")
        assert attempt.solved is False

    @pytest.mark.asyncio
    async def test_decay_after_wrong_attempts(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "bob", "7", False)
        await record_attempt(db_session, problem_source, "bob", "7", False)
        result = await record_attempt(db_session, problem_source, "bob", "7", True)

        assert result.attempt_number == 3
        assert result.awarded_xp == 64
        assert result.total_problem_attempts == 3

    @pytest.mark.asyncio
    async def test_award_uses_original_score(self, db_session, problem_source):
        """Later solvers are paid against the sticker price, not the live base."""
        await record_attempt(db_session, problem_source, "alice", "7", True)
        await record_attempt(db_session, problem_source, "bob", "7", False)
        result = await record_attempt(db_session, problem_source, "bob", "7", True)

        assert result.awarded_xp == 80
        assert result.total_problem_solves == 2
        assert result.weighted_solves == pytest.approx(1.8)
        assert result.current_base_score == 25

    @pytest.mark.asyncio
    async def test_second_correct_is_not_paid_again(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "alice", "7", True)
        result = await record_attempt(db_session, problem_source, "alice", "7", True)

        assert result.awarded_xp == 0
        assert result.user_xp == 100
        assert result.attempt_number == 2
        assert result.total_problem_solves == 1

    @pytest.mark.asyncio
    async def test_wrong_after_solve_keeps_solved(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "alice", "7", True)
        await record_attempt(db_session, problem_source, "alice", "7", False)

        attempt = await fetch_attempt(db_session, "alice", "7")
        assert attempt.solved is True
        assert attempt.awarded_xp == 100

    @pytest.mark.asyncio
    async def test_problems_are_independent(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "alice", "7", True)
        result = await record_attempt(db_session, problem_source, "alice", "8", True)

        assert result.awarded_xp == 50
        assert result.user_xp == 150
        assert result.total_problem_attempts == 1


class TestRecordAttemptErrors:
    """Rejected attempts leave no trace."""

    @pytest.mark.asyncio
    async def test_unknown_problem_creates_nothing(self, db_session, problem_source):
        with pytest.raises(ExternalSourceError):
            await record_attempt(db_session, problem_source, "alice", "404", True)

        assert await fetch_problem(db_session, "404") is None
        assert await fetch_user(db_session, "alice") is None

    @pytest.mark.asyncio
    async def test_invalid_problem_number(self, db_session, problem_source):
        with pytest.raises(ValidationError):
            await record_attempt(db_session, problem_source, "alice", "  ", True)

    @pytest.mark.asyncio
    async def test_invalid_user_rolls_back_new_problem(self, db_session, problem_source):
        """The problem row is inserted before the user id is checked."""
        with pytest.raises(ValidationError):
            await record_attempt(db_session, problem_source, "   ", "7", True)

        assert await fetch_problem(db_session, "7") is None

    @pytest.mark.asyncio
    async def test_finalized_problem_rejects_attempts(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "alice", "7", True)
        problem = await fetch_problem(db_session, "7")
        problem.is_finalized = True
        await db_session.commit()

        with pytest.raises(FinalizedProblemError):
            await record_attempt(db_session, problem_source, "bob", "7", True)

        problem = await fetch_problem(db_session, "7")
        assert problem.attempts == 1
        assert await fetch_user(db_session, "bob") is None


class TestLegacyProblemRows:
    """Problems created before original scores were tracked."""

    @pytest.mark.asyncio
    async def test_missing_original_score_is_backfilled(self, db_session, problem_source):
        db_session.add(Problem(number="7", original_base_score=0, base_score=30, attempts=0, solves=0))
        await db_session.commit()

        result = await record_attempt(db_session, problem_source, "alice", "7", True)

        assert result.original_base_score == 100
        assert result.awarded_xp == 100


class TestProblemStats:
    """Read-only problem summary."""

    @pytest.mark.asyncio
    async def test_stats_after_attempts(self, db_session, problem_source):
        await record_attempt(db_session, problem_source, "alice", "7", True)
        await record_attempt(db_session, problem_source, "bob", "7", False)

        stats = await get_problem_stats(db_session, "7")
        assert stats["problem_number"] == "7"
        assert stats["original_base_score"] == 100
        assert stats["current_base_score"] == 25
        assert stats["attempts"] == 2
        assert stats["solves"] == 1
        assert stats["weighted_solves"] == pytest.approx(1.0)
        assert stats["status"] == "open"
        assert stats["finalized_at"] is None
