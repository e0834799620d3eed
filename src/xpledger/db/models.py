"""ORM models for users, problems, per-user attempts and the XP journal.

The tables are created by the Alembic migrations under ``alembic/versions``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from xpledger.db.base import Base
from xpledger.scoring.pricing import LIVE, Frozen, Pricing

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
PrimaryKey = BigInteger().with_variant(Integer, "sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """A chat-platform member with a running XP balance."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------


class Problem(Base):
    """Aggregate scoring state for one posted problem."""

    __tablename__ = "problems"

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    original_base_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    base_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    solves: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_finalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def status(self) -> str:
        """Lifecycle state name used by the finalize transition table."""
        return "finalized" if self.is_finalized else "open"


# ---------------------------------------------------------------------------
# User attempts
# ---------------------------------------------------------------------------


class UserAttempt(Base):
    """Attempt and award state for one (user, problem) pair."""

    __tablename__ = "user_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="uq_user_attempts_user_problem"),
    )

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    problem_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    solved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    awarded_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    pre_finalize_awarded_xp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    finalize_delta: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    @property
    def pricing(self) -> Pricing:
        """Whether this award is live or frozen by a finalize."""
        if self.pre_finalize_awarded_xp is None:
            return LIVE
        return Frozen(baseline=self.pre_finalize_awarded_xp, delta=self.finalize_delta)

    @pricing.setter
    def pricing(self, value: Pricing) -> None:
        if isinstance(value, Frozen):
            self.pre_finalize_awarded_xp = value.baseline
            self.finalize_delta = value.delta
        else:
            self.pre_finalize_awarded_xp = None
            self.finalize_delta = 0


# ---------------------------------------------------------------------------
# XP journal
# ---------------------------------------------------------------------------


class XPLedger(Base):
    """Append-only log of every applied XP balance change."""

    __tablename__ = "xp_ledger"

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
