"""Scoring tables.

Creates users, problems, user_attempts and xp_ledger for the scoring
and XP ledger core.

Revision ID: 001_scoring_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_scoring_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            external_id VARCHAR(64) UNIQUE NOT NULL,
            xp INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Problems ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS problems (
            id BIGSERIAL PRIMARY KEY,
            number VARCHAR(32) UNIQUE NOT NULL,
            original_base_score INTEGER NOT NULL DEFAULT 0,
            base_score INTEGER NOT NULL DEFAULT 0,
            attempts INTEGER NOT NULL DEFAULT 0,
            solves INTEGER NOT NULL DEFAULT 0,
            is_finalized BOOLEAN NOT NULL DEFAULT false,
            finalized_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ
        )
    """)

    # --- User Attempts ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_attempts (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            problem_id BIGINT NOT NULL REFERENCES problems(id) ON DELETE CASCADE,
            attempts INTEGER NOT NULL DEFAULT 0,
            solved BOOLEAN NOT NULL DEFAULT false,
            awarded_xp INTEGER NOT NULL DEFAULT 0,
            pre_finalize_awarded_xp INTEGER,
            finalize_delta INTEGER NOT NULL DEFAULT 0,
            CONSTRAINT uq_user_attempts_user_problem UNIQUE (user_id, problem_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_attempts_problem_id
        ON user_attempts(problem_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_attempts_problem_solved
        ON user_attempts(problem_id) WHERE solved
    """)

    # --- XP Ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS xp_ledger (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            amount INTEGER NOT NULL,
            balance_after INTEGER NOT NULL,
            source VARCHAR(32) NOT NULL,
            source_id VARCHAR(128),
            description VARCHAR(256),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_xp_ledger_user_id
        ON xp_ledger(user_id)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS xp_ledger CASCADE")
    op.execute("DROP TABLE IF EXISTS user_attempts CASCADE")
    op.execute("DROP TABLE IF EXISTS problems CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
