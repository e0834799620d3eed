"""Shared test fixtures."""

from __future__ import annotations

import os

# Configure before any xpledger module reads settings.
os.environ["XPL_CURATOR_API_KEY"] = "test-curator-key"
os.environ["XPL_PROBLEM_SOURCE"] = "static"
os.environ["XPL_LOG_FORMAT"] = "console"

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from xpledger.config import get_settings  # noqa: E402
from xpledger.database import close_db, get_engine, get_session, init_db  # noqa: E402
from xpledger.db.base import Base  # noqa: E402
from xpledger.db.models import Problem, User, UserAttempt  # noqa: E402
from xpledger.problems.source import StaticProblemSource, reset_problem_source  # noqa: E402

get_settings.cache_clear()

CURATOR_HEADERS = {"X-Curator-Key": "test-curator-key"}

# Problem number -> original base score served by the static source.
SHEET_SCORES = {"7": 100, "8": 50, "12": 40}


@pytest.fixture
def problem_source() -> StaticProblemSource:
    """Static stand-in for the problem sheet."""
    return StaticProblemSource(SHEET_SCORES)


@pytest_asyncio.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Fresh SQLite database per test, schema created from the ORM metadata."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'xpledger.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessions = get_session()
    session = await anext(sessions)
    yield session
    await sessions.aclose()
    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, problem_source: StaticProblemSource) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app, sharing the test database."""
    from xpledger.dependencies import get_problem_source_dep
    from xpledger.main import create_app

    reset_problem_source()
    app = create_app()
    app.dependency_overrides[get_problem_source_dep] = lambda: problem_source

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Query helpers for assertions (always read current row state)
# ---------------------------------------------------------------------------


async def fetch_user(db: AsyncSession, external_id: str) -> User | None:
    result = await db.execute(
        select(User).where(User.external_id == external_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def fetch_problem(db: AsyncSession, number: str) -> Problem | None:
    result = await db.execute(
        select(Problem).where(Problem.number == number).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def fetch_attempt(db: AsyncSession, external_id: str, number: str) -> UserAttempt | None:
    result = await db.execute(
        select(UserAttempt)
        .join(User, UserAttempt.user_id == User.id)
        .join(Problem, UserAttempt.problem_id == Problem.id)
        .where(User.external_id == external_id, Problem.number == number)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
