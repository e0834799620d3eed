"""Request-scoped dependencies shared by the routers."""

from collections.abc import AsyncGenerator

from xpledger.database import get_session
from xpledger.problems.source import BaseProblemSource, get_problem_source

get_db = get_session


async def get_problem_source_dep() -> AsyncGenerator[BaseProblemSource, None]:
    """The configured problem source. Tests override this with a static map."""
    yield get_problem_source()
