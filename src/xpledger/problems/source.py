"""
Problem source with provider abstraction.

Supplies the original ("sticker price") base score of a problem. Supports a
published spreadsheet CSV export (default) and a static in-memory map.
Provider is selected via configuration.
"""

from __future__ import annotations

import csv
import io
from abc import ABC, abstractmethod

import httpx
import structlog

from xpledger.config import get_settings
from xpledger.errors import ExternalSourceError

logger = structlog.get_logger()

NUMBER_COLUMN = "Number"
BASE_SCORE_COLUMN = "Base Score"


def parse_base_score(problem_number: str, raw: object, default: int) -> int:
    """Parse a base score cell. Blank cells fall back to ``default``."""
    text = str(raw).strip() if raw is not None else ""
    if not text:
        return default
    try:
        score = int(text)
    except ValueError as e:
        msg = f"Problem #{problem_number} has a non-integer base score: {text!r}"
        raise ExternalSourceError(msg) from e
    if score <= 0:
        msg = f"Problem #{problem_number} has a non-positive base score: {score}"
        raise ExternalSourceError(msg)
    return score


class BaseProblemSource(ABC):
    """Abstract base class for problem score lookups."""

    @abstractmethod
    async def fetch_original_base_score(self, problem_number: str) -> int:
        """Return the problem's original base score.

        Raises:
            ExternalSourceError: If the problem is unknown or the lookup fails.
        """
        ...


class SheetProblemSource(BaseProblemSource):
    """Read the problem list from a spreadsheet's CSV export over HTTP."""

    def __init__(
        self,
        csv_url: str,
        timeout: float = 10.0,
        default_base_score: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.csv_url = csv_url
        self.timeout = timeout
        self.default_base_score = default_base_score
        self._transport = transport

    async def _fetch_rows(self) -> list[dict[str, str]]:
        if not self.csv_url:
            msg = "Problem sheet URL is not configured"
            raise ExternalSourceError(msg)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(self.csv_url, follow_redirects=True)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("problem_sheet_fetch_failed", url=self.csv_url, error=str(e))
            msg = f"Problem sheet lookup failed: {e}"
            raise ExternalSourceError(msg) from e
        return list(csv.DictReader(io.StringIO(response.text)))

    async def fetch_original_base_score(self, problem_number: str) -> int:
        """Find the row whose Number matches and read its Base Score."""
        wanted = problem_number.strip()
        for row in await self._fetch_rows():
            if (row.get(NUMBER_COLUMN) or "").strip() == wanted:
                score = parse_base_score(wanted, row.get(BASE_SCORE_COLUMN), self.default_base_score)
                logger.info("problem_sheet_lookup", problem_number=wanted, base_score=score)
                return score
        msg = f"Problem #{wanted} not found in problem sheet"
        raise ExternalSourceError(msg)


class StaticProblemSource(BaseProblemSource):
    """Serve base scores from an in-memory mapping of problem number to score."""

    def __init__(self, scores: dict[str, int]) -> None:
        self.scores = dict(scores)

    async def fetch_original_base_score(self, problem_number: str) -> int:
        """Look the problem up in the mapping."""
        try:
            score = self.scores[problem_number.strip()]
        except KeyError as e:
            msg = f"Problem #{problem_number} not found"
            raise ExternalSourceError(msg) from e
        return parse_base_score(problem_number, score, get_settings().default_base_score)


_problem_source: BaseProblemSource | None = None


def _create_problem_source() -> BaseProblemSource:
    settings = get_settings()
    if settings.problem_source == "static":
        return StaticProblemSource(settings.static_base_scores)
    return SheetProblemSource(
        csv_url=settings.problem_sheet_csv_url,
        timeout=settings.problem_source_timeout_seconds,
        default_base_score=settings.default_base_score,
    )


def get_problem_source() -> BaseProblemSource:
    """Get or create the problem source singleton."""
    global _problem_source  # noqa: PLW0603
    if _problem_source is None:
        _problem_source = _create_problem_source()
    return _problem_source


def reset_problem_source() -> None:
    """Reset the problem source singleton (for testing)."""
    global _problem_source  # noqa: PLW0603
    _problem_source = None
