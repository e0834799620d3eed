"""Liveness, readiness and version probes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.config import Settings, get_settings
from xpledger.dependencies import get_db

router = APIRouter()


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return f"error: {exc}"
    return "ok"


def _check_problem_source(settings: Settings) -> str:
    # A static map is always usable; the sheet needs a URL.
    if settings.problem_source == "sheet" and not settings.problem_sheet_csv_url:
        return "error: problem sheet URL not configured"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)) -> JSONResponse:  # noqa: B008
    """Database reachable and a problem source configured. 503 otherwise."""
    checks = {
        "database": await _check_database(db),
        "problem_source": _check_problem_source(get_settings()),
    }
    ready = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
