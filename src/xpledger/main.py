"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from xpledger.attempts.router import router as attempts_router
from xpledger.config import get_settings
from xpledger.database import close_db, init_db
from xpledger.health.router import router as health_router
from xpledger.ledger.router import router as ledger_router
from xpledger.middleware import setup_middleware
from xpledger.problems.router import router as problems_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="XP Ledger API",
        description="Scoring and XP ledger for posted problems",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(ledger_router)
    app.include_router(attempts_router)
    app.include_router(problems_router)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn (``xpledger`` console script)."""
    settings = get_settings()
    uvicorn.run(
        "xpledger.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        reload=settings.debug,
    )
