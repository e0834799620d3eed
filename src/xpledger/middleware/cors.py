"""CORS for the admin dashboard and bot origins."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from xpledger.auth.dependencies import CURATOR_KEY_HEADER
from xpledger.config import Settings

ALLOWED_HEADERS = ["Content-Type", CURATOR_KEY_HEADER, "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Curator calls authenticate by header, so cookies are never needed."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-Id"],
    )
