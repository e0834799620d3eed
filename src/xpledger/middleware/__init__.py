"""HTTP middleware and handler wiring for the API."""

from fastapi import FastAPI

from xpledger.config import Settings
from xpledger.middleware.cors import setup_cors
from xpledger.middleware.error_handler import setup_error_handlers
from xpledger.middleware.logging import setup_logging
from xpledger.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers, request ids and CORS.

    Starlette wraps in reverse-add order, so CORS is added last to sit
    outermost and decorate error responses too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
