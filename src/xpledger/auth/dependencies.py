"""FastAPI dependency guarding curator-only endpoints."""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from xpledger.config import get_settings

CURATOR_KEY_HEADER = "X-Curator-Key"

_curator_key = APIKeyHeader(name=CURATOR_KEY_HEADER, auto_error=False)


async def require_curator(api_key: str | None = Security(_curator_key)) -> None:
    """
    Verify the curator key header.

    Raises 403 when curator access is not configured, 401 when the header is
    missing or wrong.
    """
    expected = get_settings().curator_api_key
    if not expected:
        raise HTTPException(status_code=403, detail="Curator access is not configured")
    if not api_key or not secrets.compare_digest(api_key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid curator key")
