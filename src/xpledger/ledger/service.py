"""User ledger: lazy user creation and signed, zero-clamped XP deltas.

Two adjustment paths exist on purpose:

* ``adjust_xp`` is keyed by the external platform id and is lenient: an
  unknown user is skipped silently.
* ``adjust_xp_by_user_id`` is keyed by the internal row id and is strict:
  an unknown user raises ``NotFoundError``.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xpledger.database import atomic
from xpledger.db.models import User, XPLedger
from xpledger.db.upsert import insert_ignore_conflict
from xpledger.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_EXTERNAL_ID_LENGTH = 64


def validate_external_id(external_id: str) -> str:
    """Return the trimmed external id or raise ValidationError."""
    cleaned = (external_id or "").strip()
    if not cleaned or len(cleaned) > MAX_EXTERNAL_ID_LENGTH:
        msg = f"Invalid user id: {external_id!r}"
        raise ValidationError(msg)
    return cleaned


async def get_user(db: AsyncSession, external_id: str, *, lock: bool = False) -> User | None:
    """Fetch a user by external id."""
    stmt = select(User).where(User.external_id == external_id)
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_or_create_user(db: AsyncSession, external_id: str) -> User:
    """Get or create the ledger row for an external user id."""
    external_id = validate_external_id(external_id)
    user = await get_user(db, external_id)
    if user is None:
        await insert_ignore_conflict(db, User, ["external_id"], external_id=external_id, xp=0)
        user = await get_user(db, external_id)
    return user


async def _apply_delta(
    db: AsyncSession,
    user: User,
    delta: int,
    source: str,
    source_id: str | None,
    description: str | None,
) -> int:
    old_xp = user.xp
    user.xp = max(0, old_xp + delta)
    db.add(XPLedger(
        user_id=user.id,
        amount=delta,
        balance_after=user.xp,
        source=source,
        source_id=source_id,
        description=description,
    ))
    await db.flush()
    return user.xp


async def adjust_xp(
    db: AsyncSession,
    external_id: str,
    delta: int,
    source: str = "manual",
    source_id: str | None = None,
    description: str | None = None,
) -> int | None:
    """Apply a signed XP delta by external id. Returns the new total.

    Returns None without writing when the user does not exist.
    """
    user = await get_user(db, external_id, lock=True)
    if user is None:
        logger.info("Skipping XP adjustment for unknown user %s", external_id)
        return None
    if delta == 0:
        return user.xp
    return await _apply_delta(db, user, delta, source, source_id, description)


async def adjust_xp_by_user_id(
    db: AsyncSession,
    user_id: int,
    delta: int,
    source: str,
    source_id: str | None = None,
    description: str | None = None,
) -> int:
    """Apply a signed XP delta by internal user id. Returns the new total.

    Raises:
        NotFoundError: If no user has this id.
    """
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        msg = f"User {user_id} not found"
        raise NotFoundError(msg)
    if delta == 0:
        return user.xp
    return await _apply_delta(db, user, delta, source, source_id, description)


def _validate_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        msg = f"XP amount must be a non-negative integer, got {amount!r}"
        raise ValidationError(msg)
    return amount


async def add_xp(db: AsyncSession, external_id: str, amount: int, reason: str = "") -> int:
    """Curator grant. Creates the user if needed and returns the new total."""
    amount = _validate_amount(amount)
    async with atomic(db):
        user = await get_or_create_user(db, external_id)
        new_xp = await adjust_xp(db, user.external_id, amount, description=reason or None)
    logger.info(
        "Added %d XP to %s (new total: %d)%s", amount, user.external_id, new_xp,
        f" - {reason}" if reason else "",
    )
    return new_xp


async def remove_xp(db: AsyncSession, external_id: str, amount: int, reason: str = "") -> int:
    """Curator deduction, clamped at zero. Returns the new total."""
    amount = _validate_amount(amount)
    async with atomic(db):
        user = await get_or_create_user(db, external_id)
        new_xp = await adjust_xp(db, user.external_id, -amount, description=reason or None)
    logger.info(
        "Removed %d XP from %s (new total: %d)%s", amount, user.external_id, new_xp,
        f" - {reason}" if reason else "",
    )
    return new_xp


async def get_xp_history(
    db: AsyncSession,
    external_id: str,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[XPLedger]]:
    """Return (total entries, page of entries newest first) for a user."""
    user = await get_user(db, validate_external_id(external_id))
    if user is None:
        msg = f"User {external_id} not found"
        raise NotFoundError(msg)

    total = (
        await db.execute(select(func.count()).select_from(XPLedger).where(XPLedger.user_id == user.id))
    ).scalar_one()
    result = await db.execute(
        select(XPLedger)
        .where(XPLedger.user_id == user.id)
        .order_by(XPLedger.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return total, list(result.scalars().all())
