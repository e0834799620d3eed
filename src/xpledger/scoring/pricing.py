"""Pricing state of a solved attempt: live, or frozen by a finalize.

A ``Frozen`` award remembers the award it replaced (``baseline``) and the
signed ledger adjustment that was applied (``delta``), which is exactly
what an unfinalize needs to undo it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Live:
    """Award tracks the original solve; no finalize is in effect."""


@dataclass(frozen=True)
class Frozen:
    """Award was re-priced by a finalize."""

    baseline: int
    delta: int


Pricing = Live | Frozen

LIVE = Live()
