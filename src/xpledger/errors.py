"""Typed failures raised by the scoring and ledger core.

Every error carries the HTTP status the API layer renders it with, so the
global error handler does not need to know individual classes.
"""

from __future__ import annotations


class XPLedgerError(Exception):
    """Base class for all domain failures."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(XPLedgerError):
    """A problem or user that must exist is absent."""

    status_code = 404


class AlreadyFinalizedError(XPLedgerError):
    """Finalize requested for a problem that is already finalized."""

    status_code = 409


class NotFinalizedError(XPLedgerError):
    """Unfinalize requested for a problem that is not finalized."""

    status_code = 409


class FinalizedProblemError(XPLedgerError):
    """An attempt was submitted against a finalized problem."""

    status_code = 409


class ExternalSourceError(XPLedgerError):
    """The problem source could not supply a base score."""

    status_code = 502


class ValidationError(XPLedgerError):
    """Malformed identifier or amount."""

    status_code = 422
