"""Problem lifecycle state machine."""

import pytest

from xpledger.errors import AlreadyFinalizedError, NotFinalizedError
from xpledger.problems.lifecycle import VALID_TRANSITIONS, validate_transition


class TestProblemTransitions:
    """open <-> finalized transition table."""

    def test_open_to_finalized(self):
        validate_transition("7", "open", "finalized")

    def test_finalized_to_open(self):
        validate_transition("7", "finalized", "open")

    def test_double_finalize_rejected(self):
        with pytest.raises(AlreadyFinalizedError, match="already finalized"):
            validate_transition("7", "finalized", "finalized")

    def test_unfinalize_open_rejected(self):
        with pytest.raises(NotFinalizedError, match="not finalized"):
            validate_transition("7", "open", "open")

    def test_only_two_states(self):
        assert set(VALID_TRANSITIONS) == {"open", "finalized"}

    def test_error_status_codes(self):
        assert AlreadyFinalizedError("x").status_code == 409
        assert NotFinalizedError("x").status_code == 409
