"""Tests for the EscrowStateMachine domain guard.

These tests verify that:
    1. All valid transitions are allowed.
    2. CLOSED is terminal and DISPUTED blocks release and timeout.
    3. The convenience function validate_transition works.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from resale_escrow.domain.state_machine import (
    EscrowStateMachine,
    validate_transition,
)


class TestValidPaths:
    def test_release_from_open(self) -> None:
        sm = EscrowStateMachine("OPEN")
        sm.release()
        assert sm.status == "CLOSED"

    def test_timeout_from_open(self) -> None:
        sm = EscrowStateMachine("OPEN")
        sm.claim_timeout()
        assert sm.status == "CLOSED"

    def test_dispute_then_resolve(self) -> None:
        sm = EscrowStateMachine("OPEN")
        sm.open_dispute()
        assert sm.status == "DISPUTED"

        sm.resolve_dispute()
        assert sm.status == "CLOSED"

    def test_default_start_is_open(self) -> None:
        assert EscrowStateMachine().status == "OPEN"


class TestIllegalTransitions:
    """Verify that illegal transitions raise TransitionNotAllowed."""

    def test_disputed_cannot_release(self) -> None:
        sm = EscrowStateMachine("DISPUTED")
        with pytest.raises(TransitionNotAllowed):
            sm.release()

    def test_disputed_cannot_time_out(self) -> None:
        sm = EscrowStateMachine("DISPUTED")
        with pytest.raises(TransitionNotAllowed):
            sm.claim_timeout()

    def test_open_cannot_resolve(self) -> None:
        sm = EscrowStateMachine("OPEN")
        with pytest.raises(TransitionNotAllowed):
            sm.resolve_dispute()

    @pytest.mark.parametrize(
        "event", ["release", "claim_timeout", "open_dispute", "resolve_dispute"]
    )
    def test_closed_is_final(self, event: str) -> None:
        sm = EscrowStateMachine("CLOSED")
        with pytest.raises(TransitionNotAllowed):
            getattr(sm, event)()


class TestValidateTransitionFunction:
    def test_valid_transition(self) -> None:
        assert validate_transition("OPEN", "open_dispute") == "DISPUTED"

    def test_illegal_transition(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition("CLOSED", "release")

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("OPEN", "nonexistent_event")

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            EscrowStateMachine("INVALID_STATUS")
