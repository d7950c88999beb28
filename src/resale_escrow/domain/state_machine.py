"""Escrow Unit State Machine Guard.

Uses python-statemachine to enforce legal state transitions at the domain level.
No matter what the registry or the API does, an illegal transition
(e.g., CLOSED -> DISPUTED) will raise TransitionNotAllowed.

EscrowUnit validates a transition BEFORE any funds move and commits the
resulting status only after every transfer of that transition succeeded.

Transition table:
    OPEN       -> DISPUTED    (open_dispute)
    OPEN       -> CLOSED      (release)
    OPEN       -> CLOSED      (claim_timeout)
    DISPUTED   -> CLOSED      (resolve_dispute)
"""

from __future__ import annotations

from statemachine import State, StateMachine


class EscrowStateMachine(StateMachine):
    """State machine that guards escrow unit lifecycle transitions.

    Usage:
        sm = EscrowStateMachine(current_status="OPEN")
        sm.open_dispute()    # transitions to DISPUTED
        sm.status            # "DISPUTED"
    """

    # --- States ---
    OPEN = State("OPEN", initial=True)
    DISPUTED = State("DISPUTED")
    CLOSED = State("CLOSED", final=True)

    # --- Events / Transitions ---

    # Happy path: both parties confirmed
    release = OPEN.to(CLOSED)

    # Deadline default
    claim_timeout = OPEN.to(CLOSED)

    # Disputes
    open_dispute = OPEN.to(DISPUTED)
    resolve_dispute = DISPUTED.to(CLOSED)

    def __init__(self, current_status: str = "OPEN") -> None:
        """Initialize the state machine at a given status.

        Args:
            current_status: The current EscrowStatus value (e.g., "OPEN").
        """
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches EscrowStatus enum)."""
        return str(self.current_state.value)


def validate_transition(current_status: str, event_name: str) -> str:
    """Validate a state transition and return the new status.

    Creates a throwaway state machine, fires the named event and returns the
    resulting status string. The caller's own state is never touched.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the status or event name is invalid.
    """
    sm = EscrowStateMachine(current_status=current_status)

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(f"Unknown event '{event_name}' from {current_status}")

    event_method()
    return sm.status
