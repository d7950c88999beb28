"""Domain exceptions for the ticket resale escrow.

These exceptions are framework-agnostic and represent business rule violations.
They are caught and translated to HTTP responses by the API layer's middleware.

Every error carries a stable ErrorReason (exposed as ``code``) so integrators
and tests can match on cause, not just failure.
"""

from __future__ import annotations

from resale_escrow.domain.enums import ErrorReason


class MarketplaceError(Exception):
    """Base exception for all domain errors."""

    category = "MARKETPLACE_ERROR"

    def __init__(self, message: str, code: str = "MARKETPLACE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class _ReasonedError(MarketplaceError):
    """A domain error whose code is an ErrorReason."""

    def __init__(self, reason: ErrorReason, message: str | None = None) -> None:
        super().__init__(message=message or reason.value, code=reason.value)
        self.reason = reason


# --- The four failure categories ---


class AuthorizationError(_ReasonedError):
    """Raised when the caller is not allowed to perform a restricted action."""

    category = "AUTHORIZATION"


class StateError(_ReasonedError):
    """Raised when an operation is invalid for the current listing/escrow state.

    Example: confirming a listing that has already been closed.
    """

    category = "STATE"


class PreconditionError(_ReasonedError):
    """Raised when call arguments or balances violate a precondition."""

    category = "PRECONDITION"


class TimingError(_ReasonedError):
    """Raised when a timeout is claimed before any deadline has lapsed."""

    category = "TIMING"

    def __init__(self, transaction_id: int, now: int) -> None:
        super().__init__(
            ErrorReason.DEADLINE_NOT_REACHED,
            f"No confirmation deadline has lapsed for transaction {transaction_id} at {now}",
        )
        self.transaction_id = transaction_id
        self.now = now


# --- Specialisations ---


class ListingNotFoundError(PreconditionError):
    """Raised when a transaction id does not exist."""

    def __init__(self, transaction_id: int) -> None:
        super().__init__(
            ErrorReason.LISTING_NOT_FOUND,
            f"Listing not found: {transaction_id}",
        )
        self.transaction_id = transaction_id


class InvalidStateTransitionError(StateError):
    """Raised when the escrow state machine refuses a transition.

    Example: OPEN -> resolve_dispute (must go through DISPUTED first).
    """

    def __init__(
        self,
        current_state: str,
        attempted_event: str,
        reason: ErrorReason = ErrorReason.INVALID_TRANSITION,
    ) -> None:
        super().__init__(
            reason,
            f"Invalid escrow transition: {attempted_event} from {current_state}",
        )
        self.current_state = current_state
        self.attempted_event = attempted_event


class InsufficientEscrowBalanceError(PreconditionError):
    """Raised when the escrow account holds less than the funded amount."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            ErrorReason.INSUFFICIENT_ESCROW_BALANCE,
            f"Insufficient escrow balance: required {required}, available {available}",
        )
        self.required = required
        self.available = available


# --- Collaborator Errors ---


class TransferFailedError(MarketplaceError):
    """Raised when the asset ledger reports a failed transfer.

    The enclosing operation is rolled back in full.
    """

    category = "TRANSFER"

    def __init__(self, source: str, destination: str, amount: int) -> None:
        super().__init__(
            message=f"Transfer of {amount} from {source} to {destination} failed",
            code=ErrorReason.TRANSFER_FAILED.value,
        )
        self.reason = ErrorReason.TRANSFER_FAILED
        self.source = source
        self.destination = destination
        self.amount = amount
