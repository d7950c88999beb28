"""Domain enumerations for the ticket resale escrow.

These enums define the canonical states, outcomes and reasons used throughout
the system. They are framework-agnostic (no FastAPI imports).
"""

import enum


class EscrowStatus(enum.StrEnum):
    """Lifecycle states of an escrow unit.

    State transitions are enforced by the EscrowStateMachine guard.
    See domain/state_machine.py for the transition table.
    """

    OPEN = "OPEN"
    DISPUTED = "DISPUTED"
    CLOSED = "CLOSED"


class DisputeOutcome(enum.StrEnum):
    """Binary decision a resolver hands down on a disputed transaction."""

    BUYER_WINS = "BUYER_WINS"
    SELLER_WINS = "SELLER_WINS"


class DefaultParty(enum.StrEnum):
    """The party whose confirmation deadline lapsed."""

    SELLER = "SELLER"
    BUYER = "BUYER"


class SettlementPath(enum.StrEnum):
    """The mutually exclusive ways an escrow unit reaches CLOSED."""

    CONFIRMATION_RELEASE = "CONFIRMATION_RELEASE"
    DISPUTE_RESOLUTION = "DISPUTE_RESOLUTION"
    TIMEOUT = "TIMEOUT"


class EventType(enum.StrEnum):
    """Types of audit events recorded in the event log.

    Every accepted operation produces exactly one event, written only after
    the operation committed.
    """

    # Listing lifecycle
    LISTING_CREATED = "LISTING_CREATED"
    LISTING_PURCHASED = "LISTING_PURCHASED"
    LISTING_CLOSED = "LISTING_CLOSED"

    # Confirmations
    SELLER_CONFIRMED = "SELLER_CONFIRMED"
    BUYER_CONFIRMED = "BUYER_CONFIRMED"
    FUNDS_RELEASED = "FUNDS_RELEASED"

    # Disputes
    DISPUTE_OPENED = "DISPUTE_OPENED"
    DISPUTE_RESOLVED_BUYER = "DISPUTE_RESOLVED_BUYER"
    DISPUTE_RESOLVED_SELLER = "DISPUTE_RESOLVED_SELLER"

    # Timeouts
    TIMEOUT_SELLER_DEFAULT = "TIMEOUT_SELLER_DEFAULT"
    TIMEOUT_BUYER_DEFAULT = "TIMEOUT_BUYER_DEFAULT"

    # Administration
    RESOLVER_ADDED = "RESOLVER_ADDED"
    RESOLVER_REMOVED = "RESOLVER_REMOVED"
    REGISTRY_CLOSED = "REGISTRY_CLOSED"


class ErrorReason(enum.StrEnum):
    """Stable failure reasons carried by every domain error."""

    # Authorization
    NOT_OWNER = "NOT_OWNER"
    NOT_SELLER = "NOT_SELLER"
    NOT_BUYER = "NOT_BUYER"
    NOT_PARTY = "NOT_PARTY"
    NOT_RESOLVER = "NOT_RESOLVER"

    # State
    REGISTRY_CLOSED = "REGISTRY_CLOSED"
    ALREADY_SOLD = "ALREADY_SOLD"
    NOT_PURCHASED = "NOT_PURCHASED"
    ALREADY_CLOSED = "ALREADY_CLOSED"
    ALREADY_DISPUTED = "ALREADY_DISPUTED"
    NOT_DISPUTED = "NOT_DISPUTED"
    ALREADY_CONFIRMED = "ALREADY_CONFIRMED"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Preconditions
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    ZERO_PRICE = "ZERO_PRICE"
    ZERO_QUANTITY = "ZERO_QUANTITY"
    SELF_PURCHASE = "SELF_PURCHASE"
    INVALID_WINNER = "INVALID_WINNER"
    INSUFFICIENT_ESCROW_BALANCE = "INSUFFICIENT_ESCROW_BALANCE"
    CANNOT_REMOVE_OWNER = "CANNOT_REMOVE_OWNER"

    # Timing
    DEADLINE_NOT_REACHED = "DEADLINE_NOT_REACHED"

    # Collaborator
    TRANSFER_FAILED = "TRANSFER_FAILED"
