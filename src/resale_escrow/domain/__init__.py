"""Domain layer — pure business logic with zero framework dependencies."""

from resale_escrow.domain.clock import Clock, ManualClock, SystemClock
from resale_escrow.domain.enums import (
    DefaultParty,
    DisputeOutcome,
    ErrorReason,
    EscrowStatus,
    EventType,
    SettlementPath,
)
from resale_escrow.domain.escrow_unit import EscrowUnit, escrow_account
from resale_escrow.domain.exceptions import (
    AuthorizationError,
    ListingNotFoundError,
    MarketplaceError,
    PreconditionError,
    StateError,
    TimingError,
    TransferFailedError,
)
from resale_escrow.domain.fees import FeeCalculator, FeeSchedule
from resale_escrow.domain.ledger_protocol import AssetLedger
from resale_escrow.domain.models import AuditEvent, Listing, Payout, Settlement
from resale_escrow.domain.resolvers import ResolverSet
from resale_escrow.domain.state_machine import EscrowStateMachine, validate_transition
from resale_escrow.domain.timeout_policy import TimeoutPolicy

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "DefaultParty",
    "DisputeOutcome",
    "ErrorReason",
    "EscrowStatus",
    "EventType",
    "SettlementPath",
    "EscrowUnit",
    "escrow_account",
    "AuthorizationError",
    "ListingNotFoundError",
    "MarketplaceError",
    "PreconditionError",
    "StateError",
    "TimingError",
    "TransferFailedError",
    "FeeCalculator",
    "FeeSchedule",
    "AssetLedger",
    "AuditEvent",
    "Listing",
    "Payout",
    "Settlement",
    "ResolverSet",
    "EscrowStateMachine",
    "validate_transition",
    "TimeoutPolicy",
]
