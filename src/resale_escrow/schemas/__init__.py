"""Pydantic API schemas."""

from resale_escrow.schemas.listing import (
    ActionResponse,
    ApproveRequest,
    AuditEventResponse,
    BalanceResponse,
    CallerRequest,
    CreateListingRequest,
    HealthResponse,
    ListingResponse,
    ListingStatusResponse,
    MintRequest,
    PayoutResponse,
    ResolveDisputeRequest,
    ResolverRequest,
    ResolversResponse,
    SettlementResponse,
)

__all__ = [
    "ActionResponse",
    "ApproveRequest",
    "AuditEventResponse",
    "BalanceResponse",
    "CallerRequest",
    "CreateListingRequest",
    "HealthResponse",
    "ListingResponse",
    "ListingStatusResponse",
    "MintRequest",
    "PayoutResponse",
    "ResolveDisputeRequest",
    "ResolverRequest",
    "ResolversResponse",
    "SettlementResponse",
]
