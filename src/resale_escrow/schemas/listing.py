"""Pydantic schemas for the marketplace API.

These schemas define the request/response shapes for the REST API. They are
separate from the domain records to keep the HTTP contract independent of
the registry's internals. Amounts are integers in ledger base units.

Positivity of price and quantity is deliberately left to the registry so the
caller gets the domain's stable reason (ZERO_PRICE / ZERO_QUANTITY).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class CallerRequest(BaseModel):
    """Body for actions whose only input is who is calling."""

    caller: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Principal performing the action",
        examples=["alice"],
    )


class CreateListingRequest(CallerRequest):
    """Request body for listing a ticket batch."""

    unit_price: int = Field(
        ...,
        description="Price per ticket in base units",
        examples=[100_000_000],
    )
    quantity: int = Field(
        ...,
        description="Number of tickets in the batch",
        examples=[2],
    )
    description: str = Field(
        default="",
        max_length=2000,
        description="Human-readable description of the tickets",
        examples=["2x floor seats, Saturday show"],
    )


class ResolveDisputeRequest(CallerRequest):
    """Request body for a resolver's decision."""

    winner: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Principal of the winning party (buyer or seller)",
    )


class ResolverRequest(CallerRequest):
    """Request body for adding a dispute resolver."""

    principal: str = Field(..., min_length=1, max_length=128)


class ApproveRequest(BaseModel):
    """Request body for granting the registry an allowance."""

    owner: str = Field(..., min_length=1, max_length=128)
    spender: str = Field(..., min_length=1, max_length=128)
    amount: int = Field(..., ge=0)


class MintRequest(BaseModel):
    """Request body for crediting demo funds (development only)."""

    account: str = Field(..., min_length=1, max_length=128)
    amount: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Response schema for a listing."""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: int
    unit_price: int
    quantity: int
    ticket_total: int
    seller: str
    buyer: str | None
    description: str
    seller_confirmed: bool
    buyer_confirmed: bool
    disputed: bool
    closed: bool
    escrow_status: str | None
    purchase_timestamp: int | None
    seller_confirm_timestamp: int | None
    created_at: int


class PayoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recipient: str
    amount: int


class SettlementResponse(BaseModel):
    """What a terminal transition disbursed."""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: int
    path: str
    detail: str | None
    payouts: list[PayoutResponse]
    total: int


class ActionResponse(BaseModel):
    """Listing after an action, plus the settlement if the action closed it."""

    listing: ListingResponse
    settlement: SettlementResponse | None = None


class ListingStatusResponse(BaseModel):
    """Lightweight status check response."""

    transaction_id: int
    escrow_status: str | None
    closed: bool
    disputed: bool
    allowed_actions: list[str] = Field(
        description="Registry actions that are valid for this listing right now"
    )


class AuditEventResponse(BaseModel):
    """Response schema for an audit event."""

    model_config = ConfigDict(from_attributes=True)

    sequence: int
    event_type: str
    actor: str
    timestamp: int
    transaction_id: int | None
    metadata: dict


class ResolversResponse(BaseModel):
    owner: str
    resolvers: list[str]
    registry_open: bool


class BalanceResponse(BaseModel):
    account: str
    balance: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    registry_open: bool = True
    open_listings: int = 0
