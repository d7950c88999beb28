"""Listing REST API routes.

These endpoints provide the HTTP interface to every registry operation.
Each action body names the calling principal; the registry decides whether
that principal may act.

Routes:
    POST   /api/v1/listings                       — List a ticket batch
    GET    /api/v1/listings                       — Open listings (?seller= for one seller)
    GET    /api/v1/listings/{id}                  — Listing details
    GET    /api/v1/listings/{id}/status           — Status + allowed actions
    GET    /api/v1/listings/{id}/events           — Audit trail
    GET    /api/v1/listings/{id}/settlement       — Final payouts, if closed
    POST   /api/v1/listings/{id}/purchase         — Buy and fund escrow
    POST   /api/v1/listings/{id}/confirm/seller   — Seller confirmation
    POST   /api/v1/listings/{id}/confirm/buyer    — Buyer confirmation
    POST   /api/v1/listings/{id}/close            — Withdraw an unsold listing
    POST   /api/v1/listings/{id}/dispute          — Open a dispute
    POST   /api/v1/listings/{id}/resolve          — Resolver decision
    POST   /api/v1/listings/{id}/timeout          — Claim a lapsed deadline
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from resale_escrow.api.deps import get_registry
from resale_escrow.domain.models import Listing, Settlement
from resale_escrow.schemas.listing import (
    ActionResponse,
    AuditEventResponse,
    CallerRequest,
    CreateListingRequest,
    ListingResponse,
    ListingStatusResponse,
    ResolveDisputeRequest,
    SettlementResponse,
)
from resale_escrow.services.registry import ListingRegistry

router = APIRouter(prefix="/api/v1/listings", tags=["Listings"])


def _action(listing: Listing, settlement: Settlement | None = None) -> ActionResponse:
    return ActionResponse(
        listing=ListingResponse.model_validate(listing),
        settlement=SettlementResponse.model_validate(settlement) if settlement else None,
    )


# ---------------------------------------------------------------------------
# Create / browse
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ListingResponse,
    status_code=201,
    summary="List a ticket batch",
)
def create_listing(
    request: CreateListingRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ListingResponse:
    """Create a listing; the seller's deposit is taken into custody."""
    listing = registry.list_ticket(
        caller=request.caller,
        unit_price=request.unit_price,
        quantity=request.quantity,
        description=request.description,
    )
    return ListingResponse.model_validate(listing)


@router.get(
    "",
    response_model=list[ListingResponse],
    summary="Open listings",
)
def list_open(
    seller: str | None = None,
    registry: ListingRegistry = Depends(get_registry),
) -> list[ListingResponse]:
    """Return every listing that is not closed, or all of one seller's listings."""
    listings = registry.listings_for_seller(seller) if seller else registry.list_open()
    return [ListingResponse.model_validate(listing) for listing in listings]


# ---------------------------------------------------------------------------
# Purchase / close
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/purchase",
    response_model=ActionResponse,
    summary="Purchase a listing",
)
def purchase(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    """Buy the listing; both deposits and the price move into a new escrow unit."""
    listing = registry.purchase_ticket(request.caller, transaction_id)
    return _action(listing)


@router.post(
    "/{transaction_id}/close",
    response_model=ActionResponse,
    summary="Withdraw an unsold listing",
)
def close_listing(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    """Seller withdraws an unsold listing and gets the deposit back."""
    listing = registry.close_listing(request.caller, transaction_id)
    return _action(listing)


# ---------------------------------------------------------------------------
# Confirmations
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/confirm/seller",
    response_model=ActionResponse,
    summary="Seller confirms delivery",
)
def seller_confirm(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    settlement = registry.seller_confirm(request.caller, transaction_id)
    return _action(registry.get_listing(transaction_id), settlement)


@router.post(
    "/{transaction_id}/confirm/buyer",
    response_model=ActionResponse,
    summary="Buyer confirms receipt",
)
def buyer_confirm(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    settlement = registry.buyer_confirm(request.caller, transaction_id)
    return _action(registry.get_listing(transaction_id), settlement)


# ---------------------------------------------------------------------------
# Disputes / timeouts
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/dispute",
    response_model=ActionResponse,
    summary="Open a dispute",
)
def create_dispute(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    """Either party freezes the escrow until a resolver decides."""
    listing = registry.create_dispute(request.caller, transaction_id)
    return _action(listing)


@router.post(
    "/{transaction_id}/resolve",
    response_model=ActionResponse,
    summary="Resolve a dispute",
)
def resolve_dispute(
    transaction_id: int,
    request: ResolveDisputeRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    """A resolver names the winner; the escrow pays out and closes."""
    settlement = registry.resolve_dispute(request.caller, transaction_id, request.winner)
    return _action(registry.get_listing(transaction_id), settlement)


@router.post(
    "/{transaction_id}/timeout",
    response_model=ActionResponse,
    summary="Claim a lapsed confirmation deadline",
)
def claim_timeout(
    transaction_id: int,
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ActionResponse:
    settlement = registry.claim_timeout(request.caller, transaction_id)
    return _action(registry.get_listing(transaction_id), settlement)


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/{transaction_id}",
    response_model=ListingResponse,
    summary="Get listing details",
)
def get_listing(
    transaction_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> ListingResponse:
    return ListingResponse.model_validate(registry.get_listing(transaction_id))


@router.get(
    "/{transaction_id}/status",
    response_model=ListingStatusResponse,
    summary="Get lightweight status check",
)
def get_status(
    transaction_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> ListingStatusResponse:
    """Return the escrow status and the actions valid right now."""
    return ListingStatusResponse(**registry.status(transaction_id))


@router.get(
    "/{transaction_id}/events",
    response_model=list[AuditEventResponse],
    summary="Get audit trail",
)
def get_events(
    transaction_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> list[AuditEventResponse]:
    return [AuditEventResponse.model_validate(e) for e in registry.get_events(transaction_id)]


@router.get(
    "/{transaction_id}/settlement",
    response_model=SettlementResponse,
    summary="Get final payouts",
)
def get_settlement(
    transaction_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> SettlementResponse:
    settlement = registry.get_settlement(transaction_id)
    if settlement is None:
        raise HTTPException(status_code=404, detail="Listing has not been settled")
    return SettlementResponse.model_validate(settlement)
