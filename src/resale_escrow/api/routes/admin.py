"""Administrative REST API routes (owner only).

Routes:
    GET    /api/v1/admin/resolvers              — Resolver set and registry switch
    GET    /api/v1/admin/events                 — Full audit trail
    POST   /api/v1/admin/resolvers              — Add a resolver
    DELETE /api/v1/admin/resolvers/{principal}  — Remove a resolver
    POST   /api/v1/admin/close                  — Stop accepting new listings
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from resale_escrow.api.deps import get_registry
from resale_escrow.schemas.listing import (
    AuditEventResponse,
    CallerRequest,
    ResolverRequest,
    ResolversResponse,
)
from resale_escrow.services.registry import ListingRegistry

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


def _resolvers(registry: ListingRegistry) -> ResolversResponse:
    return ResolversResponse(
        owner=registry.owner,
        resolvers=registry.resolvers(),
        registry_open=registry.is_open,
    )


@router.get("/resolvers", response_model=ResolversResponse, summary="List resolvers")
def list_resolvers(registry: ListingRegistry = Depends(get_registry)) -> ResolversResponse:
    return _resolvers(registry)


@router.post("/resolvers", response_model=ResolversResponse, summary="Add a resolver")
def add_resolver(
    request: ResolverRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ResolversResponse:
    registry.add_resolver(request.caller, request.principal)
    return _resolvers(registry)


@router.delete(
    "/resolvers/{principal}",
    response_model=ResolversResponse,
    summary="Remove a resolver",
)
def remove_resolver(
    principal: str,
    caller: str,
    registry: ListingRegistry = Depends(get_registry),
) -> ResolversResponse:
    """Remove a resolver. The owner can never be removed."""
    registry.remove_resolver(caller, principal)
    return _resolvers(registry)


@router.post("/close", response_model=ResolversResponse, summary="Close the registry")
def close_registry(
    request: CallerRequest,
    registry: ListingRegistry = Depends(get_registry),
) -> ResolversResponse:
    """Irreversibly stop new listings and purchases. Open escrows still settle."""
    registry.close_factory(request.caller)
    return _resolvers(registry)


@router.get("/events", response_model=list[AuditEventResponse], summary="Full audit trail")
def audit_log(registry: ListingRegistry = Depends(get_registry)) -> list[AuditEventResponse]:
    """Every recorded event in sequence order, registry-level events included."""
    return [AuditEventResponse.model_validate(e) for e in registry.audit_log()]
