"""Health check endpoint.

Reports whether the registry is accepting listings and how many are open.
Used by Docker healthchecks, load balancers, and monitoring systems.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from resale_escrow import __version__
from resale_escrow.api.deps import get_registry
from resale_escrow.schemas.listing import HealthResponse
from resale_escrow.services.registry import ListingRegistry

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application and its registry.",
)
def health_check(registry: ListingRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        registry_open=registry.is_open,
        open_listings=len(registry.list_open()),
    )
