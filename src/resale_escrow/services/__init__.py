"""Application services — use case orchestration."""

from resale_escrow.services.registry import ListingRegistry

__all__ = ["ListingRegistry"]
