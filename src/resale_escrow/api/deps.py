"""FastAPI dependency injection providers.

These are used with Depends() in route handlers to inject the registry, the
ledger and configuration. The registry is a process-wide singleton built
lazily from settings; tests swap it via ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from resale_escrow.config import Settings, get_settings
from resale_escrow.domain.clock import SystemClock
from resale_escrow.infrastructure.ledger import InMemoryLedger
from resale_escrow.services.registry import ListingRegistry


@lru_cache(maxsize=1)
def get_ledger() -> InMemoryLedger:
    """Provide the asset ledger."""
    return InMemoryLedger()


@lru_cache(maxsize=1)
def get_registry() -> ListingRegistry:
    """Provide the listing registry bound to the ledger and the wall clock."""
    return ListingRegistry.from_settings(get_settings(), get_ledger(), SystemClock())


def get_app_settings() -> Settings:
    """Provide the application settings."""
    return get_settings()
