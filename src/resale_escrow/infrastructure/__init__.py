"""Infrastructure — the in-memory ledger and listing/audit repositories."""

from resale_escrow.infrastructure.ledger import InMemoryLedger
from resale_escrow.infrastructure.repositories import EventRepository, ListingRepository

__all__ = ["InMemoryLedger", "EventRepository", "ListingRepository"]
