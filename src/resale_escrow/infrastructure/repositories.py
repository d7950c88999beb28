"""Repository classes for listing and audit data.

Repositories encapsulate storage and provide a clean interface to the
service layer. Both tables are owned, in-process structures keyed by
transaction id; they never decide business rules (that's the registry's job).
"""

from __future__ import annotations

import itertools
import threading
from typing import TYPE_CHECKING

from resale_escrow.domain.models import AuditEvent

if TYPE_CHECKING:
    from resale_escrow.domain.enums import EventType
    from resale_escrow.domain.models import Listing


class ListingRepository:
    """Data access for listings, one record per transaction id."""

    def __init__(self) -> None:
        self._listings: dict[int, Listing] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Allocate a transaction id. Ids are monotonic and never reused."""
        with self._lock:
            return next(self._ids)

    def add(self, listing: Listing) -> Listing:
        """Insert a new listing."""
        with self._lock:
            if listing.transaction_id in self._listings:
                raise ValueError(f"Duplicate transaction id: {listing.transaction_id}")
            self._listings[listing.transaction_id] = listing
        return listing

    def get_by_id(self, transaction_id: int) -> Listing | None:
        with self._lock:
            return self._listings.get(transaction_id)

    def get_all(self) -> list[Listing]:
        """All listings in transaction id order."""
        with self._lock:
            return [self._listings[k] for k in sorted(self._listings)]

    def get_open(self) -> list[Listing]:
        """Listings that are not closed, in transaction id order."""
        return [listing for listing in self.get_all() if not listing.closed]

    def get_by_seller(self, seller: str) -> list[Listing]:
        return [listing for listing in self.get_all() if listing.seller == seller]


class EventRepository:
    """Data access for the append-only audit event log."""

    def __init__(self) -> None:
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    def record(
        self,
        event_type: EventType,
        actor: str,
        timestamp: int,
        transaction_id: int | None = None,
        metadata: dict | None = None,
    ) -> AuditEvent:
        """Append a new audit event. This is the ONLY write operation allowed."""
        with self._lock:
            evt = AuditEvent(
                sequence=len(self._events) + 1,
                event_type=event_type,
                actor=actor,
                timestamp=timestamp,
                transaction_id=transaction_id,
                metadata=metadata or {},
            )
            self._events.append(evt)
        return evt

    def get_by_transaction(self, transaction_id: int) -> list[AuditEvent]:
        """Events for one listing in the order they were recorded."""
        with self._lock:
            return [e for e in self._events if e.transaction_id == transaction_id]

    def get_all(self) -> list[AuditEvent]:
        with self._lock:
            return list(self._events)
