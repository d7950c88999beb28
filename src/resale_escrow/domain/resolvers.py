"""Membership of principals allowed to resolve disputes."""

from __future__ import annotations

import threading

from resale_escrow.domain.enums import ErrorReason
from resale_escrow.domain.exceptions import PreconditionError


class ResolverSet:
    """A set of resolvers that always contains the owner."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._members = {owner}
        self._lock = threading.Lock()

    def __contains__(self, principal: object) -> bool:
        with self._lock:
            return principal in self._members

    def add(self, principal: str) -> bool:
        """Add a resolver. Returns False if it was already a member."""
        with self._lock:
            if principal in self._members:
                return False
            self._members.add(principal)
            return True

    def remove(self, principal: str) -> bool:
        """Remove a resolver. Returns False if it was not a member."""
        if principal == self.owner:
            raise PreconditionError(
                ErrorReason.CANNOT_REMOVE_OWNER, "The owner cannot be removed as resolver"
            )
        with self._lock:
            if principal not in self._members:
                return False
            self._members.discard(principal)
            return True

    def members(self) -> list[str]:
        with self._lock:
            return sorted(self._members)
