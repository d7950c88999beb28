"""Deadline evaluation for claimTimeout.

Timeouts are evaluated lazily against a caller-supplied ``now``; nothing
expires on its own. Deadline comparisons are inclusive.
"""

from __future__ import annotations

from resale_escrow.domain.enums import DefaultParty


class TimeoutPolicy:
    """Pure checks for seller and buyer confirmation defaults."""

    def __init__(self, confirmation_deadline: int = 86_400) -> None:
        self.confirmation_deadline = confirmation_deadline

    def seller_timed_out(
        self,
        purchase_timestamp: int,
        now: int,
        seller_confirmed: bool,
    ) -> bool:
        return not seller_confirmed and now - purchase_timestamp >= self.confirmation_deadline

    def buyer_timed_out(
        self,
        seller_confirm_timestamp: int | None,
        now: int,
        buyer_confirmed: bool,
    ) -> bool:
        if seller_confirm_timestamp is None or buyer_confirmed:
            return False
        return now - seller_confirm_timestamp >= self.confirmation_deadline

    def evaluate(
        self,
        *,
        purchase_timestamp: int,
        seller_confirm_timestamp: int | None,
        seller_confirmed: bool,
        buyer_confirmed: bool,
        now: int,
    ) -> DefaultParty | None:
        """Return the defaulting party, or None if no deadline has lapsed.

        The seller check runs first and is authoritative when it holds.
        """
        if self.seller_timed_out(purchase_timestamp, now, seller_confirmed):
            return DefaultParty.SELLER
        if self.buyer_timed_out(seller_confirm_timestamp, now, buyer_confirmed):
            return DefaultParty.BUYER
        return None
