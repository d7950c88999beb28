"""Listing Registry — the orchestration layer for the ticket marketplace.

This is the application layer that coordinates between:
    - Listing and audit repositories (data access)
    - Escrow units (custody and payouts)
    - TimeoutPolicy (deadline evaluation)
    - The asset ledger (funding moves)

Both the REST routes and the simulation call into this service, ensuring a
single source of truth for all authorization and state preconditions. Every
check runs before anything is mutated, so a rejected call leaves no trace.

Concurrency: each transaction id has its own lock and every mutating call on
a listing holds it for the whole operation, including the audit record, so
the event sequence matches commit order. A registry-wide lock guards the
open/closed switch, id allocation and the resolver set. Locks are always
taken in the order transaction lock, then registry lock.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from resale_escrow.domain.enums import (
    DefaultParty,
    DisputeOutcome,
    ErrorReason,
    EscrowStatus,
    EventType,
)
from resale_escrow.domain.escrow_unit import EscrowUnit
from resale_escrow.domain.exceptions import (
    AuthorizationError,
    ListingNotFoundError,
    PreconditionError,
    StateError,
    TimingError,
    TransferFailedError,
)
from resale_escrow.domain.fees import FeeCalculator, FeeSchedule
from resale_escrow.domain.models import Listing
from resale_escrow.domain.resolvers import ResolverSet
from resale_escrow.domain.timeout_policy import TimeoutPolicy
from resale_escrow.infrastructure.repositories import EventRepository, ListingRepository
from resale_escrow.logging_config import get_logger, transaction_context

if TYPE_CHECKING:
    from collections.abc import Iterator

    from resale_escrow.config import Settings
    from resale_escrow.domain.clock import Clock
    from resale_escrow.domain.ledger_protocol import AssetLedger
    from resale_escrow.domain.models import AuditEvent, Settlement

logger = get_logger(__name__)


class ListingRegistry:
    """Owns the listing table, the resolver set and the open/closed switch."""

    def __init__(
        self,
        owner: str,
        ledger: AssetLedger,
        clock: Clock,
        fee_schedule: FeeSchedule | None = None,
        platform_account: str = "platform-revenue",
        registry_account: str = "listing-registry",
        listings: ListingRepository | None = None,
        events: EventRepository | None = None,
    ) -> None:
        self.owner = owner
        self.platform_account = platform_account
        self.registry_account = registry_account
        self.fee_schedule = fee_schedule or FeeSchedule()
        self._ledger = ledger
        self._clock = clock
        self._fees = FeeCalculator(self.fee_schedule)
        self._timeouts = TimeoutPolicy(self.fee_schedule.confirmation_deadline)
        self._listings = listings if listings is not None else ListingRepository()
        self._events = events if events is not None else EventRepository()
        self._resolvers = ResolverSet(owner)
        self._open = True
        self._registry_lock = threading.Lock()
        self._tx_locks: dict[int, threading.Lock] = {}

    @classmethod
    def from_settings(cls, settings: Settings, ledger: AssetLedger, clock: Clock) -> ListingRegistry:
        """Build a registry from application settings."""
        return cls(
            owner=settings.owner_principal,
            ledger=ledger,
            clock=clock,
            fee_schedule=settings.fee_schedule,
            platform_account=settings.platform_account,
            registry_account=settings.registry_account,
        )

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def fees(self) -> FeeCalculator:
        return self._fees

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_ticket(
        self,
        caller: str,
        unit_price: int,
        quantity: int,
        description: str = "",
    ) -> Listing:
        """Create a listing and take the seller's deposit into custody."""
        if unit_price <= 0:
            raise PreconditionError(ErrorReason.ZERO_PRICE, "Unit price must be positive")
        if quantity <= 0:
            raise PreconditionError(ErrorReason.ZERO_QUANTITY, "Quantity must be positive")

        with self._registry_lock:
            self._require_open()
            deposit = self.fee_schedule.deposit
            with self._ledger.atomic():
                self._pull(caller, self.registry_account, deposit)

            listing = Listing(
                transaction_id=self._listings.next_id(),
                unit_price=unit_price,
                quantity=quantity,
                seller=caller,
                description=description,
                created_at=self._clock.now(),
            )
            self._tx_locks[listing.transaction_id] = threading.Lock()
            self._listings.add(listing)

            with transaction_context(listing.transaction_id):
                self._record(
                    EventType.LISTING_CREATED,
                    caller,
                    listing.transaction_id,
                    {"unit_price": unit_price, "quantity": quantity, "deposit": deposit},
                )
                logger.info(
                    "listing.created",
                    seller=caller,
                    unit_price=unit_price,
                    quantity=quantity,
                )
        return listing

    def purchase_ticket(self, caller: str, transaction_id: int) -> Listing:
        """Buy a listing: fund a new escrow unit with both deposits and the price."""
        with self._locked(transaction_id) as listing:
            if listing.sold:
                raise StateError(ErrorReason.ALREADY_SOLD, "Listing already sold")
            if listing.closed:
                raise StateError(ErrorReason.ALREADY_CLOSED, "Listing is closed")

            # Held until commit so close_factory cannot land in between.
            with self._registry_lock:
                self._require_open()
                if caller == listing.seller:
                    raise PreconditionError(
                        ErrorReason.SELF_PURCHASE, "Seller cannot buy own listing"
                    )

                escrow = EscrowUnit(
                    transaction_id=transaction_id,
                    seller=listing.seller,
                    buyer=caller,
                    unit_price=listing.unit_price,
                    quantity=listing.quantity,
                    platform_account=self.platform_account,
                    ledger=self._ledger,
                    fees=self._fees,
                )
                deposit = self.fee_schedule.deposit
                with self._ledger.atomic():
                    if not self._ledger.transfer(self.registry_account, escrow.account, deposit):
                        raise TransferFailedError(self.registry_account, escrow.account, deposit)
                    self._pull(caller, escrow.account, deposit + listing.ticket_total)

                listing.buyer = caller
                listing.purchase_timestamp = self._clock.now()
                listing.escrow = escrow

                self._record(
                    EventType.LISTING_PURCHASED,
                    caller,
                    transaction_id,
                    {"escrow_account": escrow.account, "funded": escrow.funded_amount},
                )
            logger.info("listing.purchased", buyer=caller, funded=escrow.funded_amount)
        return listing

    def close_listing(self, caller: str, transaction_id: int) -> Listing:
        """Withdraw an unsold listing and refund the seller's deposit."""
        with self._locked(transaction_id) as listing:
            if caller != listing.seller:
                raise AuthorizationError(ErrorReason.NOT_SELLER, "Only the seller can close")
            if listing.sold:
                raise StateError(ErrorReason.ALREADY_SOLD, "Listing already sold")
            if listing.disputed:
                raise StateError(ErrorReason.ALREADY_DISPUTED, "Listing is disputed")
            if listing.closed:
                raise StateError(ErrorReason.ALREADY_CLOSED, "Listing already closed")

            deposit = self.fee_schedule.deposit
            with self._ledger.atomic():
                if not self._ledger.transfer(self.registry_account, listing.seller, deposit):
                    raise TransferFailedError(self.registry_account, listing.seller, deposit)
            listing.withdrawn = True

            self._record(EventType.LISTING_CLOSED, caller, transaction_id, {"refund": deposit})
            logger.info("listing.closed", seller=caller)
        return listing

    # ------------------------------------------------------------------
    # Confirmations
    # ------------------------------------------------------------------

    def seller_confirm(self, caller: str, transaction_id: int) -> Settlement | None:
        """Seller confirms the tickets were delivered."""
        return self._confirm(caller, transaction_id, seller_side=True)

    def buyer_confirm(self, caller: str, transaction_id: int) -> Settlement | None:
        """Buyer confirms the tickets were received."""
        return self._confirm(caller, transaction_id, seller_side=False)

    def _confirm(self, caller: str, transaction_id: int, seller_side: bool) -> Settlement | None:
        with self._locked(transaction_id) as listing:
            if seller_side and caller != listing.seller:
                raise AuthorizationError(ErrorReason.NOT_SELLER, "Only the seller can confirm")
            if not seller_side and (listing.buyer is None or caller != listing.buyer):
                raise AuthorizationError(ErrorReason.NOT_BUYER, "Only the buyer can confirm")
            self._require_active(listing)
            already = listing.seller_confirmed if seller_side else listing.buyer_confirmed
            if already:
                raise StateError(ErrorReason.ALREADY_CONFIRMED, "Party already confirmed")

            settlement = listing.escrow.party_confirmation()

            if seller_side:
                listing.seller_confirmed = True
                listing.seller_confirm_timestamp = self._clock.now()
            else:
                listing.buyer_confirmed = True

            event = EventType.SELLER_CONFIRMED if seller_side else EventType.BUYER_CONFIRMED
            self._record(event, caller, transaction_id)
            logger.info("listing.confirmed", party="seller" if seller_side else "buyer")
            if settlement is not None:
                self._record(EventType.FUNDS_RELEASED, caller, transaction_id, settlement.to_dict())
                logger.info("escrow.released", total=settlement.total)
        return settlement

    # ------------------------------------------------------------------
    # Disputes
    # ------------------------------------------------------------------

    def create_dispute(self, caller: str, transaction_id: int) -> Listing:
        """Either party freezes the escrow pending a resolver decision."""
        with self._locked(transaction_id) as listing:
            if not listing.is_party(caller):
                raise AuthorizationError(ErrorReason.NOT_PARTY, "Only a party can dispute")
            self._require_active(listing)
            listing.escrow.open_dispute()

            self._record(EventType.DISPUTE_OPENED, caller, transaction_id)
            logger.info("escrow.dispute_opened", by=caller)
        return listing

    def resolve_dispute(self, caller: str, transaction_id: int, winner: str) -> Settlement:
        """A resolver names the winning party and the escrow pays out."""
        if caller not in self._resolvers:
            raise AuthorizationError(ErrorReason.NOT_RESOLVER, "Caller is not a resolver")

        with self._locked(transaction_id) as listing:
            if listing.closed:
                raise StateError(ErrorReason.ALREADY_CLOSED, "Listing already closed")
            if not listing.disputed:
                raise StateError(ErrorReason.NOT_DISPUTED, "Listing is not disputed")
            if winner == listing.buyer:
                outcome = DisputeOutcome.BUYER_WINS
            elif winner == listing.seller:
                outcome = DisputeOutcome.SELLER_WINS
            else:
                raise PreconditionError(
                    ErrorReason.INVALID_WINNER, "Winner must be the buyer or the seller"
                )

            settlement = listing.escrow.resolve_dispute(outcome)

            event = (
                EventType.DISPUTE_RESOLVED_BUYER
                if outcome is DisputeOutcome.BUYER_WINS
                else EventType.DISPUTE_RESOLVED_SELLER
            )
            self._record(event, caller, transaction_id, settlement.to_dict())
            logger.info("escrow.dispute_resolved", outcome=outcome.value, resolver=caller)
        return settlement

    # ------------------------------------------------------------------
    # Timeouts
    # ------------------------------------------------------------------

    def claim_timeout(self, caller: str, transaction_id: int) -> Settlement:
        """Settle against whichever party missed its confirmation deadline."""
        with self._locked(transaction_id) as listing:
            if not listing.is_party(caller):
                raise AuthorizationError(ErrorReason.NOT_PARTY, "Only a party can claim timeout")
            self._require_active(listing)

            now = self._clock.now()
            default = self._evaluate_timeout(listing, now)
            if default is None:
                raise TimingError(transaction_id, now)

            settlement = listing.escrow.claim_timeout(default)

            event = (
                EventType.TIMEOUT_SELLER_DEFAULT
                if default is DefaultParty.SELLER
                else EventType.TIMEOUT_BUYER_DEFAULT
            )
            self._record(event, caller, transaction_id, settlement.to_dict())
            logger.info("escrow.timeout_claimed", defaulted=default.value, by=caller)
        return settlement

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_resolver(self, caller: str, principal: str) -> bool:
        self._require_owner(caller)
        with self._registry_lock:
            added = self._resolvers.add(principal)
            if added:
                self._record(EventType.RESOLVER_ADDED, caller, metadata={"resolver": principal})
        if added:
            logger.info("registry.resolver_added", resolver=principal)
        return added

    def remove_resolver(self, caller: str, principal: str) -> bool:
        self._require_owner(caller)
        with self._registry_lock:
            removed = self._resolvers.remove(principal)
            if removed:
                self._record(EventType.RESOLVER_REMOVED, caller, metadata={"resolver": principal})
        if removed:
            logger.info("registry.resolver_removed", resolver=principal)
        return removed

    def close_factory(self, caller: str) -> None:
        """Stop accepting new listings and purchases. There is no reopen."""
        self._require_owner(caller)
        with self._registry_lock:
            if not self._open:
                return
            self._open = False
            self._record(EventType.REGISTRY_CLOSED, caller)
        logger.info("registry.closed", by=caller)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_listing(self, transaction_id: int) -> Listing:
        return self._get_listing_or_raise(transaction_id)

    def list_open(self) -> list[Listing]:
        return self._listings.get_open()

    def listings_for_seller(self, seller: str) -> list[Listing]:
        """Every listing a seller created, closed ones included."""
        return self._listings.get_by_seller(seller)

    def is_resolver(self, principal: str) -> bool:
        return principal in self._resolvers

    def resolvers(self) -> list[str]:
        return self._resolvers.members()

    def get_events(self, transaction_id: int) -> list[AuditEvent]:
        self._get_listing_or_raise(transaction_id)
        return self._events.get_by_transaction(transaction_id)

    def audit_log(self) -> list[AuditEvent]:
        """The whole registry trail, administrative events included."""
        return self._events.get_all()

    def get_settlement(self, transaction_id: int) -> Settlement | None:
        listing = self._get_listing_or_raise(transaction_id)
        return listing.escrow.settlement if listing.escrow is not None else None

    def status(self, transaction_id: int) -> dict:
        """Listing state plus the actions a caller could take right now."""
        listing = self._get_listing_or_raise(transaction_id)
        return {
            "transaction_id": transaction_id,
            "escrow_status": listing.escrow_status.value if listing.escrow_status else None,
            "closed": listing.closed,
            "disputed": listing.disputed,
            "allowed_actions": self._allowed_actions(listing),
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self, transaction_id: int) -> Iterator[Listing]:
        listing = self._get_listing_or_raise(transaction_id)
        with self._tx_locks[transaction_id], transaction_context(transaction_id):
            yield listing

    def _get_listing_or_raise(self, transaction_id: int) -> Listing:
        listing = self._listings.get_by_id(transaction_id)
        if listing is None:
            raise ListingNotFoundError(transaction_id)
        return listing

    def _require_open(self) -> None:
        if not self._open:
            raise StateError(ErrorReason.REGISTRY_CLOSED, "Registry no longer accepts listings")

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise AuthorizationError(ErrorReason.NOT_OWNER, "Only the owner can do this")

    def _require_active(self, listing: Listing) -> None:
        """A purchased listing whose escrow is still OPEN."""
        if listing.buyer is None or listing.escrow is None:
            raise StateError(ErrorReason.NOT_PURCHASED, "Listing has not been purchased")
        if listing.disputed:
            raise StateError(ErrorReason.ALREADY_DISPUTED, "Listing is disputed")
        if listing.closed:
            raise StateError(ErrorReason.ALREADY_CLOSED, "Listing already closed")

    def _pull(self, owner: str, to: str, amount: int) -> None:
        if not self._ledger.transfer_from(self.registry_account, owner, to, amount):
            raise TransferFailedError(owner, to, amount)

    def _evaluate_timeout(self, listing: Listing, now: int) -> DefaultParty | None:
        return self._timeouts.evaluate(
            purchase_timestamp=listing.purchase_timestamp,
            seller_confirm_timestamp=listing.seller_confirm_timestamp,
            seller_confirmed=listing.seller_confirmed,
            buyer_confirmed=listing.buyer_confirmed,
            now=now,
        )

    def _allowed_actions(self, listing: Listing) -> list[str]:
        if listing.closed:
            return []
        if not listing.sold:
            return ["purchase", "close"] if self._open else ["close"]
        if listing.escrow_status is EscrowStatus.DISPUTED:
            return ["resolve"]

        actions = []
        if not listing.seller_confirmed:
            actions.append("confirm_seller")
        if not listing.buyer_confirmed:
            actions.append("confirm_buyer")
        actions.append("dispute")
        if self._evaluate_timeout(listing, self._clock.now()) is not None:
            actions.append("timeout")
        return actions

    def _record(
        self,
        event_type: EventType,
        actor: str,
        transaction_id: int | None = None,
        metadata: dict | None = None,
    ) -> None:
        self._events.record(
            event_type=event_type,
            actor=actor,
            timestamp=self._clock.now(),
            transaction_id=transaction_id,
            metadata=metadata,
        )
