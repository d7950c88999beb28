"""Domain records: listings, payouts, settlements and audit events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resale_escrow.domain.enums import EscrowStatus, EventType, SettlementPath
    from resale_escrow.domain.escrow_unit import EscrowUnit


@dataclass(frozen=True)
class Payout:
    """A single disbursement out of an escrow account."""

    recipient: str
    amount: int


@dataclass(frozen=True)
class Settlement:
    """Everything a terminal transition disbursed.

    Attributes:
        transaction_id: The listing this settlement closed.
        path: Which of the three exclusive closure paths fired.
        payouts: Transfers in the order they were executed (zero amounts omitted).
        detail: The outcome or default variant that selected the split.
    """

    transaction_id: int
    path: SettlementPath
    payouts: tuple[Payout, ...]
    detail: str | None = None

    @property
    def total(self) -> int:
        return sum(p.amount for p in self.payouts)

    def amount_for(self, recipient: str) -> int:
        return sum(p.amount for p in self.payouts if p.recipient == recipient)

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "path": self.path.value,
            "detail": self.detail,
            "payouts": [{"recipient": p.recipient, "amount": p.amount} for p in self.payouts],
        }


@dataclass
class Listing:
    """Public record describing a resalable ticket batch and its sale state.

    Once an escrow unit exists it is the single source of truth for
    ``closed`` and ``disputed``; before purchase only ``withdrawn`` (set by
    closeListing) can close the listing.
    """

    transaction_id: int
    unit_price: int
    quantity: int
    seller: str
    description: str = ""
    created_at: int = 0
    buyer: str | None = None
    seller_confirmed: bool = False
    buyer_confirmed: bool = False
    purchase_timestamp: int | None = None
    seller_confirm_timestamp: int | None = None
    escrow: EscrowUnit | None = field(default=None, repr=False)
    withdrawn: bool = False

    @property
    def ticket_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def sold(self) -> bool:
        return self.buyer is not None

    @property
    def closed(self) -> bool:
        if self.escrow is not None:
            return self.escrow.closed
        return self.withdrawn

    @property
    def disputed(self) -> bool:
        return self.escrow is not None and self.escrow.disputed

    @property
    def escrow_status(self) -> EscrowStatus | None:
        return self.escrow.status if self.escrow is not None else None

    def is_party(self, principal: str) -> bool:
        return principal == self.seller or (self.buyer is not None and principal == self.buyer)

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "ticket_total": self.ticket_total,
            "seller": self.seller,
            "buyer": self.buyer,
            "description": self.description,
            "seller_confirmed": self.seller_confirmed,
            "buyer_confirmed": self.buyer_confirmed,
            "disputed": self.disputed,
            "closed": self.closed,
            "escrow_status": self.escrow_status.value if self.escrow_status else None,
            "escrow_account": self.escrow.account if self.escrow is not None else None,
            "purchase_timestamp": self.purchase_timestamp,
            "seller_confirm_timestamp": self.seller_confirm_timestamp,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class AuditEvent:
    """Immutable record of one accepted registry operation."""

    sequence: int
    event_type: EventType
    actor: str
    timestamp: int
    transaction_id: int | None = None
    metadata: dict = field(default_factory=dict)
