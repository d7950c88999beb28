"""EscrowUnit — custody of one transaction's funds until a single disbursement.

One unit exists per purchased listing. It owns a dedicated ledger account
(``escrow:<transaction_id>``) that holds ``ticket_total + 2 * deposit`` from
purchase until closure, and it is the only code that moves money out of it.

Every terminal transition follows the same shape:
    1. Ask the state machine whether the event is legal (no side effects).
    2. Compute the payout split.
    3. Execute all transfers inside ``ledger.atomic()``.
    4. Commit the new status only once every transfer succeeded.

A failed transfer raises TransferFailedError out of step 3, the ledger rolls
back the transfers already made, and step 4 never runs.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from statemachine.exceptions import TransitionNotAllowed

from resale_escrow.domain.enums import (
    DefaultParty,
    DisputeOutcome,
    ErrorReason,
    EscrowStatus,
    SettlementPath,
)
from resale_escrow.domain.exceptions import (
    InsufficientEscrowBalanceError,
    InvalidStateTransitionError,
    PreconditionError,
    TransferFailedError,
)
from resale_escrow.domain.models import Payout, Settlement
from resale_escrow.domain.state_machine import validate_transition

if TYPE_CHECKING:
    from resale_escrow.domain.fees import FeeCalculator
    from resale_escrow.domain.ledger_protocol import AssetLedger

REQUIRED_CONFIRMATIONS = 2


def escrow_account(transaction_id: int) -> str:
    """Ledger account name that custodies a transaction's funds."""
    return f"escrow:{transaction_id}"


class EscrowUnit:
    """The per-transaction escrow state machine and payout engine."""

    def __init__(
        self,
        transaction_id: int,
        seller: str,
        buyer: str,
        unit_price: int,
        quantity: int,
        platform_account: str,
        ledger: AssetLedger,
        fees: FeeCalculator,
    ) -> None:
        self.transaction_id = transaction_id
        self.seller = seller
        self.buyer = buyer
        self.unit_price = unit_price
        self.quantity = quantity
        self.platform_account = platform_account
        self.account = escrow_account(transaction_id)
        self.confirmations = 0
        self.settlement: Settlement | None = None
        self._status = EscrowStatus.OPEN
        self._ledger = ledger
        self._fees = fees
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def status(self) -> EscrowStatus:
        return self._status

    @property
    def disputed(self) -> bool:
        return self._status is EscrowStatus.DISPUTED

    @property
    def closed(self) -> bool:
        return self._status is EscrowStatus.CLOSED

    @property
    def deposit(self) -> int:
        return self._fees.schedule.deposit

    @property
    def ticket_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def funded_amount(self) -> int:
        return self._fees.funded_amount(self.ticket_total)

    @property
    def held_balance(self) -> int:
        return self._ledger.balance_of(self.account)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def party_confirmation(self) -> Settlement | None:
        """Record one party's confirmation; the second one releases the funds.

        Returns the Settlement when this call closed the unit, else None.
        """
        with self._lock:
            if self._status is not EscrowStatus.OPEN:
                raise InvalidStateTransitionError(
                    self._status.value, "confirm", self._blocking_reason()
                )
            if self.confirmations + 1 < REQUIRED_CONFIRMATIONS:
                self.confirmations += 1
                return None

            target = self._guard("release")
            held = self._require_funded()

            platform_take = self._fees.total_platform_take(self.ticket_total, self.quantity)
            seller_amount = self.ticket_total + self.deposit - platform_take
            payouts = [
                Payout(self.buyer, self.deposit),
                Payout(self.seller, seller_amount),
                Payout(self.platform_account, held - self.deposit - seller_amount),
            ]
            settlement = self._disburse(SettlementPath.CONFIRMATION_RELEASE, payouts)
            self.confirmations = REQUIRED_CONFIRMATIONS
            self._commit(target, settlement)
            return settlement

    def open_dispute(self) -> None:
        """Freeze the unit pending a resolver decision. No funds move."""
        with self._lock:
            self._status = EscrowStatus(self._guard("open_dispute"))

    def resolve_dispute(self, outcome: DisputeOutcome) -> Settlement:
        """Pay out a disputed unit according to the resolver's decision."""
        with self._lock:
            target = self._guard("resolve_dispute")

            held = self._require_funded()

            dispute_fee = self._fees.dispute_fee(self.deposit)
            match outcome:
                case DisputeOutcome.BUYER_WINS:
                    buyer_amount = self.ticket_total + self.deposit + dispute_fee
                    payouts = [
                        Payout(self.buyer, buyer_amount),
                        Payout(self.platform_account, held - buyer_amount),
                    ]
                case DisputeOutcome.SELLER_WINS:
                    seller_amount = self.deposit + dispute_fee
                    payouts = [
                        Payout(self.buyer, self.ticket_total),
                        Payout(self.seller, seller_amount),
                        Payout(self.platform_account, held - self.ticket_total - seller_amount),
                    ]
                case _:
                    raise PreconditionError(ErrorReason.INVALID_WINNER)

            settlement = self._disburse(
                SettlementPath.DISPUTE_RESOLUTION, payouts, detail=outcome.value
            )
            self._commit(target, settlement)
            return settlement

    def claim_timeout(self, default: DefaultParty) -> Settlement:
        """Settle an open unit against the party that missed its deadline.

        Whether a deadline actually lapsed is decided by TimeoutPolicy before
        this is called; the unit only enforces that it is still OPEN.
        """
        with self._lock:
            target = self._guard("claim_timeout")
            held = self._require_funded()

            match default:
                case DefaultParty.SELLER:
                    payouts = [
                        Payout(self.buyer, self.funded_amount),
                        Payout(self.platform_account, held - self.funded_amount),
                    ]
                case DefaultParty.BUYER:
                    platform_take = self._fees.total_platform_take(
                        self.ticket_total, self.quantity
                    )
                    seller_amount = self.funded_amount - platform_take
                    payouts = [
                        Payout(self.seller, seller_amount),
                        Payout(self.platform_account, held - seller_amount),
                    ]
                case _:
                    raise ValueError(f"Unknown default party: {default!r}")

            settlement = self._disburse(SettlementPath.TIMEOUT, payouts, detail=default.value)
            self._commit(target, settlement)
            return settlement

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _guard(self, event_name: str) -> str:
        """Return the target status for ``event_name`` or raise without side effects."""
        try:
            return validate_transition(self._status.value, event_name)
        except TransitionNotAllowed as err:
            raise InvalidStateTransitionError(
                self._status.value, event_name, self._blocking_reason(event_name)
            ) from err

    def _require_funded(self) -> int:
        """Return the held balance, which must cover the funded amount.

        Anything held above the funded amount is paid to the platform so the
        account is empty after closure.
        """
        held = self.held_balance
        if held < self.funded_amount:
            raise InsufficientEscrowBalanceError(self.funded_amount, held)
        return held

    def _blocking_reason(self, event_name: str | None = None) -> ErrorReason:
        if self._status is EscrowStatus.CLOSED:
            return ErrorReason.ALREADY_CLOSED
        if event_name == "resolve_dispute":
            return ErrorReason.NOT_DISPUTED
        if self._status is EscrowStatus.DISPUTED:
            return ErrorReason.ALREADY_DISPUTED
        return ErrorReason.INVALID_TRANSITION

    def _disburse(
        self,
        path: SettlementPath,
        payouts: list[Payout],
        detail: str | None = None,
    ) -> Settlement:
        executed = tuple(p for p in payouts if p.amount > 0)
        with self._ledger.atomic():
            for payout in executed:
                if not self._ledger.transfer(self.account, payout.recipient, payout.amount):
                    raise TransferFailedError(self.account, payout.recipient, payout.amount)
        return Settlement(
            transaction_id=self.transaction_id,
            path=path,
            payouts=executed,
            detail=detail,
        )

    def _commit(self, target: str, settlement: Settlement) -> None:
        self._status = EscrowStatus(target)
        self.settlement = settlement

    def __repr__(self) -> str:
        return (
            f"<EscrowUnit tx={self.transaction_id} status={self._status} "
            f"confirmations={self.confirmations}>"
        )
