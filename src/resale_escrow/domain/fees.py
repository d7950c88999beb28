"""Fee schedule and pure fee arithmetic.

All amounts are integers in the ledger token's base units. Every formula
multiplies before it divides and truncates toward zero.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FeeSchedule:
    """Marketplace constants.

    Attributes:
        deposit: Collateral each party posts, in base units.
        platform_fee_percent: Percentage of the ticket total kept by the platform.
        per_ticket_fee: Flat fee per ticket unit, in base units.
        dispute_fee_percent: Percentage of the losing deposit handed to the winner.
        confirmation_deadline: Seconds each party has to confirm.
    """

    deposit: int = 50_000_000
    platform_fee_percent: int = 3
    per_ticket_fee: int = 1_250_000
    dispute_fee_percent: int = 30
    confirmation_deadline: int = 86_400

    def __post_init__(self) -> None:
        for name in (
            "deposit",
            "platform_fee_percent",
            "per_ticket_fee",
            "dispute_fee_percent",
            "confirmation_deadline",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.platform_fee_percent > 100 or self.dispute_fee_percent > 100:
            raise ValueError("fee percentages must not exceed 100")


class FeeCalculator:
    """Pure fee computations over a FeeSchedule."""

    def __init__(self, schedule: FeeSchedule) -> None:
        self._schedule = schedule

    @property
    def schedule(self) -> FeeSchedule:
        return self._schedule

    def platform_fee(self, ticket_total: int) -> int:
        return ticket_total * self._schedule.platform_fee_percent // 100

    def per_ticket_fee(self, quantity: int) -> int:
        return quantity * self._schedule.per_ticket_fee

    def dispute_fee(self, deposit: int) -> int:
        return deposit * self._schedule.dispute_fee_percent // 100

    def total_platform_take(self, ticket_total: int, quantity: int) -> int:
        """Platform fee plus per-ticket fees for a released sale."""
        return self.platform_fee(ticket_total) + self.per_ticket_fee(quantity)

    def funded_amount(self, ticket_total: int) -> int:
        """What an escrow unit holds from purchase until closure."""
        return ticket_total + 2 * self._schedule.deposit
