"""In-memory asset ledger.

Stands in for the external token ledger in development, the simulation and
tests. Balances and allowances live in dicts guarded by a re-entrant lock;
``atomic()`` snapshots both and restores them if the block raises, which
gives the escrow the all-or-nothing batch semantics it needs.

Usage:
    ledger = InMemoryLedger()
    ledger.mint("alice", 500_000_000)
    with ledger.atomic():
        ledger.transfer("alice", "bob", 1_000_000)
"""

from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import TYPE_CHECKING

from resale_escrow.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)


class InMemoryLedger:
    """Thread-safe balances with allowance-based delegated transfers."""

    def __init__(self) -> None:
        self._balances: defaultdict[str, int] = defaultdict(int)
        self._allowances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._failing_destinations: set[str] = set()
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        with self._lock:
            return self._allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mint(self, account: str, amount: int) -> None:
        """Credit new funds to an account (test and demo faucets only)."""
        if amount < 0:
            raise ValueError("amount must not be negative")
        with self._lock:
            self._balances[account] += amount
        logger.debug("ledger.minted", account=account, amount=amount)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            self._allowances[(owner, spender)] = amount
        logger.debug("ledger.approved", owner=owner, spender=spender, amount=amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        with self._lock:
            if not self._can_move(sender, to, amount):
                logger.warning(
                    "ledger.transfer_rejected", sender=sender, to=to, amount=amount
                )
                return False
            self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        with self._lock:
            if self._allowances.get((owner, spender), 0) < amount:
                logger.warning(
                    "ledger.allowance_exceeded", spender=spender, owner=owner, amount=amount
                )
                return False
            if not self._can_move(owner, to, amount):
                logger.warning(
                    "ledger.transfer_rejected", sender=owner, to=to, amount=amount
                )
                return False
            self._allowances[(owner, spender)] -= amount
            self._move(owner, to, amount)
        return True

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Commit every transfer in the block together, or none of them.

        Nested blocks join the outermost one.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            balances = dict(self._balances)
            allowances = dict(self._allowances)
            self._depth = 1
            try:
                yield
            except BaseException:
                self._balances = defaultdict(int, balances)
                self._allowances = defaultdict(int, allowances)
                logger.info("ledger.rolled_back")
                raise
            finally:
                self._depth = 0

    # ------------------------------------------------------------------
    # Fault injection
    # ------------------------------------------------------------------

    def fail_transfers_to(self, account: str) -> None:
        """Make every transfer credited to ``account`` report failure."""
        with self._lock:
            self._failing_destinations.add(account)

    def clear_failures(self) -> None:
        with self._lock:
            self._failing_destinations.clear()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _can_move(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or to in self._failing_destinations:
            return False
        return self._balances.get(sender, 0) >= amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        self._balances[sender] -= amount
        self._balances[to] += amount
