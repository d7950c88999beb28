"""Asset Ledger Protocol.

Defines the value-movement capability the escrow consumes. This is a Protocol
(structural subtyping) so a concrete ledger doesn't need to inherit from a
base class, it just needs to match the shape.

The domain layer has ZERO imports from any particular ledger backend.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """Atomic debit/credit with success/failure signalling.

    Concrete implementations:
        - infrastructure/ledger.py  (InMemoryLedger)
    """

    def balance_of(self, account: str) -> int:
        """Return the balance held by ``account``."""
        ...

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Let ``spender`` move up to ``amount`` out of ``owner``."""
        ...

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``to``. False on failure."""
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move ``amount`` from ``owner`` to ``to`` against the spender's allowance."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Group transfers: all commit together, or all roll back if the block raises."""
        ...
