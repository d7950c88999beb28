"""Shared test fixtures for the resale escrow test suite.

Provides:
    - A manual clock pinned at a known timestamp
    - An in-memory ledger with funded, registry-approved party accounts
    - A registry wired to both, plus a ready-made purchased listing

Amounts are in base units (6 decimals); ``TOKEN`` is one whole token.
"""

from __future__ import annotations

import pytest

from resale_escrow.domain.clock import ManualClock
from resale_escrow.domain.fees import FeeSchedule
from resale_escrow.infrastructure.ledger import InMemoryLedger
from resale_escrow.services.registry import ListingRegistry

TOKEN = 1_000_000
START = 1_700_000_000
STARTING_BALANCE = 1_000 * TOKEN

# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fee_schedule() -> FeeSchedule:
    """Deposit 50, platform fee 3%, per-ticket 1.25, dispute fee 30%, 24h deadline."""
    return FeeSchedule()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=START)


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Ledger where every party holds 1000 tokens and has approved the registry."""
    ledger = InMemoryLedger()
    for account in ("seller", "buyer", "mallory"):
        ledger.mint(account, STARTING_BALANCE)
        ledger.approve(account, "registry", STARTING_BALANCE)
    return ledger


# ---------------------------------------------------------------------------
# Service Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registry(ledger: InMemoryLedger, clock: ManualClock, fee_schedule: FeeSchedule) -> ListingRegistry:
    return ListingRegistry(
        owner="owner",
        ledger=ledger,
        clock=clock,
        fee_schedule=fee_schedule,
        platform_account="platform",
        registry_account="registry",
    )


@pytest.fixture
def listing_id(registry: ListingRegistry) -> int:
    """An unsold listing: 2 tickets at 100 tokens each."""
    return registry.list_ticket("seller", 100 * TOKEN, 2, "2x floor seats").transaction_id


@pytest.fixture
def purchased_id(registry: ListingRegistry, listing_id: int) -> int:
    """The same listing after the buyer purchased it at START."""
    registry.purchase_ticket("buyer", listing_id)
    return listing_id
