#!/usr/bin/env python3
"""Resale Escrow — End-to-End Simulation.

Replays four scenarios between a SellerBot and a BuyerBot against an
in-memory ledger and a manual clock:

    Scenario A: Happy Path
        - Seller lists 2 tickets at 100, buyer purchases
        - Both confirm -> funds released, platform keeps its fees

    Scenario B: Seller Timeout
        - Seller never confirms
        - Buyer claims exactly 24h after purchase -> full refund plus both deposits

    Scenario C: Buyer Timeout
        - Seller confirms, buyer goes silent
        - Seller claims exactly 24h later -> price and both deposits minus fees

    Scenario D: Dispute, Buyer Wins
        - Buyer disputes, the owner (a resolver) rules for the buyer
        - Buyer receives price, deposit and the dispute fee; platform keeps the rest

Usage:
    python simulation.py
    python simulation.py --scenario B
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from resale_escrow.config import Settings
from resale_escrow.domain.clock import ManualClock
from resale_escrow.infrastructure.ledger import InMemoryLedger
from resale_escrow.logging_config import get_logger, setup_logging
from resale_escrow.services.registry import ListingRegistry

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

DAY = 86_400
STARTING_BALANCE = 1_000


@dataclass
class World:
    """One isolated marketplace per scenario."""

    settings: Settings
    ledger: InMemoryLedger
    clock: ManualClock
    registry: ListingRegistry

    def tokens(self, whole: int) -> int:
        return self.settings.to_base_units(whole)

    def fmt(self, amount: int) -> str:
        return f"{amount / 10**self.settings.token_decimals:,.2f}"


def build_world() -> World:
    settings = Settings(app_env="development")
    ledger = InMemoryLedger()
    clock = ManualClock()
    registry = ListingRegistry.from_settings(settings, ledger, clock)
    world = World(settings=settings, ledger=ledger, clock=clock, registry=registry)
    for bot in ("seller-bot", "buyer-bot"):
        ledger.mint(bot, world.tokens(STARTING_BALANCE))
        ledger.approve(bot, settings.registry_account, world.tokens(STARTING_BALANCE))
    return world


def banner(text: str) -> None:
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    print(f"\n--- {text} ---\n")


def print_balances(world: World) -> None:
    start = world.tokens(STARTING_BALANCE)
    for account in ("seller-bot", "buyer-bot"):
        delta = world.ledger.balance_of(account) - start
        sign = "+" if delta >= 0 else "-"
        print(f"  {account:<20} {sign}{world.fmt(abs(delta))}")
    platform = world.ledger.balance_of(world.settings.platform_account)
    print(f"  {world.settings.platform_account:<20} +{world.fmt(platform)}")


def print_audit_trail(world: World, transaction_id: int) -> None:
    print("\n  Audit Trail:")
    for evt in world.registry.get_events(transaction_id):
        print(f"    {evt.sequence}. [{evt.event_type}] by {evt.actor} at t={evt.timestamp}")
    print()


def list_and_buy(world: World) -> int:
    listing = world.registry.list_ticket(
        "seller-bot", world.tokens(100), 2, "2x general admission"
    )
    world.registry.purchase_ticket("buyer-bot", listing.transaction_id)
    logger.info("simulation.purchased", transaction_id=listing.transaction_id)
    return listing.transaction_id


# ===========================================================================
# Scenarios
# ===========================================================================
def scenario_a_happy_path() -> None:
    banner("SCENARIO A: Happy Path")
    world = build_world()
    tx = list_and_buy(world)

    section("Both parties confirm")
    world.registry.seller_confirm("seller-bot", tx)
    settlement = world.registry.buyer_confirm("buyer-bot", tx)
    print(f"  Released via {settlement.path}, total {world.fmt(settlement.total)}")
    print_balances(world)
    print_audit_trail(world, tx)


def scenario_b_seller_timeout() -> None:
    banner("SCENARIO B: Seller Timeout")
    world = build_world()
    tx = list_and_buy(world)

    section("24h pass without a seller confirmation")
    world.clock.advance(DAY)
    settlement = world.registry.claim_timeout("buyer-bot", tx)
    print(f"  Defaulted: {settlement.detail}")
    print_balances(world)
    print_audit_trail(world, tx)


def scenario_c_buyer_timeout() -> None:
    banner("SCENARIO C: Buyer Timeout")
    world = build_world()
    tx = list_and_buy(world)

    section("Seller confirms, buyer goes silent for 24h")
    world.registry.seller_confirm("seller-bot", tx)
    world.clock.advance(DAY)
    settlement = world.registry.claim_timeout("seller-bot", tx)
    print(f"  Defaulted: {settlement.detail}")
    print_balances(world)
    print_audit_trail(world, tx)


def scenario_d_dispute_buyer_wins() -> None:
    banner("SCENARIO D: Dispute, Buyer Wins")
    world = build_world()
    tx = list_and_buy(world)

    section("Buyer disputes, owner resolves for the buyer")
    world.registry.create_dispute("buyer-bot", tx)
    settlement = world.registry.resolve_dispute(world.registry.owner, tx, "buyer-bot")
    print(f"  Outcome: {settlement.detail}")
    print_balances(world)
    print_audit_trail(world, tx)


SCENARIOS = {
    "A": scenario_a_happy_path,
    "B": scenario_b_seller_timeout,
    "C": scenario_c_buyer_timeout,
    "D": scenario_d_dispute_buyer_wins,
}


# ===========================================================================
# Main
# ===========================================================================
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Resale Escrow Simulation")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default=None,
        help="Run a specific scenario (A-D). Default: run all.",
    )
    args = parser.parse_args()

    selected = [args.scenario] if args.scenario else sorted(SCENARIOS)
    for key in selected:
        SCENARIOS[key]()

    print("\n" + "=" * 70)
    print("  ALL SCENARIOS COMPLETED")
    print("=" * 70 + "\n")
