"""Tests for the InMemoryLedger asset collaborator."""

from __future__ import annotations

import pytest

from resale_escrow.domain.ledger_protocol import AssetLedger
from resale_escrow.infrastructure.ledger import InMemoryLedger


@pytest.fixture
def ledger() -> InMemoryLedger:
    ledger = InMemoryLedger()
    ledger.mint("alice", 100)
    return ledger


class TestTransfers:
    def test_satisfies_protocol(self, ledger: InMemoryLedger) -> None:
        assert isinstance(ledger, AssetLedger)

    def test_transfer_moves_funds(self, ledger: InMemoryLedger) -> None:
        assert ledger.transfer("alice", "bob", 40) is True
        assert ledger.balance_of("alice") == 60
        assert ledger.balance_of("bob") == 40

    def test_overdraft_fails_without_side_effects(self, ledger: InMemoryLedger) -> None:
        assert ledger.transfer("alice", "bob", 101) is False
        assert ledger.balance_of("alice") == 100
        assert ledger.balance_of("bob") == 0

    def test_negative_amount_fails(self, ledger: InMemoryLedger) -> None:
        assert ledger.transfer("alice", "bob", -1) is False

    def test_unknown_account_has_zero_balance(self, ledger: InMemoryLedger) -> None:
        assert ledger.balance_of("nobody") == 0

    def test_mint_rejects_negative(self, ledger: InMemoryLedger) -> None:
        with pytest.raises(ValueError):
            ledger.mint("alice", -5)


class TestAllowances:
    def test_transfer_from_spends_allowance(self, ledger: InMemoryLedger) -> None:
        ledger.approve("alice", "registry", 70)
        assert ledger.transfer_from("registry", "alice", "escrow", 50) is True
        assert ledger.allowance("alice", "registry") == 20
        assert ledger.balance_of("escrow") == 50

    def test_transfer_from_without_allowance_fails(self, ledger: InMemoryLedger) -> None:
        assert ledger.transfer_from("registry", "alice", "escrow", 1) is False
        assert ledger.balance_of("alice") == 100

    def test_allowance_beyond_balance_fails(self, ledger: InMemoryLedger) -> None:
        ledger.approve("alice", "registry", 500)
        assert ledger.transfer_from("registry", "alice", "escrow", 200) is False
        assert ledger.allowance("alice", "registry") == 500


class TestAtomic:
    def test_commit(self, ledger: InMemoryLedger) -> None:
        with ledger.atomic():
            ledger.transfer("alice", "bob", 10)
            ledger.transfer("alice", "carol", 10)
        assert ledger.balance_of("alice") == 80

    def test_rollback_on_exception(self, ledger: InMemoryLedger) -> None:
        ledger.approve("alice", "registry", 50)
        with pytest.raises(RuntimeError), ledger.atomic():
            ledger.transfer("alice", "bob", 10)
            ledger.transfer_from("registry", "alice", "carol", 20)
            raise RuntimeError("boom")

        assert ledger.balance_of("alice") == 100
        assert ledger.balance_of("bob") == 0
        assert ledger.balance_of("carol") == 0
        assert ledger.allowance("alice", "registry") == 50

    def test_nested_blocks_join_outer(self, ledger: InMemoryLedger) -> None:
        with pytest.raises(RuntimeError), ledger.atomic():
            with ledger.atomic():
                ledger.transfer("alice", "bob", 10)
            raise RuntimeError("outer fails")

        assert ledger.balance_of("bob") == 0
        assert ledger.total_supply() == 100

    def test_failing_destination(self, ledger: InMemoryLedger) -> None:
        ledger.fail_transfers_to("bob")
        assert ledger.transfer("alice", "bob", 1) is False
        ledger.clear_failures()
        assert ledger.transfer("alice", "bob", 1) is True
