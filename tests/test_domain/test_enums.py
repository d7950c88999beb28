"""Tests for domain enumerations."""

from __future__ import annotations

from resale_escrow.domain.enums import (
    DefaultParty,
    DisputeOutcome,
    ErrorReason,
    EscrowStatus,
    EventType,
)


class TestEscrowStatus:
    def test_all_statuses_exist(self) -> None:
        assert {s.value for s in EscrowStatus} == {"OPEN", "DISPUTED", "CLOSED"}

    def test_status_is_str_enum(self) -> None:
        assert isinstance(EscrowStatus.OPEN, str)
        assert EscrowStatus.CLOSED == "CLOSED"


class TestVariants:
    def test_dispute_outcomes(self) -> None:
        assert {o.value for o in DisputeOutcome} == {"BUYER_WINS", "SELLER_WINS"}

    def test_default_parties(self) -> None:
        assert {p.value for p in DefaultParty} == {"SELLER", "BUYER"}


class TestEventType:
    def test_all_event_types_exist(self) -> None:
        # 3 listing + 3 confirmation + 3 dispute + 2 timeout + 3 admin
        assert len(EventType) == 14


class TestErrorReason:
    def test_reasons_are_unique_strings(self) -> None:
        values = [r.value for r in ErrorReason]
        assert len(values) == len(set(values))
        assert ErrorReason.DEADLINE_NOT_REACHED == "DEADLINE_NOT_REACHED"
