"""Tests for Settings and its mapping onto the domain fee schedule."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from resale_escrow.config import Settings
from resale_escrow.domain.fees import FeeSchedule


def test_defaults_match_fee_schedule() -> None:
    assert Settings().fee_schedule == FeeSchedule()


def test_overrides_flow_into_fee_schedule() -> None:
    settings = Settings(deposit=10, confirmation_deadline_seconds=60)
    assert settings.fee_schedule.deposit == 10
    assert settings.fee_schedule.confirmation_deadline == 60


def test_to_base_units() -> None:
    assert Settings().to_base_units(50) == 50_000_000
    assert Settings(token_decimals=2).to_base_units(3) == 300


def test_percent_out_of_range_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(platform_fee_percent=101)


def test_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("OWNER_PRINCIPAL", "ops")
    settings = Settings()
    assert not settings.is_development
    assert settings.owner_principal == "ops"
