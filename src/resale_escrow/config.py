"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. All settings are validated
at startup — if a setting is malformed, the app fails fast with a clear
error message.

Usage:
    from resale_escrow.config import get_settings
    settings = get_settings()
    print(settings.fee_schedule.deposit)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from resale_escrow.domain.fees import FeeSchedule


class Settings(BaseSettings):
    """Central configuration for the resale escrow service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # --- Principals / Accounts ---
    owner_principal: str = "platform-owner"
    platform_account: str = "platform-revenue"
    registry_account: str = "listing-registry"

    # --- Token ---
    token_decimals: int = Field(default=6, ge=0, le=18)

    # --- Escrow Constants (base units) ---
    deposit: int = Field(default=50_000_000, ge=0)
    platform_fee_percent: int = Field(default=3, ge=0, le=100)
    per_ticket_fee: int = Field(default=1_250_000, ge=0)
    dispute_fee_percent: int = Field(default=30, ge=0, le=100)
    confirmation_deadline_seconds: int = Field(default=86_400, ge=0)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def fee_schedule(self) -> FeeSchedule:
        """Escrow constants as the domain's value object."""
        return FeeSchedule(
            deposit=self.deposit,
            platform_fee_percent=self.platform_fee_percent,
            per_ticket_fee=self.per_ticket_fee,
            dispute_fee_percent=self.dispute_fee_percent,
            confirmation_deadline=self.confirmation_deadline_seconds,
        )

    def to_base_units(self, whole_tokens: int) -> int:
        """Convert a whole-token amount to ledger base units."""
        return whole_tokens * 10**self.token_decimals


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
