"""Ledger REST API routes.

The in-memory ledger stands in for the external asset ledger, so these
routes let clients inspect balances and grant the registry an allowance.
Minting is only exposed in development.

Routes:
    GET    /api/v1/ledger/{account}   — Balance of an account
    POST   /api/v1/ledger/approve     — Grant an allowance
    POST   /api/v1/ledger/mint        — Credit demo funds (development only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from resale_escrow.api.deps import get_app_settings, get_ledger
from resale_escrow.config import Settings
from resale_escrow.infrastructure.ledger import InMemoryLedger
from resale_escrow.logging_config import get_logger
from resale_escrow.schemas.listing import ApproveRequest, BalanceResponse, MintRequest

router = APIRouter(prefix="/api/v1/ledger", tags=["Ledger"])
logger = get_logger(__name__)


@router.get("/{account}", response_model=BalanceResponse, summary="Get balance")
def get_balance(
    account: str,
    ledger: InMemoryLedger = Depends(get_ledger),
) -> BalanceResponse:
    return BalanceResponse(account=account, balance=ledger.balance_of(account))


@router.post("/approve", response_model=BalanceResponse, summary="Grant an allowance")
def approve(
    request: ApproveRequest,
    ledger: InMemoryLedger = Depends(get_ledger),
) -> BalanceResponse:
    ledger.approve(request.owner, request.spender, request.amount)
    return BalanceResponse(account=request.owner, balance=ledger.balance_of(request.owner))


@router.post("/mint", response_model=BalanceResponse, summary="Credit demo funds")
def mint(
    request: MintRequest,
    ledger: InMemoryLedger = Depends(get_ledger),
    settings: Settings = Depends(get_app_settings),
) -> BalanceResponse:
    if not settings.is_development:
        raise HTTPException(status_code=403, detail="Minting is disabled outside development")
    ledger.mint(request.account, request.amount)
    logger.info("ledger.faucet", account=request.account, amount=request.amount)
    return BalanceResponse(account=request.account, balance=ledger.balance_of(request.account))
