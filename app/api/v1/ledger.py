# app/api/v1/ledger.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.db.session import get_db
from app.schemas.fungible import (
    AllowanceResponse,
    BalanceResponse,
    FungibleApproveRequest,
    FungibleMintRequest,
    FungibleTransferRequest,
)
from app.core.types import normalize_address
from app.services.access_control_service import AccessControlService
from app.services.fungible_ledger_service import FungibleLedgerService

router = APIRouter(prefix="/ledger")
logger = logging.getLogger(__name__)


@router.get("/balances/{address}", response_model=BalanceResponse)
async def get_balance(address: str, db: Session = Depends(get_db)):
    address = normalize_address(address)
    return BalanceResponse(address=address, balance=FungibleLedgerService().balance_of(db, address))


@router.get("/allowances/{owner}/{spender}", response_model=AllowanceResponse)
async def get_allowance(owner: str, spender: str, db: Session = Depends(get_db)):
    owner, spender = normalize_address(owner), normalize_address(spender)
    amount = FungibleLedgerService().allowance(db, owner=owner, spender=spender)
    return AllowanceResponse(owner=owner, spender=spender, amount=amount)


@router.post("/mint", response_model=BalanceResponse)
async def mint(
    req: FungibleMintRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    # faucet is owner-only over the API
    AccessControlService().require_owner(db, caller)
    logger.info("[ledger] faucet mint to=%s amount=%s", req.to, req.amount)
    balance = FungibleLedgerService().mint(db, to=req.to, amount=req.amount)
    return BalanceResponse(address=req.to, balance=balance)


@router.post("/transfer", response_model=BalanceResponse)
async def transfer(
    req: FungibleTransferRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = FungibleLedgerService()
    svc.transfer(db, sender=caller, to=req.to, amount=req.amount)
    return BalanceResponse(address=caller, balance=svc.balance_of(db, caller))


@router.post("/approve", response_model=AllowanceResponse)
async def approve(
    req: FungibleApproveRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = FungibleLedgerService()
    svc.approve(db, owner=caller, spender=req.spender, amount=req.amount)
    return AllowanceResponse(owner=caller, spender=req.spender, amount=req.amount)
