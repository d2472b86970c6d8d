# app/api/v1/market.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.db.session import get_db
from app.schemas.primitives import Address
from app.services.market_service import MarketService

router = APIRouter(prefix="/market")


class BaseUriRequest(BaseModel):
    base_uri: str = Field(..., min_length=1)


class AccountRequest(BaseModel):
    account: Address


def _status(db: Session, svc: MarketService) -> dict:
    s = svc.state(db)
    return {
        "owner": s.owner,
        "paused": s.paused,
        "commission_account": s.commission_account,
        "token_base_uri": s.token_base_uri,
    }


@router.get("")
async def market_status(db: Session = Depends(get_db)):
    return _status(db, MarketService())


@router.post("/pause")
async def pause(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = MarketService(clock)
    svc.pause(db, caller=caller)
    return _status(db, svc)


@router.post("/unpause")
async def unpause(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = MarketService(clock)
    svc.unpause(db, caller=caller)
    return _status(db, svc)


@router.put("/base-uri")
async def update_token_base_uri(
    req: BaseUriRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = MarketService()
    svc.update_token_base_uri(db, caller=caller, base_uri=req.base_uri)
    return _status(db, svc)


@router.put("/commission-account")
async def update_commission_account(
    req: AccountRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = MarketService()
    svc.update_commission_account(db, caller=caller, account=req.account)
    return _status(db, svc)


@router.post("/reclaim")
async def reclaim(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    amount = MarketService().reclaim(db, caller=caller)
    return {"reclaimed": amount}
