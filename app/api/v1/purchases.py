# app/api/v1/purchases.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.db.session import get_db
from app.schemas.tokens import PurchaseRequest, TokenIdResponse
from app.services.purchase_service import PurchaseService

router = APIRouter(prefix="/purchases")


@router.post("", response_model=TokenIdResponse)
async def purchase(
    req: PurchaseRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    token_id = PurchaseService(clock).purchase_to(
        db,
        caller=caller,
        to=req.to or caller,
        number=req.edition_number,
        amount=req.amount,
    )
    return TokenIdResponse(token_id=token_id)
