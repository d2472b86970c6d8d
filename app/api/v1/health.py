# app/api/v1/health.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.market_state import MarketState

router = APIRouter()


@router.get("/health")
async def health(request: Request, db: Session = Depends(get_db)):
    rid = getattr(request.state, "request_id", None)
    return {
        "status": "ok",
        "bootstrapped": db.get(MarketState, 1) is not None,
        "request_id": rid,
    }
