# app/api/v1/events.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.events import MarketEventList, MarketEventOut
from app.services.event_service import EventService

router = APIRouter(prefix="/events")


@router.get("", response_model=MarketEventList)
async def list_events(
    event_type: Optional[str] = Query(default=None),
    since_seq: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    svc = EventService()
    rows = svc.list_events(db, event_type=event_type, since_seq=since_seq)
    return MarketEventList(
        events=[
            MarketEventOut(
                seq=e.seq,
                event_type=e.event_type,
                block_time=e.block_time,
                args=e.payload_json.get("args", {}),
                entry_hash=e.entry_hash,
            )
            for e in rows
        ],
        chain_valid=svc.verify_chain(db),
    )
