# app/api/v1/self_service.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.core.types import normalize_address
from app.db.session import atomic, get_db
from app.schemas.self_service import (
    AllowedArtistRequest,
    CreatorStatusResponse,
    CurationLimitsRequest,
    OpenToAllRequest,
    SelfServiceEditionForRequest,
    SelfServiceEditionRequest,
    SelfServiceEditionResponse,
)
from app.services.self_service_curation_service import SelfServiceCurationService

router = APIRouter(prefix="/self-service")


def _edition_kwargs(req: SelfServiceEditionRequest) -> dict:
    return dict(
        enable_auction=req.enable_auction,
        optional_split_address=req.optional_split_address,
        optional_split_rate=req.optional_split_rate,
        total_available=req.total_available,
        price_in_wei=req.price_in_wei,
        start_date=req.start_date,
        end_date=req.end_date,
        artist_commission=req.artist_commission,
        edition_type=req.edition_type,
        token_uri=req.token_uri,
    )


@router.get("/creators/{artist}", response_model=CreatorStatusResponse)
async def creator_status(
    artist: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    artist = normalize_address(artist)
    svc = SelfServiceCurationService(clock)
    return CreatorStatusResponse(
        artist=artist,
        allowed=svc.is_allowed_artist(db, artist),
        can_create_another_edition=svc.can_create_another_edition(db, artist),
    )


@router.post("/editions", response_model=SelfServiceEditionResponse)
async def create_edition(
    req: SelfServiceEditionRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    number = SelfServiceCurationService(clock).create_edition(
        db, creator=caller, **_edition_kwargs(req)
    )
    return SelfServiceEditionResponse(edition_number=number)


@router.post("/editions/for-artist", response_model=SelfServiceEditionResponse)
async def create_edition_for(
    req: SelfServiceEditionForRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    number = SelfServiceCurationService(clock).create_edition_for(
        db, caller=caller, artist=req.artist, **_edition_kwargs(req)
    )
    return SelfServiceEditionResponse(edition_number=number)


@router.put("/open-to-all")
async def set_open_to_all(
    req: OpenToAllRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = SelfServiceCurationService()
    svc.set_open_to_all(db, caller=caller, open_to_all=req.open_to_all)
    return {"open_to_all": svc.is_open_to_all(db)}


@router.put("/allowed-artists", response_model=CreatorStatusResponse)
async def set_allowed_artist(
    req: AllowedArtistRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = SelfServiceCurationService(clock)
    svc.set_allowed_artist(db, caller=caller, artist=req.artist, allowed=req.allowed)
    return CreatorStatusResponse(
        artist=req.artist,
        allowed=svc.is_allowed_artist(db, req.artist),
        can_create_another_edition=svc.can_create_another_edition(db, req.artist),
    )


@router.put("/limits")
async def set_limits(
    req: CurationLimitsRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = SelfServiceCurationService()
    with atomic(db):
        if req.min_price_in_wei is not None:
            svc.set_min_price_per_edition(db, caller=caller, min_price=req.min_price_in_wei)
        if req.max_edition_size is not None:
            svc.set_max_edition_size(db, caller=caller, max_size=req.max_edition_size)
        if req.freeze_window is not None:
            svc.set_freeze_window(db, caller=caller, window=req.freeze_window)
    return {
        "min_price_in_wei": svc.min_price_per_edition(db),
        "max_edition_size": svc.max_edition_size(db),
        "freeze_window": svc.freeze_window(db),
    }
