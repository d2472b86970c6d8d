# app/api/v1/editions.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.core.types import normalize_address
from app.db.session import atomic, get_db
from app.schemas.editions import (
    EditionCreateRequest,
    EditionNumbersResponse,
    EditionResponse,
    EditionUpdateRequest,
    OptionalCommissionRequest,
    PlatformCountersResponse,
)
from app.services.artist_edition_controls_service import ArtistEditionControlsService
from app.services.edition_registry_service import EditionRegistryService

router = APIRouter(prefix="/editions")


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _edition_to_schema(db: Session, svc: EditionRegistryService, number: int) -> EditionResponse:
    e = svc.get_edition(db, number)
    return EditionResponse(
        number=e.number,
        data="0x" + e.data.hex(),
        edition_type=e.edition_type,
        start_date=e.start_date,
        end_date=e.end_date,
        artist=e.artist,
        artist_commission=e.artist_commission,
        optional_commission_rate=e.optional_commission_rate,
        optional_commission_recipient=e.optional_commission_recipient,
        price_in_wei=e.price_in_wei,
        token_uri=svc.token_uri_edition(db, number),
        minted=e.minted,
        total_available=e.total_available,
        total_remaining=e.remaining,
        active=e.active,
    )


# ─────────────────────────────────────────────────────────────
# READS
# ─────────────────────────────────────────────────────────────

@router.get("/counters", response_model=PlatformCountersResponse)
async def get_counters(db: Session = Depends(get_db)):
    svc = EditionRegistryService()
    return PlatformCountersResponse(
        highest_edition_number=svc.highest_edition_number(db),
        total_number_available=svc.total_number_available(db),
        total_number_minted=svc.total_number_minted(db),
        total_purchase_value_in_wei=svc.total_purchase_value_in_wei(db),
    )


@router.get("/by-type/{edition_type}", response_model=EditionNumbersResponse)
async def editions_of_type(edition_type: int, db: Session = Depends(get_db)):
    return EditionNumbersResponse(editions=EditionRegistryService().editions_of_type(db, edition_type))


@router.get("/by-artist/{artist}", response_model=EditionNumbersResponse)
async def artists_editions(artist: str, db: Session = Depends(get_db)):
    artist = normalize_address(artist)
    return EditionNumbersResponse(editions=EditionRegistryService().artists_editions(db, artist))


@router.get("/{number}", response_model=EditionResponse)
async def get_edition(number: int, db: Session = Depends(get_db)):
    return _edition_to_schema(db, EditionRegistryService(), number)


@router.get("/{number}/tokens", response_model=EditionNumbersResponse)
async def tokens_of_edition(number: int, db: Session = Depends(get_db)):
    return EditionNumbersResponse(editions=EditionRegistryService().tokens_of_edition(db, number))


# ─────────────────────────────────────────────────────────────
# MUTATIONS
# ─────────────────────────────────────────────────────────────

@router.post("", response_model=EditionResponse)
async def create_edition(
    req: EditionCreateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = EditionRegistryService(clock)
    svc.create_edition(
        db,
        caller=caller,
        number=req.number,
        data=req.data,
        edition_type=req.edition_type,
        start_date=req.start_date,
        end_date=req.end_date,
        artist=req.artist,
        artist_commission=req.artist_commission,
        price_in_wei=req.price_in_wei,
        token_uri=req.token_uri,
        total_available=req.total_available,
        active=req.active,
        pre_minted=req.pre_minted,
    )
    return _edition_to_schema(db, svc, req.number)


@router.patch("/{number}", response_model=EditionResponse)
async def update_edition(
    number: int,
    req: EditionUpdateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    """
    Applies every provided field; all of them land or none do.
    """
    fields = req.model_dump(exclude_none=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update.")

    svc = EditionRegistryService(clock)
    updaters = {
        "active": lambda v: svc.update_active(db, caller=caller, number=number, active=v),
        "start_date": lambda v: svc.update_start_date(db, caller=caller, number=number, start_date=v),
        "end_date": lambda v: svc.update_end_date(db, caller=caller, number=number, end_date=v),
        "total_available": lambda v: svc.update_total_available(
            db, caller=caller, number=number, total_available=v
        ),
        "total_supply": lambda v: svc.update_total_supply(
            db, caller=caller, number=number, total_supply=v
        ),
        "artist": lambda v: svc.update_artists_account(db, caller=caller, number=number, artist=v),
        "edition_type": lambda v: svc.update_edition_type(
            db, caller=caller, number=number, edition_type=v
        ),
        "price_in_wei": lambda v: svc.update_price_in_wei(
            db, caller=caller, number=number, price_in_wei=v
        ),
        "artist_commission": lambda v: svc.update_artist_commission(
            db, caller=caller, number=number, artist_commission=v
        ),
        "token_uri": lambda v: svc.update_edition_token_uri(
            db, caller=caller, number=number, token_uri=v
        ),
    }
    with atomic(db):
        for name, value in fields.items():
            updaters[name](value)

    return _edition_to_schema(db, svc, number)


@router.put("/{number}/optional-commission", response_model=EditionResponse)
async def update_optional_commission(
    number: int,
    req: OptionalCommissionRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = EditionRegistryService(clock)
    svc.update_optional_commission(
        db, caller=caller, number=number, rate=req.rate, recipient=req.recipient
    )
    return _edition_to_schema(db, svc, number)


@router.post("/{number}/deactivate-or-reduce")
async def deactivate_or_reduce_edition_supply(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    event = ArtistEditionControlsService(clock).deactivate_or_reduce_edition_supply(
        db, caller=caller, number=number
    )
    return {"edition_number": number, "event": event}
