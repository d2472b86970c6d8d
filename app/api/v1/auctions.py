# app/api/v1/auctions.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.db.session import get_db
from app.schemas.auctions import (
    AuctionDetailsResponse,
    AuctionSettingsResponse,
    BidDeleteRequest,
    BidOverrideRequest,
    BidRequest,
    CommissionAccountRequest,
    ControllerRequest,
    MinBidRequest,
)
from app.schemas.tokens import TokenIdResponse
from app.services.auction_service import AuctionService

router = APIRouter(prefix="/auctions")
logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _details(db: Session, svc: AuctionService, number: int) -> AuctionDetailsResponse:
    d = svc.auction_details(db, number)
    return AuctionDetailsResponse(
        edition_number=number,
        enabled=d.enabled,
        bidder=d.bidder,
        value=d.value,
        controller=d.controller,
    )


def _settings(db: Session, svc: AuctionService) -> AuctionSettingsResponse:
    return AuctionSettingsResponse(
        min_bid_amount=svc.min_bid_amount(db),
        paused=svc.is_paused(db),
        commission_account=svc.commission_account(db),
        escrow_balance=svc.escrow_balance(db),
        editions=svc.added_editions(db),
    )


# ─────────────────────────────────────────────────────────────
# READS
# ─────────────────────────────────────────────────────────────

@router.get("", response_model=AuctionSettingsResponse)
async def get_auction_settings(db: Session = Depends(get_db)):
    return _settings(db, AuctionService())


@router.get("/{number}", response_model=AuctionDetailsResponse)
async def get_auction(number: int, db: Session = Depends(get_db)):
    return _details(db, AuctionService(), number)


# ─────────────────────────────────────────────────────────────
# BIDDING
# ─────────────────────────────────────────────────────────────

@router.post("/{number}/bids", response_model=AuctionDetailsResponse)
async def place_bid(
    number: int,
    req: BidRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.place_bid(db, bidder=caller, number=number, amount=req.amount)
    return _details(db, svc, number)


@router.post("/{number}/bids/increase", response_model=AuctionDetailsResponse)
async def increase_bid(
    number: int,
    req: BidRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.increase_bid(db, bidder=caller, number=number, amount=req.amount)
    return _details(db, svc, number)


@router.post("/{number}/bids/withdraw", response_model=AuctionDetailsResponse)
async def withdraw_bid(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.withdraw_bid(db, bidder=caller, number=number)
    return _details(db, svc, number)


@router.post("/{number}/accept", response_model=TokenIdResponse)
async def accept_bid(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    token_id = AuctionService(clock).accept_bid(db, caller=caller, number=number)
    return TokenIdResponse(token_id=token_id)


@router.post("/{number}/reject", response_model=AuctionDetailsResponse)
async def reject_bid(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.reject_bid(db, caller=caller, number=number)
    return _details(db, svc, number)


@router.post("/{number}/cancel", response_model=AuctionDetailsResponse)
async def cancel_auction(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.cancel_auction(db, caller=caller, number=number)
    return _details(db, svc, number)


# ─────────────────────────────────────────────────────────────
# EDITION CONTROLS
# ─────────────────────────────────────────────────────────────

@router.post("/{number}/enable", response_model=AuctionDetailsResponse)
async def enable_with_controller(
    number: int,
    req: ControllerRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.set_artists_control_address_and_enabled_edition(
        db, caller=caller, number=number, controller=req.controller
    )
    return _details(db, svc, number)


@router.post("/{number}/enable-for-artist", response_model=AuctionDetailsResponse)
async def enable_for_artist(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.enable_edition_for_artist(db, caller=caller, number=number)
    return _details(db, svc, number)


@router.post("/{number}/disable", response_model=AuctionDetailsResponse)
async def disable(
    number: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = AuctionService()
    svc.disable_edition(db, caller=caller, number=number)
    return _details(db, svc, number)


@router.put("/{number}/controller", response_model=AuctionDetailsResponse)
async def set_controller(
    number: int,
    req: ControllerRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = AuctionService()
    svc.set_artists_control_address(db, caller=caller, number=number, controller=req.controller)
    return _details(db, svc, number)


# ─────────────────────────────────────────────────────────────
# OWNER OVERRIDES + SETTINGS
# ─────────────────────────────────────────────────────────────

@router.post("/{number}/override", response_model=AuctionDetailsResponse)
async def override_highest_bid(
    number: int,
    req: BidOverrideRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    logger.warning("[auctions] manual override edition=%s by %s", number, caller)
    svc = AuctionService()
    svc.manual_override_edition_highest_bid_and_bidder(
        db, caller=caller, number=number, bidder=req.bidder, amount=req.amount
    )
    return _details(db, svc, number)


@router.post("/{number}/override/delete", response_model=AuctionDetailsResponse)
async def delete_bids(
    number: int,
    req: BidDeleteRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    logger.warning("[auctions] manual bid delete edition=%s by %s", number, caller)
    svc = AuctionService()
    svc.manual_delete_edition_bids(db, caller=caller, number=number, bidder=req.bidder)
    return _details(db, svc, number)


@router.put("/settings/min-bid", response_model=AuctionSettingsResponse)
async def set_min_bid(
    req: MinBidRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = AuctionService()
    svc.set_min_bid_amount(db, caller=caller, amount=req.amount)
    return _settings(db, svc)


@router.put("/settings/commission-account", response_model=AuctionSettingsResponse)
async def set_commission_account(
    req: CommissionAccountRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    svc = AuctionService()
    svc.set_commission_account(db, caller=caller, account=req.account)
    return _settings(db, svc)


@router.post("/settings/pause", response_model=AuctionSettingsResponse)
async def pause(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.pause(db, caller=caller)
    return _settings(db, svc)


@router.post("/settings/unpause", response_model=AuctionSettingsResponse)
async def unpause(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AuctionService(clock)
    svc.unpause(db, caller=caller)
    return _settings(db, svc)


@router.post("/settings/reclaim")
async def reclaim(
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
):
    return {"reclaimed": AuctionService().reclaim(db, caller=caller)}
