from __future__ import annotations

from typing import List

from pydantic import BaseModel

from app.schemas.primitives import Address, Wei


class BidRequest(BaseModel):
    amount: Wei


class ControllerRequest(BaseModel):
    controller: Address


class BidOverrideRequest(BaseModel):
    bidder: Address
    amount: Wei


class BidDeleteRequest(BaseModel):
    bidder: Address


class MinBidRequest(BaseModel):
    amount: Wei


class CommissionAccountRequest(BaseModel):
    account: Address


class AuctionDetailsResponse(BaseModel):
    edition_number: int
    enabled: bool
    bidder: str
    value: int
    controller: str


class AuctionSettingsResponse(BaseModel):
    min_bid_amount: int
    paused: bool
    commission_account: str
    escrow_balance: int
    editions: List[int]
