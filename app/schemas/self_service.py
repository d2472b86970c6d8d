from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.primitives import Address, NonNegInt, Percent, Wei


class SelfServiceEditionRequest(BaseModel):
    enable_auction: bool = False
    optional_split_address: Address = "0x" + "0" * 40
    optional_split_rate: Percent = 0
    total_available: int = Field(..., gt=0)
    price_in_wei: Wei
    start_date: NonNegInt = 0
    end_date: NonNegInt = 0
    artist_commission: Percent
    edition_type: int = Field(..., gt=0)
    token_uri: str


class SelfServiceEditionForRequest(SelfServiceEditionRequest):
    artist: Address


class AllowedArtistRequest(BaseModel):
    artist: Address
    allowed: bool


class OpenToAllRequest(BaseModel):
    open_to_all: bool


class CurationLimitsRequest(BaseModel):
    min_price_in_wei: Wei | None = None
    max_edition_size: int | None = Field(default=None, gt=0)
    freeze_window: NonNegInt | None = None


class SelfServiceEditionResponse(BaseModel):
    edition_number: int


class CreatorStatusResponse(BaseModel):
    artist: str
    allowed: bool
    can_create_another_edition: bool
