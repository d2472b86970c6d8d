from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.primitives import Address, HexData, NonNegInt, Percent, Wei


class EditionCreateRequest(BaseModel):
    """
    Operator-created edition. end_date=0 means open-ended.
    """
    number: int = Field(..., gt=0)
    data: HexData = b""
    edition_type: int = Field(..., gt=0)
    start_date: NonNegInt = 0
    end_date: NonNegInt = 0
    artist: Address
    artist_commission: Percent
    price_in_wei: Wei
    token_uri: str = Field(..., min_length=1)
    total_available: int = Field(..., gt=0)
    active: bool = True
    pre_minted: NonNegInt = 0


class EditionUpdateRequest(BaseModel):
    """
    Only the fields that are set get applied, together or not at all.
    """
    active: Optional[bool] = None
    start_date: Optional[NonNegInt] = None
    end_date: Optional[NonNegInt] = None
    total_available: Optional[NonNegInt] = None
    total_supply: Optional[NonNegInt] = None
    artist: Optional[Address] = None
    edition_type: Optional[int] = Field(default=None, gt=0)
    price_in_wei: Optional[Wei] = None
    artist_commission: Optional[Percent] = None
    token_uri: Optional[str] = None


class OptionalCommissionRequest(BaseModel):
    rate: Percent
    recipient: Address


class EditionResponse(BaseModel):
    number: int
    data: str
    edition_type: int
    start_date: int
    end_date: int
    artist: str
    artist_commission: int
    optional_commission_rate: int
    optional_commission_recipient: str
    price_in_wei: int
    token_uri: str
    minted: int
    total_available: int
    total_remaining: int
    active: bool


class EditionNumbersResponse(BaseModel):
    editions: List[int]


class PlatformCountersResponse(BaseModel):
    highest_edition_number: int
    total_number_available: int
    total_number_minted: int
    total_purchase_value_in_wei: int
