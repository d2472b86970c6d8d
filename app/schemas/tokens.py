from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from app.schemas.primitives import Address, Wei


class MintRequest(BaseModel):
    to: Address
    edition_number: int = Field(..., gt=0)


class PurchaseRequest(BaseModel):
    edition_number: int = Field(..., gt=0)
    amount: Wei
    to: Address | None = None


class TransferRequest(BaseModel):
    to: Address
    token_id: int = Field(..., gt=0)


class TransferFromRequest(TransferRequest):
    from_address: Address


class BatchTransferRequest(BaseModel):
    to: Address
    token_ids: List[int] = Field(..., min_length=1)


class BatchTransferFromRequest(BatchTransferRequest):
    from_address: Address


class ApprovalForAllRequest(BaseModel):
    operator: Address
    approved: bool


class TokenUriRequest(BaseModel):
    token_uri: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token_id: int
    edition_number: int
    edition_type: int
    data: str
    token_uri: str
    owner: str


class TokenIdResponse(BaseModel):
    token_id: int


class TokenListResponse(BaseModel):
    owner: str
    tokens: List[int]
