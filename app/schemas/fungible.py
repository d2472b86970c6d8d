from __future__ import annotations

from pydantic import BaseModel

from app.schemas.primitives import Address, Wei


class FungibleMintRequest(BaseModel):
    to: Address
    amount: Wei


class FungibleTransferRequest(BaseModel):
    to: Address
    amount: Wei


class FungibleApproveRequest(BaseModel):
    spender: Address
    amount: Wei


class BalanceResponse(BaseModel):
    address: str
    balance: int


class AllowanceResponse(BaseModel):
    owner: str
    spender: str
    amount: int
