from __future__ import annotations

from typing import List

from pydantic import BaseModel

from app.models.enums import Role
from app.schemas.primitives import Address


class RoleGrantRequest(BaseModel):
    address: Address
    role: Role


class OwnershipTransferRequest(BaseModel):
    new_owner: Address


class AccessResponse(BaseModel):
    address: str
    roles: List[Role]
    is_owner: bool
