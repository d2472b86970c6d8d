# app/api/v1/access.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.db.session import get_db
from app.schemas.access import AccessResponse, OwnershipTransferRequest, RoleGrantRequest

from app.services.access_control_service import AccessControlService

router = APIRouter(prefix="/access")


def _describe(db: Session, svc: AccessControlService, address: str) -> AccessResponse:
    p = svc.principal_for(db, address)
    return AccessResponse(
        address=p.address,
        roles=sorted(p.roles, key=lambda r: r.value),
        is_owner=p.is_owner,
    )


@router.get("/{address}", response_model=AccessResponse)
async def get_access(address: str, db: Session = Depends(get_db)):
    svc = AccessControlService()
    return _describe(db, svc, address)


@router.post("/roles", response_model=AccessResponse)
async def grant_role(
    req: RoleGrantRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AccessControlService(clock)
    svc.add_address_to_access_control(db, caller=caller, address=req.address, role=req.role)
    return _describe(db, svc, req.address)


@router.post("/roles/revoke", response_model=AccessResponse)
async def revoke_role(
    req: RoleGrantRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AccessControlService(clock)
    svc.remove_address_from_access_control(db, caller=caller, address=req.address, role=req.role)
    return _describe(db, svc, req.address)


@router.post("/ownership", response_model=AccessResponse)
async def transfer_ownership(
    req: OwnershipTransferRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = AccessControlService(clock)
    svc.transfer_ownership(db, caller=caller, new_owner=req.new_owner)
    return _describe(db, svc, req.new_owner)
