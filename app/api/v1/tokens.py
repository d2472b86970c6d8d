# app/api/v1/tokens.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_caller
from app.core.clock import Clock, get_clock
from app.core.types import normalize_address
from app.db.session import get_db
from app.schemas.tokens import (
    ApprovalForAllRequest,
    BatchTransferFromRequest,
    BatchTransferRequest,
    MintRequest,
    TokenIdResponse,
    TokenListResponse,
    TokenResponse,
    TokenUriRequest,
    TransferFromRequest,
    TransferRequest,
)
from app.services.token_ledger_service import TokenLedgerService

router = APIRouter(prefix="/tokens")


def _token_to_schema(db: Session, svc: TokenLedgerService, token_id: int) -> TokenResponse:
    t = svc.token_data(db, token_id)
    return TokenResponse(
        token_id=token_id,
        edition_number=t.edition_number,
        edition_type=t.edition_type,
        data="0x" + t.data.hex(),
        token_uri=t.token_uri,
        owner=t.owner,
    )


@router.get("/owned/{owner}", response_model=TokenListResponse)
async def tokens_of(owner: str, db: Session = Depends(get_db)):
    owner = normalize_address(owner)
    return TokenListResponse(owner=owner, tokens=TokenLedgerService().tokens_of(db, owner))


@router.get("/{token_id}", response_model=TokenResponse)
async def get_token(token_id: int, db: Session = Depends(get_db)):
    return _token_to_schema(db, TokenLedgerService(), token_id)


@router.post("/mint", response_model=TokenIdResponse)
async def mint(
    req: MintRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    token_id = TokenLedgerService(clock).mint(
        db, caller=caller, to=req.to, number=req.edition_number
    )
    return TokenIdResponse(token_id=token_id)


@router.post("/{token_id}/burn", response_model=TokenIdResponse)
async def burn(
    token_id: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    TokenLedgerService(clock).burn(db, caller=caller, token_id=token_id)
    return TokenIdResponse(token_id=token_id)


@router.put("/{token_id}/uri", response_model=TokenResponse)
async def set_token_uri(
    token_id: int,
    req: TokenUriRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.set_token_uri(db, caller=caller, token_id=token_id, token_uri=req.token_uri)
    return _token_to_schema(db, svc, token_id)


@router.post("/transfer", response_model=TokenResponse)
async def transfer(
    req: TransferRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.transfer(db, caller=caller, to=req.to, token_id=req.token_id)
    return _token_to_schema(db, svc, req.token_id)


@router.post("/transfer-from", response_model=TokenResponse)
async def transfer_from(
    req: TransferFromRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.transfer_from(
        db, caller=caller, from_=req.from_address, to=req.to, token_id=req.token_id
    )
    return _token_to_schema(db, svc, req.token_id)


@router.post("/batch-transfer", response_model=TokenListResponse)
async def batch_transfer(
    req: BatchTransferRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.batch_transfer(db, caller=caller, to=req.to, token_ids=req.token_ids)
    return TokenListResponse(owner=req.to, tokens=svc.tokens_of(db, req.to))


@router.post("/batch-transfer-from", response_model=TokenListResponse)
async def batch_transfer_from(
    req: BatchTransferFromRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.batch_transfer_from(
        db, caller=caller, from_=req.from_address, to=req.to, token_ids=req.token_ids
    )
    return TokenListResponse(owner=req.to, tokens=svc.tokens_of(db, req.to))


@router.post("/approval-for-all")
async def set_approval_for_all(
    req: ApprovalForAllRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
):
    svc = TokenLedgerService(clock)
    svc.set_approval_for_all(db, caller=caller, operator=req.operator, approved=req.approved)
    return {
        "owner": caller,
        "operator": req.operator,
        "approved": svc.is_approved_for_all(db, owner=caller, operator=req.operator),
    }
