# app/services/token_ledger_service.py
from __future__ import annotations

import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import (
    Inactive,
    InvalidArgument,
    InvariantViolation,
    NotFound,
    SoldOut,
    Unauthorized,
)
from app.core.types import ZERO_ADDRESS, is_zero, normalize_address
from app.db.session import atomic
from app.models.edition import Edition, EditionTokenSlot
from app.models.token import OperatorApproval, Token
from app.policies.rbac import ACTION_BURN, ACTION_MINT, ACTION_SET_TOKEN_URI
from app.services.access_control_service import AccessControlService, get_market_state
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService

logger = logging.getLogger(__name__)


class TokenData(NamedTuple):
    edition_number: int
    edition_type: int
    data: bytes
    token_uri: str
    owner: str


class TokenLedgerService:
    """
    Token ownership layered on the edition registry: mint, burn and
    transfer bookkeeping.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.access = AccessControlService(self.clock)
        self.registry = EditionRegistryService(self.clock)
        self.events = EventService()

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def _live_token(self, db: Session, token_id: int) -> Token:
        token = db.get(Token, token_id)
        if token is None or token.burnt:
            raise NotFound(f"Token {token_id} does not exist.")
        return token

    def _transfer(
        self, db: Session, *, caller: str, from_: str, to: str, token_id: int, now: int
    ) -> None:
        token = self._live_token(db, token_id)
        if is_zero(to):
            raise InvalidArgument("Cannot transfer to the zero address.")
        if token.owner != from_:
            raise Unauthorized(f"Token {token_id} is not owned by {from_}.")
        if caller != from_ and not self.is_approved_for_all(db, owner=from_, operator=caller):
            raise Unauthorized(f"{caller} is not owner or approved for token {token_id}.")

        token.owner = to
        db.flush()
        self.events.emit(
            db,
            event_type="Transfer",
            block_time=now,
            payload={"_from": from_, "_to": to, "_tokenId": token_id},
        )

    def mint_unchecked(self, db: Session, *, to: str, number: int, now: int) -> Token:
        """
        Issues the next token of an edition without a role check.
        Callers must already be inside atomic().
        """
        to = normalize_address(to)
        if is_zero(to):
            raise InvalidArgument("Cannot mint to the zero address.")

        edition = self.registry.get_edition(db, number)
        if not edition.active:
            raise Inactive(f"Edition {number} is not active.")
        if edition.minted >= edition.total_available:
            raise SoldOut(f"Edition {number} is sold out.")

        token_id = edition.number + edition.minted + 1
        if db.get(Token, token_id) is not None:
            raise InvariantViolation(f"Token {token_id} already issued.")

        token = Token(
            token_id=token_id,
            edition_number=edition.number,
            owner=to,
            token_uri_suffix=edition.token_uri_suffix,
            burnt=False,
        )
        db.add(token)

        position = db.execute(
            select(func.count(EditionTokenSlot.id)).where(
                EditionTokenSlot.edition_number == edition.number
            )
        ).scalar_one()
        db.add(EditionTokenSlot(edition_number=edition.number, position=position, token_id=token_id))

        edition.minted += 1
        get_market_state(db).total_number_minted += 1
        db.flush()

        self.events.emit(
            db,
            event_type="Transfer",
            block_time=now,
            payload={"_from": ZERO_ADDRESS, "_to": to, "_tokenId": token_id},
        )
        self.events.emit(
            db,
            event_type="Minted",
            block_time=now,
            payload={"_buyer": to, "_editionNumber": edition.number, "_tokenId": token_id},
        )
        return token

    # ─────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────

    def mint(self, db: Session, *, caller: str, to: str, number: int) -> int:
        now = self.clock.now()
        with atomic(db):
            self.access.require_action(db, caller, ACTION_MINT)
            token = self.mint_unchecked(db, to=to, number=number, now=now)
            token_id = token.token_id
        logger.info("[tokens] minted token=%s edition=%s", token_id, number)
        return token_id

    def burn(self, db: Session, *, caller: str, token_id: int) -> None:
        """
        Clears owner and edition link; the edition's counters stay as they
        are, so burnt supply is never reissued.
        """
        now = self.clock.now()
        with atomic(db):
            self.access.require_action(db, caller, ACTION_BURN)
            token = self._live_token(db, token_id)
            previous_owner = token.owner

            slot = db.execute(
                select(EditionTokenSlot).where(
                    EditionTokenSlot.edition_number == token.edition_number,
                    EditionTokenSlot.token_id == token_id,
                )
            ).scalar_one_or_none()
            if slot is not None:
                slot.token_id = 0

            token.owner = ZERO_ADDRESS
            token.edition_number = 0
            token.burnt = True
            db.flush()

            self.events.emit(
                db,
                event_type="Transfer",
                block_time=now,
                payload={"_from": previous_owner, "_to": ZERO_ADDRESS, "_tokenId": token_id},
            )
        logger.info("[tokens] burnt token=%s", token_id)

    def set_token_uri(self, db: Session, *, caller: str, token_id: int, token_uri: str) -> None:
        with atomic(db):
            self.access.require_action(db, caller, ACTION_SET_TOKEN_URI)
            if not token_uri:
                raise InvalidArgument("Token URI is missing")
            self._live_token(db, token_id).token_uri_suffix = token_uri
            db.flush()

    def transfer(self, db: Session, *, caller: str, to: str, token_id: int) -> None:
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            self._transfer(
                db, caller=caller, from_=caller, to=normalize_address(to),
                token_id=token_id, now=now,
            )

    def transfer_from(
        self, db: Session, *, caller: str, from_: str, to: str, token_id: int
    ) -> None:
        now = self.clock.now()
        with atomic(db):
            self._transfer(
                db,
                caller=normalize_address(caller),
                from_=normalize_address(from_),
                to=normalize_address(to),
                token_id=token_id,
                now=now,
            )

    def batch_transfer(
        self, db: Session, *, caller: str, to: str, token_ids: Iterable[int]
    ) -> None:
        """
        All tokens move or none do.
        """
        token_ids = list(token_ids)
        if not token_ids:
            raise InvalidArgument("No tokens given.")
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            to = normalize_address(to)
            for token_id in token_ids:
                self._transfer(db, caller=caller, from_=caller, to=to, token_id=token_id, now=now)
        logger.info("[tokens] batch transfer %s tokens -> %s", len(token_ids), to)

    def batch_transfer_from(
        self, db: Session, *, caller: str, from_: str, to: str, token_ids: Iterable[int]
    ) -> None:
        token_ids = list(token_ids)
        if not token_ids:
            raise InvalidArgument("No tokens given.")
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            from_ = normalize_address(from_)
            to = normalize_address(to)
            for token_id in token_ids:
                self._transfer(db, caller=caller, from_=from_, to=to, token_id=token_id, now=now)
        logger.info("[tokens] batch transfer %s tokens %s -> %s", len(token_ids), from_, to)

    def set_approval_for_all(
        self, db: Session, *, caller: str, operator: str, approved: bool
    ) -> None:
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            operator = normalize_address(operator)
            if operator == caller:
                raise InvalidArgument("Cannot approve yourself as operator.")

            row = db.execute(
                select(OperatorApproval).where(
                    OperatorApproval.owner == caller, OperatorApproval.operator == operator
                )
            ).scalar_one_or_none()
            if row is None:
                db.add(OperatorApproval(owner=caller, operator=operator, approved=approved))
            else:
                row.approved = approved
            db.flush()

            self.events.emit(
                db,
                event_type="ApprovalForAll",
                block_time=now,
                payload={"_owner": caller, "_operator": operator, "_approved": approved},
            )

    # ─────────────────────────────────────────────
    # READS
    # ─────────────────────────────────────────────

    def is_approved_for_all(self, db: Session, *, owner: str, operator: str) -> bool:
        row = db.execute(
            select(OperatorApproval).where(
                OperatorApproval.owner == normalize_address(owner),
                OperatorApproval.operator == normalize_address(operator),
            )
        ).scalar_one_or_none()
        return bool(row and row.approved)

    def exists(self, db: Session, token_id: int) -> bool:
        token = db.get(Token, token_id)
        return token is not None and not token.burnt

    def owner_of(self, db: Session, token_id: int) -> str:
        return self._live_token(db, token_id).owner

    def tokens_of(self, db: Session, owner: str) -> List[int]:
        return list(
            db.execute(
                select(Token.token_id)
                .where(Token.owner == normalize_address(owner), Token.burnt.is_(False))
                .order_by(Token.token_id.asc())
            ).scalars().all()
        )

    def balance_of(self, db: Session, owner: str) -> int:
        return len(self.tokens_of(db, owner))

    def edition_of_token_id(self, db: Session, token_id: int) -> int:
        token = db.get(Token, token_id)
        return token.edition_number if token else 0

    def token_uri(self, db: Session, token_id: int) -> str:
        token = self._live_token(db, token_id)
        return get_market_state(db).token_base_uri + token.token_uri_suffix

    def token_data(self, db: Session, token_id: int) -> TokenData:
        token = self._live_token(db, token_id)
        edition = self.registry.get_edition(db, token.edition_number)
        return TokenData(
            edition_number=edition.number,
            edition_type=edition.edition_type,
            data=edition.data,
            token_uri=self.token_uri(db, token_id),
            owner=token.owner,
        )

    def _edition_or_none(self, db: Session, token_id: int) -> Optional[Edition]:
        number = self.edition_of_token_id(db, token_id)
        return db.get(Edition, number) if number else None

    def purchase_dates_token(self, db: Session, token_id: int) -> Tuple[int, int]:
        edition = self._edition_or_none(db, token_id)
        return (edition.start_date, edition.end_date) if edition else (0, 0)

    def price_in_wei_token(self, db: Session, token_id: int) -> int:
        edition = self._edition_or_none(db, token_id)
        return edition.price_in_wei if edition else 0
