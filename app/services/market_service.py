# app/services/market_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import Settings, get_settings
from app.core.errors import InvalidArgument
from app.core.types import is_zero, normalize_address
from app.db.session import atomic
from app.models.auction import AuctionSettings
from app.models.enums import Role
from app.models.market_state import MarketState
from app.models.role_grant import RoleGrant
from app.models.self_service import CurationSettings
from app.services.access_control_service import AccessControlService, get_market_state
from app.services.event_service import EventService
from app.services.fungible_ledger_service import FungibleLedgerService

logger = logging.getLogger(__name__)


def bootstrap_market(
    db: Session,
    *,
    owner: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> MarketState:
    """
    Creates the platform singletons on an empty database.
    No-op when the market already exists.
    """
    settings = settings or get_settings()

    with atomic(db):
        existing = db.get(MarketState, 1)
        if existing is not None:
            return existing

        owner = normalize_address(owner or settings.owner_address)
        if is_zero(owner):
            raise InvalidArgument("Owner cannot be the zero address.")

        state = MarketState(
            id=1,
            owner=owner,
            commission_account=owner,
            market_address=normalize_address(settings.market_address),
            paused=False,
            token_base_uri=settings.token_base_uri,
            highest_edition_number=0,
            total_number_available=0,
            total_number_minted=0,
            total_purchase_value_in_wei=0,
        )
        db.add(state)
        db.add(
            AuctionSettings(
                id=1,
                escrow_address=normalize_address(settings.auction_address),
                commission_account=owner,
                min_bid_amount=settings.min_bid_amount,
                paused=False,
            )
        )
        db.add(
            CurationSettings(
                id=1,
                open_to_all=False,
                max_edition_size=settings.self_service_max_edition_size,
                edition_block=settings.self_service_edition_block,
                min_price_in_wei=settings.self_service_min_price_in_wei,
                freeze_window=settings.self_service_freeze_window,
            )
        )
        for role in (Role.CREATOR, Role.MINTER):
            db.add(RoleGrant(address=owner, role=role.value))
        db.flush()

    logger.info("[market] bootstrapped owner=%s", owner)
    return state


class MarketService:
    """
    Platform-wide switches owned by the market owner.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.access = AccessControlService(self.clock)
        self.events = EventService()
        self.ledger = FungibleLedgerService()

    # ---------------------------
    # READS
    # ---------------------------

    def state(self, db: Session) -> MarketState:
        return get_market_state(db)

    def is_paused(self, db: Session) -> bool:
        return get_market_state(db).paused

    def token_base_uri(self, db: Session) -> str:
        return get_market_state(db).token_base_uri

    def commission_account(self, db: Session) -> str:
        return get_market_state(db).commission_account

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def pause(self, db: Session, *, caller: str) -> None:
        self._set_paused(db, caller=caller, paused=True)

    def unpause(self, db: Session, *, caller: str) -> None:
        self._set_paused(db, caller=caller, paused=False)

    def _set_paused(self, db: Session, *, caller: str, paused: bool) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            state = get_market_state(db)
            if state.paused == paused:
                raise InvalidArgument("Market already paused." if paused else "Market not paused.")
            state.paused = paused
            db.flush()
            self.events.emit(
                db,
                event_type="Paused" if paused else "Unpaused",
                block_time=self.clock.now(),
                payload={"contract": "market"},
            )
        logger.info("[market] paused=%s", paused)

    def update_token_base_uri(self, db: Session, *, caller: str, base_uri: str) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            if not base_uri:
                raise InvalidArgument("Base URI cannot be empty.")
            get_market_state(db).token_base_uri = base_uri
            db.flush()

    def update_commission_account(self, db: Session, *, caller: str, account: str) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            account = normalize_address(account)
            if is_zero(account):
                raise InvalidArgument("Commission account cannot be the zero address.")
            get_market_state(db).commission_account = account
            db.flush()
        logger.info("[market] commission account -> %s", account)

    def reclaim(self, db: Session, *, caller: str) -> int:
        """
        Sweeps anything held at the market address to the owner.
        """
        with atomic(db):
            principal = self.access.require_owner(db, caller)
            state = get_market_state(db)
            amount = self.ledger.balance_of(db, state.market_address)
            if amount == 0:
                raise InvalidArgument("Nothing to reclaim.")
            self.ledger.transfer(
                db, sender=state.market_address, to=principal.address, amount=amount
            )
        logger.info("[market] reclaimed %s to owner", amount)
        return amount
