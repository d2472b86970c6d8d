# app/services/purchase_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import Ended, Inactive, InvalidArgument, NotStarted, Paused, SoldOut
from app.core.types import normalize_address
from app.db.session import atomic
from app.services.access_control_service import get_market_state
from app.services.commission import split
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService
from app.services.fungible_ledger_service import FungibleLedgerService
from app.services.token_ledger_service import TokenLedgerService

logger = logging.getLogger(__name__)


class PurchaseService:
    """
    Direct primary sales.

    Funds are pulled from the payer with transfer_from (the market address
    is the spender), so the payer approves the market first. Any amount
    above the edition price is kept by the platform share.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.registry = EditionRegistryService(self.clock)
        self.tokens = TokenLedgerService(self.clock)
        self.ledger = FungibleLedgerService()
        self.events = EventService()

    def purchase(self, db: Session, *, buyer: str, number: int, amount: int) -> int:
        return self.purchase_to(db, caller=buyer, to=buyer, number=number, amount=amount)

    def purchase_to(
        self, db: Session, *, caller: str, to: str, number: int, amount: int
    ) -> int:
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            to = normalize_address(to)
            state = get_market_state(db)

            if state.paused:
                raise Paused("Purchases are paused.")
            if amount <= 0:
                raise InvalidArgument("Purchase amount must be positive.")

            edition = self.registry.get_edition(db, number)
            if not edition.active:
                raise Inactive(f"Edition {number} is not active.")
            if now < edition.start_date:
                raise NotStarted(f"Edition {number} not yet on sale.")
            if now >= edition.end_date:
                raise Ended(f"Edition {number} sale has ended.")
            if edition.remaining == 0:
                raise SoldOut(f"Edition {number} is sold out.")
            if edition.price_in_wei == 0:
                raise InvalidArgument(f"Edition {number} is not for direct sale.")
            if amount < edition.price_in_wei:
                raise InvalidArgument(
                    f"Value must be at least the edition price ({edition.price_in_wei})."
                )

            token = self.tokens.mint_unchecked(db, to=to, number=number, now=now)
            token_id = token.token_id

            shares = split(amount, edition.artist_commission, edition.optional_commission_rate)
            payouts = (
                (edition.artist, shares.artist_share),
                (edition.optional_commission_recipient, shares.optional_share),
                (state.commission_account, shares.platform_share),
            )
            for recipient, share in payouts:
                if share > 0:
                    self.ledger.transfer_from(
                        db,
                        spender=state.market_address,
                        owner=caller,
                        to=recipient,
                        amount=share,
                    )

            state.total_purchase_value_in_wei = state.total_purchase_value_in_wei + amount
            db.flush()

            self.events.emit(
                db,
                event_type="Purchase",
                block_time=now,
                payload={"_buyer": to, "_priceInWei": amount, "_tokenId": token_id},
            )

        logger.info(
            "[purchase] edition=%s token=%s buyer=%s amount=%s",
            number, token_id, to, amount,
        )
        return token_id
