# app/services/auction_service.py
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import (
    InsufficientBid,
    InvalidArgument,
    NotFound,
    Paused,
    SoldOut,
    Unauthorized,
)
from app.core.types import ZERO_ADDRESS, is_zero, normalize_address
from app.db.session import atomic
from app.models.auction import AuctionSettings, EditionAuction
from app.services.access_control_service import AccessControlService
from app.services.commission import split
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService
from app.services.fungible_ledger_service import FungibleLedgerService
from app.services.token_ledger_service import TokenLedgerService

logger = logging.getLogger(__name__)


class AuctionDetails(NamedTuple):
    enabled: bool
    bidder: str
    value: int
    controller: str


class AuctionService:
    """
    Per-edition English auction with escrowed bids.

    States: disabled -> enabled(no bid) <-> enabled(bid held).
    Bids are escrowed at the auction address; an outbid bidder is refunded
    in full before the new bid is recorded. Owner overrides change the
    recorded bid only, never the escrow.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.access = AccessControlService(self.clock)
        self.registry = EditionRegistryService(self.clock)
        self.tokens = TokenLedgerService(self.clock)
        self.ledger = FungibleLedgerService()
        self.events = EventService()

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def _settings(self, db: Session) -> AuctionSettings:
        s = db.get(AuctionSettings, 1)
        if s is None:
            raise NotFound("Auctions have not been bootstrapped.")
        return s

    def _when_not_paused(self, db: Session) -> AuctionSettings:
        s = self._settings(db)
        if s.paused:
            raise Paused("Auctions are paused.")
        return s

    def _slot(self, db: Session, number: int) -> Optional[EditionAuction]:
        return db.get(EditionAuction, number)

    def _slot_or_create(self, db: Session, number: int) -> EditionAuction:
        slot = self._slot(db, number)
        if slot is None:
            slot = EditionAuction(
                edition_number=number,
                seq=None,
                enabled=False,
                controller=ZERO_ADDRESS,
                highest_bidder=ZERO_ADDRESS,
                highest_bid=0,
            )
            db.add(slot)
            db.flush()
        return slot

    def _mark_added(self, db: Session, slot: EditionAuction) -> None:
        if slot.seq is None:
            last = db.execute(select(func.max(EditionAuction.seq))).scalar_one()
            slot.seq = (last or 0) + 1

    def _enabled_slot(self, db: Session, number: int) -> EditionAuction:
        slot = self._slot(db, number)
        if slot is None or not slot.enabled:
            raise InvalidArgument(f"Edition {number} is not enabled for auction.")
        return slot

    def _ensure_not_sold_out(self, db: Session, number: int) -> None:
        if self.registry.total_remaining(db, number) == 0:
            raise SoldOut(f"Edition {number} is sold out.")

    def _clear_bid(self, slot: EditionAuction) -> None:
        slot.highest_bidder = ZERO_ADDRESS
        slot.highest_bid = 0

    def _refund(self, db: Session, slot: EditionAuction, now: int) -> None:
        bidder, amount = slot.highest_bidder, slot.highest_bid
        self.ledger.transfer(db, sender=self._settings(db).escrow_address, to=bidder, amount=amount)
        self._clear_bid(slot)
        db.flush()
        self.events.emit(
            db,
            event_type="BidderRefunded",
            block_time=now,
            payload={"_editionNumber": slot.edition_number, "_bidder": bidder, "_amount": amount},
        )

    def _enable(self, db: Session, number: int, controller: str, now: int) -> EditionAuction:
        self.registry.get_edition(db, number)
        controller = normalize_address(controller)
        if is_zero(controller):
            raise InvalidArgument("Controller cannot be the zero address.")

        slot = self._slot_or_create(db, number)
        if slot.enabled:
            raise InvalidArgument(f"Edition {number} is already enabled for auction.")
        slot.enabled = True
        slot.controller = controller
        self._mark_added(db, slot)
        db.flush()

        self.events.emit(
            db,
            event_type="AuctionEnabled",
            block_time=now,
            payload={"_editionNumber": number, "_auctioneer": controller},
        )
        return slot

    def enable_unchecked(self, db: Session, *, number: int, controller: str, now: int) -> None:
        """
        Enables an edition with the given controller without an owner check.
        Callers must already be inside atomic().
        """
        self._enable(db, number, controller, now)

    # ─────────────────────────────────────────────
    # BIDDING
    # ─────────────────────────────────────────────

    def place_bid(self, db: Session, *, bidder: str, number: int, amount: int) -> None:
        now = self.clock.now()
        with atomic(db):
            bidder = normalize_address(bidder)
            settings = self._when_not_paused(db)
            slot = self._enabled_slot(db, number)
            self._ensure_not_sold_out(db, number)

            if amount < settings.min_bid_amount:
                raise InsufficientBid(
                    f"Bid must be at least the minimum bid ({settings.min_bid_amount})."
                )
            if amount <= slot.highest_bid:
                raise InsufficientBid(
                    f"Bid must exceed the current highest bid ({slot.highest_bid})."
                )
            if slot.highest_bidder == bidder:
                raise InvalidArgument("Already the highest bidder; increase the bid instead.")

            self.ledger.transfer_from(
                db,
                spender=settings.escrow_address,
                owner=bidder,
                to=settings.escrow_address,
                amount=amount,
            )
            if not is_zero(slot.highest_bidder):
                self._refund(db, slot, now)

            slot.highest_bidder = bidder
            slot.highest_bid = amount
            db.flush()

            self.events.emit(
                db,
                event_type="BidPlaced",
                block_time=now,
                payload={"_bidder": bidder, "_editionNumber": number, "_amount": amount},
            )
        logger.info("[auction] bid placed edition=%s bidder=%s amount=%s", number, bidder, amount)

    def increase_bid(self, db: Session, *, bidder: str, number: int, amount: int) -> int:
        now = self.clock.now()
        with atomic(db):
            bidder = normalize_address(bidder)
            settings = self._when_not_paused(db)
            slot = self._enabled_slot(db, number)

            if is_zero(slot.highest_bidder):
                raise NotFound(f"No bid held for edition {number}.")
            if slot.highest_bidder != bidder:
                raise Unauthorized("Only the highest bidder can increase the bid.")
            self._ensure_not_sold_out(db, number)
            if amount < settings.min_bid_amount:
                raise InsufficientBid(
                    f"Increase must be at least the minimum bid ({settings.min_bid_amount})."
                )

            self.ledger.transfer_from(
                db,
                spender=settings.escrow_address,
                owner=bidder,
                to=settings.escrow_address,
                amount=amount,
            )
            slot.highest_bid = slot.highest_bid + amount
            db.flush()
            new_total = slot.highest_bid

            self.events.emit(
                db,
                event_type="BidIncreased",
                block_time=now,
                payload={"_bidder": bidder, "_editionNumber": number, "_amount": new_total},
            )
        logger.info("[auction] bid increased edition=%s total=%s", number, new_total)
        return new_total

    def withdraw_bid(self, db: Session, *, bidder: str, number: int) -> None:
        now = self.clock.now()
        with atomic(db):
            bidder = normalize_address(bidder)
            self._when_not_paused(db)
            slot = self._slot(db, number)

            if slot is None or is_zero(slot.highest_bidder):
                raise NotFound(f"No bid held for edition {number}.")
            if slot.highest_bidder != bidder:
                raise Unauthorized("Only the highest bidder can withdraw the bid.")

            self._refund(db, slot, now)
            self.events.emit(
                db,
                event_type="BidWithdrawn",
                block_time=now,
                payload={"_bidder": bidder, "_editionNumber": number},
            )
        logger.info("[auction] bid withdrawn edition=%s bidder=%s", number, bidder)

    # ─────────────────────────────────────────────
    # SETTLEMENT
    # ─────────────────────────────────────────────

    def accept_bid(self, db: Session, *, caller: str, number: int) -> int:
        """
        Mints the next token to the highest bidder and splits the recorded
        bid between artist, optional recipient and platform.
        """
        now = self.clock.now()
        with atomic(db):
            principal = self.access.principal_for(db, caller)
            settings = self._when_not_paused(db)
            edition = self.registry.get_edition(db, number)
            slot = self._enabled_slot(db, number)

            if principal.address != slot.controller and not principal.is_owner:
                raise Unauthorized("Only the auction controller or owner can accept bids.")
            if is_zero(slot.highest_bidder):
                raise NotFound(f"No bid held for edition {number}.")
            self._ensure_not_sold_out(db, number)

            bidder, amount = slot.highest_bidder, slot.highest_bid
            token = self.tokens.mint_unchecked(db, to=bidder, number=number, now=now)
            token_id = token.token_id

            shares = split(amount, edition.artist_commission, edition.optional_commission_rate)
            payouts = (
                (edition.artist, shares.artist_share),
                (edition.optional_commission_recipient, shares.optional_share),
                (settings.commission_account, shares.platform_share),
            )
            for recipient, share in payouts:
                if share > 0:
                    self.ledger.transfer(
                        db, sender=settings.escrow_address, to=recipient, amount=share
                    )

            self._clear_bid(slot)
            if edition.remaining == 0:
                slot.enabled = False
            db.flush()

            self.events.emit(
                db,
                event_type="BidAccepted",
                block_time=now,
                payload={
                    "_bidder": bidder,
                    "_editionNumber": number,
                    "_tokenId": token_id,
                    "_amount": amount,
                },
            )
        logger.info(
            "[auction] bid accepted edition=%s token=%s bidder=%s amount=%s",
            number, token_id, bidder, amount,
        )
        return token_id

    def reject_bid(self, db: Session, *, caller: str, number: int) -> None:
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            slot = self._slot(db, number)
            if slot is None or is_zero(slot.highest_bidder):
                raise NotFound(f"No bid held for edition {number}.")
            if caller != slot.controller:
                raise Unauthorized("Only the auction controller can reject bids.")

            bidder, amount = slot.highest_bidder, slot.highest_bid
            self._refund(db, slot, now)
            self.events.emit(
                db,
                event_type="BidRejected",
                block_time=now,
                payload={
                    "_caller": caller,
                    "_bidder": bidder,
                    "_editionNumber": number,
                    "_amount": amount,
                },
            )
        logger.info("[auction] bid rejected edition=%s bidder=%s", number, bidder)

    def cancel_auction(self, db: Session, *, caller: str, number: int) -> None:
        now = self.clock.now()
        with atomic(db):
            self.access.require_owner(db, caller)
            self.registry.get_edition(db, number)
            slot = self._slot_or_create(db, number)

            if not is_zero(slot.highest_bidder):
                self._refund(db, slot, now)
            slot.enabled = False
            db.flush()

            self.events.emit(
                db,
                event_type="AuctionCancelled",
                block_time=now,
                payload={"_editionNumber": number},
            )
        logger.info("[auction] cancelled edition=%s", number)

    # ─────────────────────────────────────────────
    # EDITION CONTROLS
    # ─────────────────────────────────────────────

    def set_artists_control_address_and_enabled_edition(
        self, db: Session, *, caller: str, number: int, controller: str
    ) -> None:
        now = self.clock.now()
        with atomic(db):
            self.access.require_owner(db, caller)
            self._enable(db, number, controller, now)

    def enable_edition_for_artist(self, db: Session, *, caller: str, number: int) -> None:
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            edition = self.registry.get_edition(db, number)
            if edition.artist != caller:
                raise Unauthorized("Only the edition artist can enable their own auction.")
            self._enable(db, number, caller, now)

    def enable_edition(self, db: Session, *, caller: str, number: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            self.registry.get_edition(db, number)
            slot = self._slot_or_create(db, number)
            slot.enabled = True
            self._mark_added(db, slot)
            db.flush()

    def disable_edition(self, db: Session, *, caller: str, number: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            self.registry.get_edition(db, number)
            self._slot_or_create(db, number).enabled = False
            db.flush()

    def set_artists_control_address(
        self, db: Session, *, caller: str, number: int, controller: str
    ) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            self.registry.get_edition(db, number)
            controller = normalize_address(controller)
            if is_zero(controller):
                raise InvalidArgument("Controller cannot be the zero address.")
            self._slot_or_create(db, number).controller = controller
            db.flush()

    # ─────────────────────────────────────────────
    # OWNER OVERRIDES
    # ─────────────────────────────────────────────

    def manual_override_edition_highest_bid_and_bidder(
        self, db: Session, *, caller: str, number: int, bidder: str, amount: int
    ) -> None:
        """
        Rewrites the recorded bid. Escrow is untouched, so the escrow balance
        may legitimately differ from the recorded bid afterwards.
        """
        with atomic(db):
            self.access.require_owner(db, caller)
            self.registry.get_edition(db, number)
            if amount < 0:
                raise InvalidArgument("Bid amount cannot be negative.")
            slot = self._slot_or_create(db, number)
            slot.highest_bidder = normalize_address(bidder)
            slot.highest_bid = amount
            db.flush()
        logger.info("[auction] override edition=%s bidder=%s amount=%s", number, bidder, amount)

    def manual_delete_edition_bids(
        self, db: Session, *, caller: str, number: int, bidder: str
    ) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            slot = self._slot(db, number)
            if slot is None or slot.highest_bidder != normalize_address(bidder):
                raise InvalidArgument(f"{bidder} does not hold the bid for edition {number}.")
            self._clear_bid(slot)
            db.flush()
        logger.info("[auction] bids deleted edition=%s", number)

    # ─────────────────────────────────────────────
    # GLOBAL SETTINGS
    # ─────────────────────────────────────────────

    def set_min_bid_amount(self, db: Session, *, caller: str, amount: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            if amount < 0:
                raise InvalidArgument("Minimum bid cannot be negative.")
            self._settings(db).min_bid_amount = amount
            db.flush()

    def set_commission_account(self, db: Session, *, caller: str, account: str) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            account = normalize_address(account)
            if is_zero(account):
                raise InvalidArgument("Commission account cannot be the zero address.")
            self._settings(db).commission_account = account
            db.flush()

    def pause(self, db: Session, *, caller: str) -> None:
        self._set_paused(db, caller=caller, paused=True)

    def unpause(self, db: Session, *, caller: str) -> None:
        self._set_paused(db, caller=caller, paused=False)

    def _set_paused(self, db: Session, *, caller: str, paused: bool) -> None:
        now = self.clock.now()
        with atomic(db):
            self.access.require_owner(db, caller)
            settings = self._settings(db)
            if settings.paused == paused:
                raise InvalidArgument("Auctions already paused." if paused else "Auctions not paused.")
            settings.paused = paused
            db.flush()
            self.events.emit(
                db,
                event_type="Paused" if paused else "Unpaused",
                block_time=now,
                payload={"contract": "auction"},
            )
        logger.info("[auction] paused=%s", paused)

    def reclaim(self, db: Session, *, caller: str) -> int:
        """
        Sweeps the whole escrow balance to the owner.
        """
        with atomic(db):
            principal = self.access.require_owner(db, caller)
            escrow = self._settings(db).escrow_address
            amount = self.ledger.balance_of(db, escrow)
            if amount == 0:
                raise InvalidArgument("Nothing to reclaim.")
            self.ledger.transfer(db, sender=escrow, to=principal.address, amount=amount)
        logger.info("[auction] reclaimed %s to owner", amount)
        return amount

    # ─────────────────────────────────────────────
    # READS
    # ─────────────────────────────────────────────

    def highest_bid_for_edition(self, db: Session, number: int) -> Tuple[str, int]:
        slot = self._slot(db, number)
        if slot is None:
            return ZERO_ADDRESS, 0
        return slot.highest_bidder, slot.highest_bid

    def auction_details(self, db: Session, number: int) -> AuctionDetails:
        slot = self._slot(db, number)
        if slot is None:
            return AuctionDetails(False, ZERO_ADDRESS, 0, ZERO_ADDRESS)
        return AuctionDetails(slot.enabled, slot.highest_bidder, slot.highest_bid, slot.controller)

    def is_edition_enabled(self, db: Session, number: int) -> bool:
        slot = self._slot(db, number)
        return bool(slot and slot.enabled)

    def edition_controller(self, db: Session, number: int) -> str:
        slot = self._slot(db, number)
        return slot.controller if slot else ZERO_ADDRESS

    def min_bid_amount(self, db: Session) -> int:
        return self._settings(db).min_bid_amount

    def is_paused(self, db: Session) -> bool:
        return self._settings(db).paused

    def commission_account(self, db: Session) -> str:
        return self._settings(db).commission_account

    def escrow_balance(self, db: Session) -> int:
        return self.ledger.balance_of(db, self._settings(db).escrow_address)

    def added_editions(self, db: Session) -> List[int]:
        return list(
            db.execute(
                select(EditionAuction.edition_number)
                .where(EditionAuction.seq.is_not(None))
                .order_by(EditionAuction.seq.asc())
            ).scalars().all()
        )
