# app/services/self_service_curation_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import InvalidArgument, NotFound, Throttled, Unauthorized
from app.core.rate_limit import FreezeWindow
from app.core.types import ZERO_ADDRESS, is_zero, normalize_address
from app.db.session import atomic
from app.models.edition import Edition
from app.models.self_service import AllowedArtist, CreatorActivity, CurationSettings
from app.services.access_control_service import AccessControlService, get_market_state
from app.services.auction_service import AuctionService
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService

logger = logging.getLogger(__name__)


class SelfServiceCurationService:
    """
    Artist-initiated edition creation.

    Gated by the allow-list / open-to-all switch, throttled per creator by
    a freeze window, and numbered in fixed blocks above the current highest
    edition so it never collides with operator-created ranges.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.access = AccessControlService(self.clock)
        self.registry = EditionRegistryService(self.clock)
        self.auctions = AuctionService(self.clock)
        self.events = EventService()

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def _settings(self, db: Session) -> CurationSettings:
        s = db.get(CurationSettings, 1)
        if s is None:
            raise NotFound("Self-service has not been bootstrapped.")
        return s

    def _last_created_at(self, db: Session, creator: str) -> Optional[int]:
        row = db.get(CreatorActivity, creator)
        return row.last_created_at if row else None

    def _require_allowed(self, db: Session, creator: str) -> None:
        if self.is_allowed_artist(db, creator):
            return
        if self._settings(db).open_to_all:
            if any(self.registry.artists_editions(db, creator)):
                return
            raise Unauthorized("Can only mint your own once we have enabled you on the platform")
        raise Unauthorized("Not allowed to create edition")

    def next_edition_number(self, db: Session) -> int:
        """
        Round (highest + its total available) up to the next block boundary
        strictly above it: 20000+100 -> 20200, 20210 -> 20300.
        """
        block = self._settings(db).edition_block
        highest = get_market_state(db).highest_edition_number
        end = highest
        if highest:
            end += db.get(Edition, highest).total_available
        return (end // block + 1) * block

    def _create(
        self,
        db: Session,
        *,
        creator: str,
        enable_auction: bool,
        optional_split_address: str,
        optional_split_rate: int,
        total_available: int,
        price_in_wei: int,
        start_date: int,
        end_date: int,
        artist_commission: int,
        edition_type: int,
        token_uri: str,
        now: int,
    ) -> int:
        settings = self._settings(db)

        if total_available <= 0 or total_available > settings.max_edition_size:
            raise InvalidArgument("Invalid edition size")
        if not token_uri:
            raise InvalidArgument("Token URI is missing")
        if end_date and end_date <= now:
            raise InvalidArgument("End date cannot be in the past")
        if artist_commission + optional_split_rate > 100:
            raise InvalidArgument("Total commission exceeds 100")
        if price_in_wei < settings.min_price_in_wei:
            raise InvalidArgument("Invalid price")

        if not FreezeWindow(settings.freeze_window).allows(self._last_created_at(db, creator), now):
            raise Throttled("Sender currently frozen out of creation")

        number = self.next_edition_number(db)
        edition = self.registry.create_edition_unchecked(
            db,
            number=number,
            data=b"",
            edition_type=edition_type,
            start_date=start_date,
            end_date=end_date,
            artist=creator,
            artist_commission=artist_commission,
            price_in_wei=price_in_wei,
            token_uri=token_uri,
            total_available=total_available,
            active=True,
            now=now,
        )

        optional_split_address = normalize_address(optional_split_address or ZERO_ADDRESS)
        if optional_split_rate > 0 or not is_zero(optional_split_address):
            self.registry.set_optional_commission_unchecked(
                db, edition, rate=optional_split_rate, recipient=optional_split_address
            )

        if enable_auction:
            self.auctions.enable_unchecked(db, number=number, controller=creator, now=now)

        activity = db.get(CreatorActivity, creator)
        if activity is None:
            db.add(CreatorActivity(address=creator, last_created_at=now))
        else:
            activity.last_created_at = now
        db.flush()

        self.events.emit(
            db,
            event_type="SelfServiceEditionCreated",
            block_time=now,
            payload={
                "_editionNumber": number,
                "_creator": creator,
                "_priceInWei": price_in_wei,
                "_totalAvailable": total_available,
            },
        )
        return number

    # ─────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────

    def create_edition(
        self,
        db: Session,
        *,
        creator: str,
        enable_auction: bool,
        optional_split_address: str,
        optional_split_rate: int,
        total_available: int,
        price_in_wei: int,
        start_date: int,
        end_date: int,
        artist_commission: int,
        edition_type: int,
        token_uri: str,
    ) -> int:
        now = self.clock.now()
        with atomic(db):
            creator = normalize_address(creator)
            self._require_allowed(db, creator)
            number = self._create(
                db,
                creator=creator,
                enable_auction=enable_auction,
                optional_split_address=optional_split_address,
                optional_split_rate=optional_split_rate,
                total_available=total_available,
                price_in_wei=price_in_wei,
                start_date=start_date,
                end_date=end_date,
                artist_commission=artist_commission,
                edition_type=edition_type,
                token_uri=token_uri,
                now=now,
            )
        logger.info("[self-service] edition=%s created by %s", number, creator)
        return number

    def create_edition_for(
        self,
        db: Session,
        *,
        caller: str,
        artist: str,
        enable_auction: bool,
        optional_split_address: str,
        optional_split_rate: int,
        total_available: int,
        price_in_wei: int,
        start_date: int,
        end_date: int,
        artist_commission: int,
        edition_type: int,
        token_uri: str,
    ) -> int:
        """
        Owner creates on an artist's behalf. Skips the allow-list but the
        artist's freeze window still applies.
        """
        now = self.clock.now()
        with atomic(db):
            self.access.require_owner(db, caller)
            artist = normalize_address(artist)
            number = self._create(
                db,
                creator=artist,
                enable_auction=enable_auction,
                optional_split_address=optional_split_address,
                optional_split_rate=optional_split_rate,
                total_available=total_available,
                price_in_wei=price_in_wei,
                start_date=start_date,
                end_date=end_date,
                artist_commission=artist_commission,
                edition_type=edition_type,
                token_uri=token_uri,
                now=now,
            )
        logger.info("[self-service] edition=%s created for %s", number, artist)
        return number

    # ─────────────────────────────────────────────
    # ACCESS + FREQUENCY CONTROLS
    # ─────────────────────────────────────────────

    def set_open_to_all(self, db: Session, *, caller: str, open_to_all: bool) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            self._settings(db).open_to_all = open_to_all
            db.flush()

    def set_allowed_artist(self, db: Session, *, caller: str, artist: str, allowed: bool) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            artist = normalize_address(artist)
            row = db.get(AllowedArtist, artist)
            if row is None:
                db.add(AllowedArtist(address=artist, allowed=allowed))
            else:
                row.allowed = allowed
            db.flush()

    def set_min_price_per_edition(self, db: Session, *, caller: str, min_price: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            if min_price < 0:
                raise InvalidArgument("Minimum price cannot be negative.")
            self._settings(db).min_price_in_wei = min_price
            db.flush()

    def set_max_edition_size(self, db: Session, *, caller: str, max_size: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            if max_size <= 0:
                raise InvalidArgument("Maximum edition size must be positive.")
            self._settings(db).max_edition_size = max_size
            db.flush()

    def set_freeze_window(self, db: Session, *, caller: str, window: int) -> None:
        with atomic(db):
            self.access.require_owner(db, caller)
            if window < 0:
                raise InvalidArgument("Freeze window cannot be negative.")
            self._settings(db).freeze_window = window
            db.flush()

    # ─────────────────────────────────────────────
    # READS
    # ─────────────────────────────────────────────

    def is_open_to_all(self, db: Session) -> bool:
        return self._settings(db).open_to_all

    def is_allowed_artist(self, db: Session, artist: str) -> bool:
        row = db.get(AllowedArtist, normalize_address(artist))
        return bool(row and row.allowed)

    def can_create_another_edition(self, db: Session, artist: str) -> bool:
        window = FreezeWindow(self._settings(db).freeze_window)
        return window.allows(self._last_created_at(db, normalize_address(artist)), self.clock.now())

    def freeze_window(self, db: Session) -> int:
        return self._settings(db).freeze_window

    def min_price_per_edition(self, db: Session) -> int:
        return self._settings(db).min_price_in_wei

    def max_edition_size(self, db: Session) -> int:
        return self._settings(db).max_edition_size
