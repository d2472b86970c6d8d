# app/services/edition_registry_service.py
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import InvalidArgument, InvariantViolation, NotFound
from app.core.types import MAX_UINT32, ZERO_ADDRESS, is_zero, normalize_address
from app.db.session import atomic
from app.models.edition import Edition, EditionListing, EditionTokenSlot
from app.models.enums import ListingKind
from app.policies.rbac import ACTION_CREATE_EDITION, ACTION_UPDATE_EDITION
from app.services.access_control_service import AccessControlService, get_market_state
from app.services.event_service import EventService

logger = logging.getLogger(__name__)


class EditionDetails(NamedTuple):
    data: bytes
    edition_type: int
    start_date: int
    end_date: int
    artist: str
    artist_commission: int
    price_in_wei: int
    token_uri: str
    minted: int
    total_available: int
    active: bool


def _check_commission(artist_commission: int, optional_rate: int) -> None:
    if artist_commission < 0 or artist_commission > 100:
        raise InvalidArgument("Artist commission must be between 0 and 100.")
    if optional_rate < 0:
        raise InvalidArgument("Optional commission cannot be negative.")
    if artist_commission + optional_rate > 100:
        raise InvalidArgument("Total commission exceeds 100")


class EditionRegistryService:
    """
    Authoritative store of editions and the platform counters derived
    from them (highest edition number, total available, total minted).
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.access = AccessControlService(self.clock)
        self.events = EventService()

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def get_edition(self, db: Session, number: int) -> Edition:
        edition = db.get(Edition, number) if number else None
        if edition is None:
            raise NotFound(f"Edition {number} not found.")
        return edition

    def _editable(self, db: Session, caller: str, number: int) -> Edition:
        self.access.require_action(db, caller, ACTION_UPDATE_EDITION)
        return self.get_edition(db, number)

    def _append_listing(self, db: Session, kind: ListingKind, key: str, number: int) -> None:
        size = db.execute(
            select(func.count(EditionListing.id)).where(
                EditionListing.kind == kind.value, EditionListing.key == key
            )
        ).scalar_one()
        db.add(EditionListing(kind=kind.value, key=key, position=size, edition_number=number))
        db.flush()

    def _vacate_listing(self, db: Session, kind: ListingKind, key: str, number: int) -> None:
        # leave a 0 in the old slot so positions of other entries hold
        rows = db.execute(
            select(EditionListing).where(
                EditionListing.kind == kind.value,
                EditionListing.key == key,
                EditionListing.edition_number == number,
            )
        ).scalars().all()
        for row in rows:
            row.edition_number = 0
        db.flush()

    def _listing(self, db: Session, kind: ListingKind, key: str) -> List[int]:
        return list(
            db.execute(
                select(EditionListing.edition_number)
                .where(EditionListing.kind == kind.value, EditionListing.key == key)
                .order_by(EditionListing.position.asc())
            ).scalars().all()
        )

    def create_edition_unchecked(
        self,
        db: Session,
        *,
        number: int,
        data: bytes,
        edition_type: int,
        start_date: int,
        end_date: int,
        artist: str,
        artist_commission: int,
        price_in_wei: int,
        token_uri: str,
        total_available: int,
        active: bool,
        pre_minted: int = 0,
        now: int,
    ) -> Edition:
        """
        Validates and stores a new edition without a role check.
        Callers must already be inside atomic().
        """
        artist = normalize_address(artist)

        if number <= 0:
            raise InvalidArgument("Edition number must be positive.")
        if edition_type <= 0:
            raise InvalidArgument("Edition type must be non-zero.")
        if is_zero(artist):
            raise InvalidArgument("Artist cannot be the zero address.")
        if not token_uri:
            raise InvalidArgument("Token URI is missing")
        _check_commission(artist_commission, 0)
        if total_available <= 0:
            raise InvalidArgument("Total available must be positive.")
        if price_in_wei < 0 or start_date < 0 or end_date < 0:
            raise InvalidArgument("Price and dates cannot be negative.")
        if pre_minted < 0:
            raise InvalidArgument("Pre-minted count cannot be negative.")
        if pre_minted > total_available:
            raise InvariantViolation("Pre-minted count exceeds total available.")
        if db.get(Edition, number) is not None:
            raise InvalidArgument(f"Edition {number} already exists.")

        state = get_market_state(db)
        if state.highest_edition_number:
            previous = db.get(Edition, state.highest_edition_number)
            ceiling = state.highest_edition_number + previous.total_available
            if number <= ceiling:
                raise InvalidArgument(
                    f"Edition number {number} clashes with edition "
                    f"{previous.number} (must exceed {ceiling})."
                )

        edition = Edition(
            number=number,
            data=bytes(data or b""),
            edition_type=edition_type,
            start_date=start_date,
            end_date=end_date or MAX_UINT32,
            artist=artist,
            artist_commission=artist_commission,
            optional_commission_rate=0,
            optional_commission_recipient=ZERO_ADDRESS,
            price_in_wei=price_in_wei,
            token_uri_suffix=token_uri,
            minted=pre_minted,
            total_available=total_available,
            active=active,
        )
        db.add(edition)

        state.highest_edition_number = number
        state.total_number_available += total_available
        state.total_number_minted += pre_minted
        db.flush()

        self._append_listing(db, ListingKind.BY_TYPE, str(edition_type), number)
        self._append_listing(db, ListingKind.BY_ARTIST, artist, number)

        self.events.emit(
            db,
            event_type="EditionCreated",
            block_time=now,
            payload={
                "_editionNumber": number,
                "_editionData": "0x" + edition.data.hex(),
                "_editionType": edition_type,
            },
        )
        return edition

    # ─────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────

    def create_edition(
        self,
        db: Session,
        *,
        caller: str,
        number: int,
        data: bytes,
        edition_type: int,
        start_date: int,
        end_date: int,
        artist: str,
        artist_commission: int,
        price_in_wei: int,
        token_uri: str,
        total_available: int,
        active: bool = True,
        pre_minted: int = 0,
    ) -> Edition:
        now = self.clock.now()
        with atomic(db):
            self.access.require_action(db, caller, ACTION_CREATE_EDITION)
            edition = self.create_edition_unchecked(
                db,
                number=number,
                data=data,
                edition_type=edition_type,
                start_date=start_date,
                end_date=end_date,
                artist=artist,
                artist_commission=artist_commission,
                price_in_wei=price_in_wei,
                token_uri=token_uri,
                total_available=total_available,
                active=active,
                pre_minted=pre_minted,
                now=now,
            )
        logger.info(
            "[registry] created edition=%s artist=%s available=%s",
            number, edition.artist, total_available,
        )
        return edition

    def update_active(self, db: Session, *, caller: str, number: int, active: bool) -> None:
        with atomic(db):
            self._editable(db, caller, number).active = active
            db.flush()

    def update_start_date(self, db: Session, *, caller: str, number: int, start_date: int) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if start_date < 0:
                raise InvalidArgument("Start date cannot be negative.")
            edition.start_date = start_date
            db.flush()

    def update_end_date(self, db: Session, *, caller: str, number: int, end_date: int) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if end_date < 0:
                raise InvalidArgument("End date cannot be negative.")
            edition.end_date = end_date or MAX_UINT32
            db.flush()

    def update_total_available(
        self, db: Session, *, caller: str, number: int, total_available: int
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if total_available < edition.minted:
                raise InvariantViolation(
                    f"Total available {total_available} below minted {edition.minted}."
                )
            state = get_market_state(db)
            state.total_number_available += total_available - edition.total_available
            edition.total_available = total_available
            db.flush()
        logger.info("[registry] edition=%s total_available=%s", number, total_available)

    def update_total_supply(
        self, db: Session, *, caller: str, number: int, total_supply: int
    ) -> None:
        """
        Overrides the minted counter (pre-mint). It can only move up and
        never past total_available.
        """
        with atomic(db):
            edition = self._editable(db, caller, number)
            if total_supply < edition.minted:
                raise InvariantViolation(
                    f"Total supply {total_supply} below minted {edition.minted}."
                )
            if total_supply > edition.total_available:
                raise InvariantViolation(
                    f"Total supply {total_supply} exceeds total available {edition.total_available}."
                )
            state = get_market_state(db)
            state.total_number_minted += total_supply - edition.minted
            edition.minted = total_supply
            db.flush()
        logger.info("[registry] edition=%s minted override=%s", number, total_supply)

    def update_artists_account(
        self, db: Session, *, caller: str, number: int, artist: str
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            artist = normalize_address(artist)
            if is_zero(artist):
                raise InvalidArgument("Artist cannot be the zero address.")
            if artist == edition.artist:
                return
            self._vacate_listing(db, ListingKind.BY_ARTIST, edition.artist, number)
            self._append_listing(db, ListingKind.BY_ARTIST, artist, number)
            edition.artist = artist
            db.flush()

    def update_edition_type(
        self, db: Session, *, caller: str, number: int, edition_type: int
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if edition_type <= 0:
                raise InvalidArgument("Edition type must be non-zero.")
            if edition_type == edition.edition_type:
                return
            self._vacate_listing(db, ListingKind.BY_TYPE, str(edition.edition_type), number)
            self._append_listing(db, ListingKind.BY_TYPE, str(edition_type), number)
            edition.edition_type = edition_type
            db.flush()

    def update_price_in_wei(
        self, db: Session, *, caller: str, number: int, price_in_wei: int
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if price_in_wei < 0:
                raise InvalidArgument("Price cannot be negative.")
            edition.price_in_wei = price_in_wei
            db.flush()

    def update_artist_commission(
        self, db: Session, *, caller: str, number: int, artist_commission: int
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            _check_commission(artist_commission, edition.optional_commission_rate)
            edition.artist_commission = artist_commission
            db.flush()

    def update_edition_token_uri(
        self, db: Session, *, caller: str, number: int, token_uri: str
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            if not token_uri:
                raise InvalidArgument("Token URI is missing")
            edition.token_uri_suffix = token_uri
            db.flush()

    def set_optional_commission_unchecked(
        self, db: Session, edition: Edition, *, rate: int, recipient: str
    ) -> None:
        recipient = normalize_address(recipient)
        if rate > 0 and is_zero(recipient):
            raise InvalidArgument("Optional commission recipient cannot be the zero address.")
        _check_commission(edition.artist_commission, rate)
        edition.optional_commission_rate = rate
        edition.optional_commission_recipient = recipient
        db.flush()

    def update_optional_commission(
        self, db: Session, *, caller: str, number: int, rate: int, recipient: str
    ) -> None:
        with atomic(db):
            edition = self._editable(db, caller, number)
            self.set_optional_commission_unchecked(db, edition, rate=rate, recipient=recipient)

    # ─────────────────────────────────────────────
    # READS
    # ─────────────────────────────────────────────

    def edition_exists(self, db: Session, number: int) -> bool:
        return bool(number) and db.get(Edition, number) is not None

    def details_of_edition(self, db: Session, number: int) -> EditionDetails:
        e = self.get_edition(db, number)
        return EditionDetails(
            data=e.data,
            edition_type=e.edition_type,
            start_date=e.start_date,
            end_date=e.end_date,
            artist=e.artist,
            artist_commission=e.artist_commission,
            price_in_wei=e.price_in_wei,
            token_uri=self.token_uri_edition(db, number),
            minted=e.minted,
            total_available=e.total_available,
            active=e.active,
        )

    def token_uri_edition(self, db: Session, number: int) -> str:
        e = self.get_edition(db, number)
        return get_market_state(db).token_base_uri + e.token_uri_suffix

    def editions_of_type(self, db: Session, edition_type: int) -> List[int]:
        return self._listing(db, ListingKind.BY_TYPE, str(edition_type))

    def artists_editions(self, db: Session, artist: str) -> List[int]:
        return self._listing(db, ListingKind.BY_ARTIST, normalize_address(artist))

    def purchase_dates_edition(self, db: Session, number: int) -> Tuple[int, int]:
        e = self.get_edition(db, number)
        return e.start_date, e.end_date

    def price_in_wei_edition(self, db: Session, number: int) -> int:
        return self.get_edition(db, number).price_in_wei

    def edition_active(self, db: Session, number: int) -> bool:
        return self.get_edition(db, number).active

    def artist_commission(self, db: Session, number: int) -> Tuple[str, int]:
        e = self.get_edition(db, number)
        return e.artist, e.artist_commission

    def edition_optional_commission(self, db: Session, number: int) -> Tuple[int, str]:
        e = self.get_edition(db, number)
        return e.optional_commission_rate, e.optional_commission_recipient

    def total_remaining(self, db: Session, number: int) -> int:
        return self.get_edition(db, number).remaining

    def total_supply_edition(self, db: Session, number: int) -> int:
        return self.get_edition(db, number).minted

    def total_available_edition(self, db: Session, number: int) -> int:
        return self.get_edition(db, number).total_available

    def tokens_of_edition(self, db: Session, number: int) -> List[int]:
        self.get_edition(db, number)
        return list(
            db.execute(
                select(EditionTokenSlot.token_id)
                .where(EditionTokenSlot.edition_number == number)
                .order_by(EditionTokenSlot.position.asc())
            ).scalars().all()
        )

    def highest_edition_number(self, db: Session) -> int:
        return get_market_state(db).highest_edition_number

    def total_number_available(self, db: Session) -> int:
        return get_market_state(db).total_number_available

    def total_number_minted(self, db: Session) -> int:
        return get_market_state(db).total_number_minted

    def total_purchase_value_in_wei(self, db: Session) -> int:
        return get_market_state(db).total_purchase_value_in_wei
