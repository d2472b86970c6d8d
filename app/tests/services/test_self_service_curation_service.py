import pytest

from app.core.errors import InvalidArgument, Throttled, Unauthorized
from app.services.auction_service import AuctionService
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService
from app.services.self_service_curation_service import SelfServiceCurationService
from app.tests.factories import ARTIST, ARTIST_2, OWNER, PRICE, SPLIT, START, STRANGER, create_edition


def _create(svc, db, creator=ARTIST, **overrides):
    params = dict(
        enable_auction=False,
        optional_split_address="0x" + "0" * 40,
        optional_split_rate=0,
        total_available=10,
        price_in_wei=PRICE,
        start_date=0,
        end_date=0,
        artist_commission=85,
        edition_type=1,
        token_uri="ipfs-hash",
    )
    params.update(overrides)
    return svc.create_edition(db, creator=creator, **params)


def _allow(svc, db, artist=ARTIST):
    svc.set_allowed_artist(db, caller=OWNER, artist=artist, allowed=True)


def test_numbering_rounds_up_to_next_block(db, clock):
    svc = SelfServiceCurationService(clock)
    create_edition(db, clock, number=20000, total_available=100)
    _allow(svc, db)

    assert svc.next_edition_number(db) == 20200
    assert _create(svc, db, total_available=10) == 20200
    assert svc.next_edition_number(db) == 20300


def test_numbering_on_empty_market(db, clock):
    svc = SelfServiceCurationService(clock)

    assert svc.next_edition_number(db) == 100


def test_created_edition_belongs_to_creator(db, clock):
    svc = SelfServiceCurationService(clock)
    reg = EditionRegistryService(clock)
    _allow(svc, db)

    number = _create(svc, db, optional_split_address=SPLIT, optional_split_rate=10)

    d = reg.details_of_edition(db, number)
    assert d.artist == ARTIST
    assert d.artist_commission == 85
    assert d.data == b""
    assert d.active is True
    assert reg.edition_optional_commission(db, number) == (10, SPLIT)
    assert AuctionService(clock).is_edition_enabled(db, number) is False

    names = [e.event_type for e in EventService().list_events(db)]
    assert names == ["EditionCreated", "SelfServiceEditionCreated"]


def test_enable_auction_makes_creator_controller(db, clock):
    svc = SelfServiceCurationService(clock)
    _allow(svc, db)

    number = _create(svc, db, enable_auction=True)

    details = AuctionService(clock).auction_details(db, number)
    assert details.enabled is True
    assert details.controller == ARTIST


def test_unlisted_artist_rejected(db, clock):
    svc = SelfServiceCurationService(clock)

    with pytest.raises(Unauthorized) as exc:
        _create(svc, db, creator=STRANGER)
    assert exc.value.reason == "Not allowed to create edition"


def test_open_to_all_requires_existing_edition(db, clock):
    svc = SelfServiceCurationService(clock)
    svc.set_open_to_all(db, caller=OWNER, open_to_all=True)

    with pytest.raises(Unauthorized) as exc:
        _create(svc, db, creator=ARTIST_2)
    assert exc.value.reason == "Can only mint your own once we have enabled you on the platform"

    create_edition(db, clock, artist=ARTIST_2)
    assert _create(svc, db, creator=ARTIST_2) > 0


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"total_available": 0}, "Invalid edition size"),
        ({"total_available": 101}, "Invalid edition size"),
        ({"token_uri": ""}, "Token URI is missing"),
        ({"end_date": START}, "End date cannot be in the past"),
        ({"artist_commission": 95, "optional_split_rate": 6}, "Total commission exceeds 100"),
    ],
)
def test_creation_validation(db, clock, overrides, reason):
    svc = SelfServiceCurationService(clock)
    _allow(svc, db)

    with pytest.raises(InvalidArgument) as exc:
        _create(svc, db, **overrides)
    assert exc.value.reason == reason
    assert EditionRegistryService(clock).highest_edition_number(db) == 0


def test_min_price_enforced(db, clock):
    svc = SelfServiceCurationService(clock)
    _allow(svc, db)
    svc.set_min_price_per_edition(db, caller=OWNER, min_price=PRICE)

    with pytest.raises(InvalidArgument) as exc:
        _create(svc, db, price_in_wei=PRICE - 1)
    assert exc.value.reason == "Invalid price"

    _create(svc, db, price_in_wei=PRICE)


def test_max_edition_size_setting(db, clock):
    svc = SelfServiceCurationService(clock)
    _allow(svc, db)
    svc.set_max_edition_size(db, caller=OWNER, max_size=5)

    assert svc.max_edition_size(db) == 5
    with pytest.raises(InvalidArgument):
        _create(svc, db, total_available=6)


def test_freeze_window_throttles_creator(db, clock):
    svc = SelfServiceCurationService(clock)
    _allow(svc, db)
    _allow(svc, db, ARTIST_2)
    svc.set_freeze_window(db, caller=OWNER, window=3600)

    _create(svc, db)
    assert svc.can_create_another_edition(db, ARTIST) is False

    with pytest.raises(Throttled) as exc:
        _create(svc, db)
    assert exc.value.reason == "Sender currently frozen out of creation"

    _create(svc, db, creator=ARTIST_2)

    clock.advance(3600)
    assert svc.can_create_another_edition(db, ARTIST) is True
    _create(svc, db)


def test_owner_creates_for_artist(db, clock):
    svc = SelfServiceCurationService(clock)
    params = dict(
        enable_auction=True,
        optional_split_address="0x" + "0" * 40,
        optional_split_rate=0,
        total_available=5,
        price_in_wei=PRICE,
        start_date=0,
        end_date=0,
        artist_commission=85,
        edition_type=1,
        token_uri="ipfs-hash",
    )

    with pytest.raises(Unauthorized):
        svc.create_edition_for(db, caller=STRANGER, artist=ARTIST, **params)

    number = svc.create_edition_for(db, caller=OWNER, artist=ARTIST, **params)
    assert EditionRegistryService(clock).artists_editions(db, ARTIST) == [number]


def test_settings_are_owner_only(db, clock):
    svc = SelfServiceCurationService(clock)

    with pytest.raises(Unauthorized):
        svc.set_open_to_all(db, caller=ARTIST, open_to_all=True)
    with pytest.raises(Unauthorized):
        svc.set_freeze_window(db, caller=ARTIST, window=1)

    assert svc.is_open_to_all(db) is False
    assert svc.freeze_window(db) == 0
    assert svc.min_price_per_edition(db) == 0
