import pytest

from app.core.errors import InvalidArgument, InvariantViolation, NotFound, Unauthorized
from app.core.types import MAX_UINT32
from app.models.enums import Role
from app.services.access_control_service import AccessControlService
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService
from app.tests.factories import (
    ARTIST,
    ARTIST_2,
    EDITION_1,
    EDITION_2,
    OWNER,
    PRICE,
    SPLIT,
    STRANGER,
    create_edition,
)


def test_create_edition_records_details_and_counters(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=3)

    d = reg.details_of_edition(db, EDITION_1)
    assert d.artist == ARTIST
    assert d.artist_commission == 76
    assert d.price_in_wei == PRICE
    assert d.minted == 0
    assert d.total_available == 3
    assert d.active is True
    assert d.token_uri == "https://ipfs.infura.io/ipfs/abc123"

    assert reg.highest_edition_number(db) == EDITION_1
    assert reg.total_number_available(db) == 3
    assert reg.total_number_minted(db) == 0
    assert reg.editions_of_type(db, 1) == [EDITION_1]
    assert reg.artists_editions(db, ARTIST) == [EDITION_1]


def test_zero_end_date_means_open_ended(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, start_date=10, end_date=0)

    assert reg.purchase_dates_edition(db, EDITION_1) == (10, MAX_UINT32)


def test_edition_created_event(db, clock):
    create_edition(db, clock, data=b"\xab\xcd", edition_type=2)

    [event] = EventService().list_events(db, event_type="EditionCreated")
    assert event.payload_json["args"] == {
        "_editionNumber": EDITION_1,
        "_editionData": "0xabcd",
        "_editionType": 2,
    }


def test_edition_number_must_clear_previous_range(db, clock):
    create_edition(db, clock, number=EDITION_1, total_available=3)

    with pytest.raises(InvalidArgument):
        create_edition(db, clock, number=EDITION_1 + 3)

    create_edition(db, clock, number=EDITION_1 + 4)


def test_duplicate_edition_rejected(db, clock):
    create_edition(db, clock)

    with pytest.raises(InvalidArgument):
        create_edition(db, clock)


@pytest.mark.parametrize(
    "overrides",
    [
        {"number": 0},
        {"edition_type": 0},
        {"artist": "0x" + "0" * 40},
        {"token_uri": ""},
        {"artist_commission": 101},
        {"total_available": 0},
    ],
)
def test_invalid_edition_inputs(db, clock, overrides):
    with pytest.raises(InvalidArgument):
        create_edition(db, clock, **overrides)

    assert EditionRegistryService(clock).highest_edition_number(db) == 0


def test_create_requires_creator_role(db, clock):
    with pytest.raises(Unauthorized):
        create_edition(db, clock, caller=STRANGER)

    AccessControlService(clock).add_address_to_access_control(
        db, caller=OWNER, address=STRANGER, role=Role.CREATOR
    )
    create_edition(db, clock, caller=STRANGER)


def test_pre_minted_counts_towards_totals(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=5, pre_minted=2)

    assert reg.total_supply_edition(db, EDITION_1) == 2
    assert reg.total_remaining(db, EDITION_1) == 3
    assert reg.total_number_minted(db) == 2

    with pytest.raises(InvariantViolation):
        create_edition(db, clock, number=EDITION_2, total_available=1, pre_minted=2)


def test_unknown_edition_is_not_found(db, clock):
    reg = EditionRegistryService(clock)

    assert reg.edition_exists(db, EDITION_1) is False
    assert reg.edition_exists(db, 0) is False
    with pytest.raises(NotFound):
        reg.details_of_edition(db, EDITION_1)
    with pytest.raises(NotFound):
        reg.details_of_edition(db, 0)


def test_update_total_available_adjusts_platform_counter(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=3)
    create_edition(db, clock, number=EDITION_2, total_available=10)

    reg.update_total_available(db, caller=OWNER, number=EDITION_1, total_available=7)

    assert reg.total_available_edition(db, EDITION_1) == 7
    assert reg.total_number_available(db) == 17


def test_total_available_cannot_drop_below_minted(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=5, pre_minted=3)

    with pytest.raises(InvariantViolation):
        reg.update_total_available(db, caller=OWNER, number=EDITION_1, total_available=2)

    assert reg.total_available_edition(db, EDITION_1) == 5


def test_update_total_supply_moves_minted_counter(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=5)

    reg.update_total_supply(db, caller=OWNER, number=EDITION_1, total_supply=4)

    assert reg.total_supply_edition(db, EDITION_1) == 4
    assert reg.total_number_minted(db) == 4

    with pytest.raises(InvariantViolation):
        reg.update_total_supply(db, caller=OWNER, number=EDITION_1, total_supply=6)
    with pytest.raises(InvariantViolation):
        reg.update_total_supply(db, caller=OWNER, number=EDITION_1, total_supply=3)


def test_reassigning_artist_leaves_zero_in_old_list(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, number=EDITION_1)
    create_edition(db, clock, number=EDITION_2)

    reg.update_artists_account(db, caller=OWNER, number=EDITION_1, artist=ARTIST_2)

    assert reg.artists_editions(db, ARTIST) == [0, EDITION_2]
    assert reg.artists_editions(db, ARTIST_2) == [EDITION_1]
    assert reg.artist_commission(db, EDITION_1) == (ARTIST_2, 76)


def test_changing_type_leaves_zero_in_old_list(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, number=EDITION_1, edition_type=1)

    reg.update_edition_type(db, caller=OWNER, number=EDITION_1, edition_type=3)

    assert reg.editions_of_type(db, 1) == [0]
    assert reg.editions_of_type(db, 3) == [EDITION_1]


def test_simple_updates(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock)

    reg.update_active(db, caller=OWNER, number=EDITION_1, active=False)
    reg.update_start_date(db, caller=OWNER, number=EDITION_1, start_date=100)
    reg.update_end_date(db, caller=OWNER, number=EDITION_1, end_date=0)
    reg.update_price_in_wei(db, caller=OWNER, number=EDITION_1, price_in_wei=5)
    reg.update_artist_commission(db, caller=OWNER, number=EDITION_1, artist_commission=50)
    reg.update_edition_token_uri(db, caller=OWNER, number=EDITION_1, token_uri="xyz")

    assert reg.edition_active(db, EDITION_1) is False
    assert reg.purchase_dates_edition(db, EDITION_1) == (100, MAX_UINT32)
    assert reg.price_in_wei_edition(db, EDITION_1) == 5
    assert reg.artist_commission(db, EDITION_1) == (ARTIST, 50)
    assert reg.token_uri_edition(db, EDITION_1).endswith("/xyz")


def test_updates_require_creator_role(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock)

    with pytest.raises(Unauthorized):
        reg.update_price_in_wei(db, caller=ARTIST, number=EDITION_1, price_in_wei=1)


def test_optional_commission_bounded_by_artist_commission(db, clock):
    reg = EditionRegistryService(clock)
    create_edition(db, clock, artist_commission=76)

    reg.update_optional_commission(db, caller=OWNER, number=EDITION_1, rate=24, recipient=SPLIT)
    assert reg.edition_optional_commission(db, EDITION_1) == (24, SPLIT)

    with pytest.raises(InvalidArgument):
        reg.update_optional_commission(db, caller=OWNER, number=EDITION_1, rate=25, recipient=SPLIT)
    with pytest.raises(InvalidArgument):
        reg.update_artist_commission(db, caller=OWNER, number=EDITION_1, artist_commission=77)

    assert reg.edition_optional_commission(db, EDITION_1) == (24, SPLIT)
