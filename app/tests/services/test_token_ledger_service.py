import pytest

from app.core.errors import Inactive, InvalidArgument, NotFound, SoldOut, Unauthorized
from app.models.enums import Role
from app.services.access_control_service import AccessControlService
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService
from app.services.token_ledger_service import TokenLedgerService
from app.tests.factories import (
    ARTIST,
    BUYER,
    BUYER_2,
    EDITION_1,
    OWNER,
    PRICE,
    STRANGER,
    ZERO,
    create_edition,
)


def test_token_ids_follow_edition_number(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, total_available=3)

    ids = [tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1) for _ in range(3)]

    assert ids == [100001, 100002, 100003]
    assert tokens.tokens_of(db, BUYER) == ids
    assert tokens.balance_of(db, BUYER) == 3
    assert EditionRegistryService(clock).tokens_of_edition(db, EDITION_1) == ids


def test_mint_beyond_supply_is_sold_out(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, total_available=1)
    tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    with pytest.raises(SoldOut):
        tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    assert EditionRegistryService(clock).total_number_minted(db) == 1


def test_mint_inactive_edition_rejected(db, clock):
    create_edition(db, clock, active=False)

    with pytest.raises(Inactive):
        TokenLedgerService(clock).mint(db, caller=OWNER, to=BUYER, number=EDITION_1)


def test_minter_role_can_mint_but_not_burn(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock)
    AccessControlService(clock).add_address_to_access_control(
        db, caller=OWNER, address=STRANGER, role=Role.MINTER
    )

    token_id = tokens.mint(db, caller=STRANGER, to=BUYER, number=EDITION_1)

    with pytest.raises(Unauthorized):
        tokens.burn(db, caller=STRANGER, token_id=token_id)
    with pytest.raises(Unauthorized):
        tokens.mint(db, caller=BUYER, to=BUYER, number=EDITION_1)


def test_mint_emits_transfer_then_minted(db, clock):
    create_edition(db, clock)
    TokenLedgerService(clock).mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    events = EventService().list_events(db)
    assert [e.event_type for e in events] == ["EditionCreated", "Transfer", "Minted"]
    assert events[1].payload_json["args"] == {"_from": ZERO, "_to": BUYER, "_tokenId": 100001}
    assert events[2].payload_json["args"] == {
        "_buyer": BUYER,
        "_editionNumber": EDITION_1,
        "_tokenId": 100001,
    }


def test_burn_leaves_zero_slot_and_keeps_counters(db, clock):
    tokens = TokenLedgerService(clock)
    reg = EditionRegistryService(clock)
    create_edition(db, clock, total_available=3)
    first = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    second = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    tokens.burn(db, caller=OWNER, token_id=first)

    assert reg.tokens_of_edition(db, EDITION_1) == [0, second]
    assert tokens.exists(db, first) is False
    assert tokens.edition_of_token_id(db, first) == 0
    assert tokens.tokens_of(db, BUYER) == [second]
    assert reg.total_supply_edition(db, EDITION_1) == 2
    assert tokens.purchase_dates_token(db, first) == (0, 0)
    assert tokens.price_in_wei_token(db, first) == 0
    assert tokens.price_in_wei_token(db, second) == PRICE

    with pytest.raises(NotFound):
        tokens.owner_of(db, first)

    third = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    assert third == 100003


def test_token_data_and_uri(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, edition_type=4, data=b"\x09")
    token_id = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    data = tokens.token_data(db, token_id)
    assert data.edition_number == EDITION_1
    assert data.edition_type == 4
    assert data.data == b"\x09"
    assert data.owner == BUYER
    assert data.token_uri == "https://ipfs.infura.io/ipfs/abc123"

    tokens.set_token_uri(db, caller=OWNER, token_id=token_id, token_uri="custom")
    assert tokens.token_uri(db, token_id).endswith("/custom")


def test_transfer_by_owner(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock)
    token_id = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    tokens.transfer(db, caller=BUYER, to=BUYER_2, token_id=token_id)

    assert tokens.owner_of(db, token_id) == BUYER_2


def test_transfer_from_needs_operator_approval(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock)
    token_id = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    with pytest.raises(Unauthorized):
        tokens.transfer_from(db, caller=STRANGER, from_=BUYER, to=BUYER_2, token_id=token_id)

    tokens.set_approval_for_all(db, caller=BUYER, operator=STRANGER, approved=True)
    assert tokens.is_approved_for_all(db, owner=BUYER, operator=STRANGER)

    tokens.transfer_from(db, caller=STRANGER, from_=BUYER, to=BUYER_2, token_id=token_id)
    assert tokens.owner_of(db, token_id) == BUYER_2


def test_batch_transfer_is_all_or_nothing(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, total_available=3)
    a = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    b = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    c = tokens.mint(db, caller=OWNER, to=BUYER_2, number=EDITION_1)

    with pytest.raises(Unauthorized):
        tokens.batch_transfer(db, caller=BUYER, to=ARTIST, token_ids=[a, b, c])

    assert tokens.tokens_of(db, BUYER) == [a, b]
    assert tokens.tokens_of(db, ARTIST) == []

    tokens.batch_transfer(db, caller=BUYER, to=ARTIST, token_ids=[a, b])
    assert tokens.tokens_of(db, ARTIST) == [a, b]


def test_batch_transfer_requires_tokens(db, clock):
    with pytest.raises(InvalidArgument):
        TokenLedgerService(clock).batch_transfer(db, caller=BUYER, to=ARTIST, token_ids=[])


def test_transfer_to_zero_rejected(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock)
    token_id = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    with pytest.raises(InvalidArgument):
        tokens.transfer(db, caller=BUYER, to=ZERO, token_id=token_id)


def test_batch_transfer_from_by_approved_operator(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, total_available=3)
    a = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    b = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)

    with pytest.raises(Unauthorized):
        tokens.batch_transfer_from(db, caller=STRANGER, from_=BUYER, to=BUYER_2, token_ids=[a, b])

    tokens.set_approval_for_all(db, caller=BUYER, operator=STRANGER, approved=True)
    tokens.batch_transfer_from(db, caller=STRANGER, from_=BUYER, to=BUYER_2, token_ids=[a, b])

    assert tokens.tokens_of(db, BUYER) == []
    assert tokens.tokens_of(db, BUYER_2) == [a, b]


def test_batch_transfer_from_is_all_or_nothing(db, clock):
    tokens = TokenLedgerService(clock)
    create_edition(db, clock, total_available=3)
    a = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    b = tokens.mint(db, caller=OWNER, to=BUYER, number=EDITION_1)
    c = tokens.mint(db, caller=OWNER, to=ARTIST, number=EDITION_1)
    tokens.set_approval_for_all(db, caller=BUYER, operator=STRANGER, approved=True)

    with pytest.raises(Unauthorized):
        tokens.batch_transfer_from(
            db, caller=STRANGER, from_=BUYER, to=BUYER_2, token_ids=[a, b, c]
        )

    assert tokens.tokens_of(db, BUYER) == [a, b]
    assert tokens.tokens_of(db, ARTIST) == [c]
    assert tokens.tokens_of(db, BUYER_2) == []
