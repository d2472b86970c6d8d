# app/tests/factories.py
from __future__ import annotations

from app.services.edition_registry_service import EditionRegistryService
from app.services.fungible_ledger_service import FungibleLedgerService


def addr(n: int) -> str:
    return "0x" + format(n, "040x")


ZERO = addr(0)
OWNER = addr(0x01)
MARKET = addr(0xA1)
AUCTION = addr(0xA2)

ARTIST = addr(0x10)
ARTIST_2 = addr(0x11)
SPLIT = addr(0x12)
COMMISSION = addr(0x13)

BUYER = addr(0x20)
BUYER_2 = addr(0x21)

BIDDER_1 = addr(0x31)
BIDDER_2 = addr(0x32)
BIDDER_3 = addr(0x33)
BIDDER_4 = addr(0x34)

STRANGER = addr(0x99)

START = 1_600_000_000
ETHER = 10 ** 18
PRICE = 10 ** 17
MIN_BID = 10 ** 16

EDITION_1 = 100000
EDITION_2 = 200000


def create_edition(
    db,
    clock,
    *,
    number: int = EDITION_1,
    edition_type: int = 1,
    artist: str = ARTIST,
    artist_commission: int = 76,
    price_in_wei: int = PRICE,
    total_available: int = 3,
    start_date: int = 0,
    end_date: int = 0,
    token_uri: str = "abc123",
    active: bool = True,
    pre_minted: int = 0,
    data: bytes = b"\x01\x02",
    caller: str = OWNER,
):
    return EditionRegistryService(clock).create_edition(
        db,
        caller=caller,
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
    )


def fund(db, who: str, amount: int, spender: str) -> None:
    ledger = FungibleLedgerService()
    ledger.mint(db, to=who, amount=amount)
    ledger.approve(db, owner=who, spender=spender, amount=amount)
