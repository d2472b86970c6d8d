from app.tests.factories import (
    ARTIST,
    AUCTION,
    BIDDER_1,
    BUYER,
    EDITION_1,
    ETHER,
    MARKET,
    OWNER,
    PRICE,
    STRANGER,
)

API = "/api/v1"


def _as(address):
    return {"X-Caller-Address": address}


def _create_edition(client, **overrides):
    body = {
        "number": EDITION_1,
        "data": "0x0102",
        "edition_type": 1,
        "artist": ARTIST,
        "artist_commission": 76,
        "price_in_wei": PRICE,
        "token_uri": "abc123",
        "total_available": 3,
    }
    body.update(overrides)
    return client.post(f"{API}/editions", json=body, headers=_as(OWNER))


def _fund(client, who, amount, spender):
    r = client.post(f"{API}/ledger/mint", json={"to": who, "amount": amount}, headers=_as(OWNER))
    assert r.status_code == 200, r.text
    r = client.post(f"{API}/ledger/approve", json={"spender": spender, "amount": amount}, headers=_as(who))
    assert r.status_code == 200, r.text


def test_health_reports_bootstrapped(client):
    r = client.get(f"{API}/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["bootstrapped"] is True
    assert body["request_id"]


def test_missing_caller_header_is_rejected(client):
    r = client.post(f"{API}/market/pause")
    assert r.status_code == 401

    r = client.post(f"{API}/market/pause", headers=_as("not-an-address"))
    assert r.status_code == 400


def test_create_and_read_edition(client):
    r = _create_edition(client)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["number"] == EDITION_1
    assert body["data"] == "0x0102"
    assert body["token_uri"] == "https://ipfs.infura.io/ipfs/abc123"
    assert body["total_remaining"] == 3

    r = client.get(f"{API}/editions/by-artist/{ARTIST}")
    assert r.json() == {"editions": [EDITION_1]}

    r = client.get(f"{API}/editions/counters")
    assert r.json()["total_number_available"] == 3


def test_create_edition_requires_creator_role(client):
    r = client.post(
        f"{API}/editions",
        json={
            "number": EDITION_1,
            "edition_type": 1,
            "artist": ARTIST,
            "artist_commission": 76,
            "price_in_wei": PRICE,
            "token_uri": "abc123",
            "total_available": 3,
        },
        headers=_as(STRANGER),
    )

    assert r.status_code == 403
    assert r.json()["kind"] == "Unauthorized"


def test_unknown_edition_is_404(client):
    r = client.get(f"{API}/editions/424242")

    assert r.status_code == 404
    assert r.json()["kind"] == "NotFound"


def test_patch_applies_all_fields_or_none(client):
    _create_edition(client)

    r = client.patch(
        f"{API}/editions/{EDITION_1}",
        json={"price_in_wei": 5, "total_available": 0, "token_uri": "new"},
        headers=_as(OWNER),
    )
    assert r.status_code == 200, r.text
    assert r.json()["price_in_wei"] == 5

    r = client.post(
        f"{API}/tokens/mint",
        json={"to": BUYER, "edition_number": EDITION_1},
        headers=_as(OWNER),
    )
    assert r.status_code == 409
    assert r.json()["kind"] == "SoldOut"

    client.patch(f"{API}/editions/{EDITION_1}", json={"total_available": 2}, headers=_as(OWNER))
    client.post(f"{API}/tokens/mint", json={"to": BUYER, "edition_number": EDITION_1}, headers=_as(OWNER))

    r = client.patch(
        f"{API}/editions/{EDITION_1}",
        json={"start_date": 77, "total_available": 0},
        headers=_as(OWNER),
    )
    assert r.status_code == 409
    assert r.json()["kind"] == "InvariantViolation"
    assert client.get(f"{API}/editions/{EDITION_1}").json()["start_date"] == 0


def test_purchase_flow(client):
    _create_edition(client)
    _fund(client, BUYER, ETHER, MARKET)

    r = client.post(
        f"{API}/purchases",
        json={"edition_number": EDITION_1, "amount": PRICE},
        headers=_as(BUYER),
    )
    assert r.status_code == 200, r.text
    token_id = r.json()["token_id"]
    assert token_id == 100001

    token = client.get(f"{API}/tokens/{token_id}").json()
    assert token["owner"] == BUYER
    assert token["edition_number"] == EDITION_1

    artist = client.get(f"{API}/ledger/balances/{ARTIST}").json()
    assert artist["balance"] == PRICE * 76 // 100

    r = client.get(f"{API}/events", params={"event_type": "Purchase"})
    body = r.json()
    assert body["chain_valid"] is True
    assert [e["args"]["_tokenId"] for e in body["events"]] == [token_id]


def test_purchase_without_allowance_is_402(client):
    _create_edition(client)
    client.post(f"{API}/ledger/mint", json={"to": BUYER, "amount": ETHER}, headers=_as(OWNER))

    r = client.post(
        f"{API}/purchases",
        json={"edition_number": EDITION_1, "amount": PRICE},
        headers=_as(BUYER),
    )

    assert r.status_code == 402
    assert client.get(f"{API}/editions/{EDITION_1}").json()["minted"] == 0


def test_paused_market_is_409(client):
    _create_edition(client)
    _fund(client, BUYER, ETHER, MARKET)

    assert client.post(f"{API}/market/pause", headers=_as(OWNER)).json()["paused"] is True

    r = client.post(
        f"{API}/purchases",
        json={"edition_number": EDITION_1, "amount": PRICE},
        headers=_as(BUYER),
    )
    assert r.status_code == 409
    assert r.json()["kind"] == "Paused"


def test_auction_bid_and_accept(client):
    _create_edition(client)
    _fund(client, BIDDER_1, ETHER, AUCTION)

    r = client.post(
        f"{API}/auctions/{EDITION_1}/enable",
        json={"controller": ARTIST},
        headers=_as(OWNER),
    )
    assert r.status_code == 200, r.text
    assert r.json()["controller"] == ARTIST

    r = client.post(f"{API}/auctions/{EDITION_1}/bids", json={"amount": ETHER // 2}, headers=_as(BIDDER_1))
    assert r.status_code == 200, r.text
    assert r.json()["bidder"] == BIDDER_1

    r = client.post(f"{API}/auctions/{EDITION_1}/accept", headers=_as(ARTIST))
    assert r.status_code == 200, r.text
    assert r.json()["token_id"] == 100001

    settings = client.get(f"{API}/auctions").json()
    assert settings["escrow_balance"] == 0
    assert settings["editions"] == [EDITION_1]


def test_low_bid_is_rejected(client):
    _create_edition(client)
    _fund(client, BIDDER_1, ETHER, AUCTION)
    client.post(f"{API}/auctions/{EDITION_1}/enable", json={"controller": ARTIST}, headers=_as(OWNER))

    r = client.post(f"{API}/auctions/{EDITION_1}/bids", json={"amount": 1}, headers=_as(BIDDER_1))

    assert r.status_code == 409
    assert r.json()["kind"] == "InsufficientBid"


def test_self_service_creation(client):
    r = client.put(
        f"{API}/self-service/allowed-artists",
        json={"artist": ARTIST, "allowed": True},
        headers=_as(OWNER),
    )
    assert r.status_code == 200, r.text
    assert r.json()["allowed"] is True

    r = client.post(
        f"{API}/self-service/editions",
        json={
            "total_available": 10,
            "price_in_wei": PRICE,
            "artist_commission": 85,
            "edition_type": 1,
            "token_uri": "ipfs-hash",
            "enable_auction": True,
        },
        headers=_as(ARTIST),
    )
    assert r.status_code == 200, r.text
    number = r.json()["edition_number"]
    assert number == 100

    assert client.get(f"{API}/auctions/{number}").json()["controller"] == ARTIST


def test_self_service_rejects_unlisted_artist(client):
    r = client.post(
        f"{API}/self-service/editions",
        json={
            "total_available": 10,
            "price_in_wei": PRICE,
            "artist_commission": 85,
            "edition_type": 1,
            "token_uri": "ipfs-hash",
        },
        headers=_as(STRANGER),
    )

    assert r.status_code == 403
    assert r.json()["detail"] == "Not allowed to create edition"


def test_role_grant_over_api(client):
    r = client.post(
        f"{API}/access/roles",
        json={"address": STRANGER, "role": "MINTER"},
        headers=_as(OWNER),
    )
    assert r.status_code == 200, r.text
    assert r.json()["roles"] == ["MINTER"]

    r = client.get(f"{API}/access/{STRANGER}")
    assert r.json()["is_owner"] is False
