"""HTTP-level tests for the marketplace API.

The app is built without running its lifespan; the registry, ledger and
settings providers are overridden with the suite's fixtures so every test
starts from a clean, deterministic world.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from resale_escrow.api.deps import get_app_settings, get_ledger, get_registry
from resale_escrow.config import Settings
from resale_escrow.main import create_app

TOKEN = 1_000_000
DAY = 86_400


@pytest.fixture
def client(registry, ledger) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_app_settings] = lambda: Settings(app_env="development")
    return TestClient(app)


def _list(client: TestClient, caller: str = "seller") -> int:
    response = client.post(
        "/api/v1/listings",
        json={"caller": caller, "unit_price": 100 * TOKEN, "quantity": 2},
    )
    assert response.status_code == 201
    return response.json()["transaction_id"]


def _purchase(client: TestClient, transaction_id: int) -> dict:
    response = client.post(f"/api/v1/listings/{transaction_id}/purchase", json={"caller": "buyer"})
    assert response.status_code == 200
    return response.json()


class TestListingLifecycle:
    def test_create_and_fetch(self, client: TestClient) -> None:
        tx = _list(client)
        body = client.get(f"/api/v1/listings/{tx}").json()

        assert body["seller"] == "seller"
        assert body["ticket_total"] == 200 * TOKEN
        assert body["closed"] is False
        assert body["escrow_status"] is None
        assert [item["transaction_id"] for item in client.get("/api/v1/listings").json()] == [tx]

    def test_happy_path_release(self, client: TestClient) -> None:
        tx = _list(client)
        assert _purchase(client, tx)["listing"]["escrow_status"] == "OPEN"

        first = client.post(f"/api/v1/listings/{tx}/confirm/seller", json={"caller": "seller"})
        assert first.status_code == 200
        assert first.json()["settlement"] is None

        second = client.post(f"/api/v1/listings/{tx}/confirm/buyer", json={"caller": "buyer"}).json()
        payouts = {p["recipient"]: p["amount"] for p in second["settlement"]["payouts"]}
        assert second["listing"]["closed"] is True
        assert second["settlement"]["path"] == "CONFIRMATION_RELEASE"
        assert payouts == {"buyer": 50 * TOKEN, "seller": 241_500_000, "platform": 8_500_000}

        settlement = client.get(f"/api/v1/listings/{tx}/settlement")
        assert settlement.status_code == 200
        assert settlement.json()["total"] == 300 * TOKEN

        events = client.get(f"/api/v1/listings/{tx}/events").json()
        assert events[-1]["event_type"] == "FUNDS_RELEASED"

    def test_dispute_resolved_for_buyer(self, client: TestClient) -> None:
        tx = _list(client)
        _purchase(client, tx)

        disputed = client.post(f"/api/v1/listings/{tx}/dispute", json={"caller": "buyer"}).json()
        assert disputed["listing"]["disputed"] is True

        resolved = client.post(
            f"/api/v1/listings/{tx}/resolve",
            json={"caller": "owner", "winner": "buyer"},
        ).json()
        assert resolved["settlement"]["path"] == "DISPUTE_RESOLUTION"
        assert resolved["settlement"]["detail"] == "BUYER_WINS"
        assert client.get("/api/v1/ledger/platform").json()["balance"] == 35 * TOKEN

    def test_timeout_after_deadline(self, client: TestClient, clock) -> None:
        tx = _list(client)
        _purchase(client, tx)

        early = client.post(f"/api/v1/listings/{tx}/timeout", json={"caller": "buyer"})
        assert early.status_code == 425
        assert early.json()["error"] == "DEADLINE_NOT_REACHED"

        clock.advance(DAY)
        status = client.get(f"/api/v1/listings/{tx}/status").json()
        assert "timeout" in status["allowed_actions"]

        claimed = client.post(f"/api/v1/listings/{tx}/timeout", json={"caller": "buyer"})
        assert claimed.status_code == 200
        assert claimed.json()["settlement"]["detail"] == "SELLER"

    def test_close_unsold_listing(self, client: TestClient) -> None:
        tx = _list(client)
        response = client.post(f"/api/v1/listings/{tx}/close", json={"caller": "seller"})
        assert response.status_code == 200
        assert response.json()["listing"]["closed"] is True
        assert client.get("/api/v1/listings").json() == []


class TestErrorMapping:
    def test_unknown_listing_is_404(self, client: TestClient) -> None:
        response = client.get("/api/v1/listings/99")
        assert response.status_code == 404
        assert response.json() == {
            "error": "LISTING_NOT_FOUND",
            "category": "PRECONDITION",
            "message": "Listing not found: 99",
        }

    def test_unsettled_listing_has_no_settlement(self, client: TestClient) -> None:
        tx = _list(client)
        assert client.get(f"/api/v1/listings/{tx}/settlement").status_code == 404

    def test_wrong_party_is_403(self, client: TestClient) -> None:
        tx = _list(client)
        response = client.post(f"/api/v1/listings/{tx}/close", json={"caller": "mallory"})
        assert response.status_code == 403
        assert response.json()["error"] == "NOT_SELLER"
        assert response.json()["category"] == "AUTHORIZATION"

    def test_state_conflict_is_409(self, client: TestClient) -> None:
        tx = _list(client)
        _purchase(client, tx)
        response = client.post(f"/api/v1/listings/{tx}/purchase", json={"caller": "mallory"})
        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_SOLD"

    def test_zero_price_is_422_with_domain_reason(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/listings",
            json={"caller": "seller", "unit_price": 0, "quantity": 1},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "ZERO_PRICE"

    def test_self_purchase_is_422(self, client: TestClient) -> None:
        tx = _list(client)
        response = client.post(f"/api/v1/listings/{tx}/purchase", json={"caller": "seller"})
        assert response.status_code == 422
        assert response.json()["error"] == "SELF_PURCHASE"

    def test_failed_transfer_is_502(self, client: TestClient, ledger) -> None:
        tx = _list(client)
        _purchase(client, tx)
        client.post(f"/api/v1/listings/{tx}/confirm/seller", json={"caller": "seller"})
        ledger.fail_transfers_to("platform")

        response = client.post(f"/api/v1/listings/{tx}/confirm/buyer", json={"caller": "buyer"})
        assert response.status_code == 502
        assert response.json()["error"] == "TRANSFER_FAILED"
        assert client.get(f"/api/v1/listings/{tx}").json()["closed"] is False

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestAdmin:
    def test_add_and_remove_resolver(self, client: TestClient) -> None:
        added = client.post(
            "/api/v1/admin/resolvers",
            json={"caller": "owner", "principal": "arbiter"},
        )
        assert added.json()["resolvers"] == ["arbiter", "owner"]

        removed = client.delete("/api/v1/admin/resolvers/arbiter", params={"caller": "owner"})
        assert removed.json()["resolvers"] == ["owner"]

    def test_owner_cannot_be_removed(self, client: TestClient) -> None:
        response = client.delete("/api/v1/admin/resolvers/owner", params={"caller": "owner"})
        assert response.status_code == 422
        assert response.json()["error"] == "CANNOT_REMOVE_OWNER"

    def test_non_owner_rejected(self, client: TestClient) -> None:
        response = client.post("/api/v1/admin/close", json={"caller": "mallory"})
        assert response.status_code == 403
        assert response.json()["error"] == "NOT_OWNER"

    def test_close_registry_blocks_new_listings(self, client: TestClient) -> None:
        closed = client.post("/api/v1/admin/close", json={"caller": "owner"})
        assert closed.json()["registry_open"] is False

        response = client.post(
            "/api/v1/listings",
            json={"caller": "seller", "unit_price": TOKEN, "quantity": 1},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "REGISTRY_CLOSED"
        assert client.get("/health").json()["registry_open"] is False


class TestLedgerAndHealth:
    def test_mint_and_approve(self, client: TestClient, ledger) -> None:
        minted = client.post("/api/v1/ledger/mint", json={"account": "carol", "amount": 5 * TOKEN})
        assert minted.json() == {"account": "carol", "balance": 5 * TOKEN}

        approved = client.post(
            "/api/v1/ledger/approve",
            json={"owner": "carol", "spender": "registry", "amount": TOKEN},
        )
        assert approved.status_code == 200
        assert ledger.allowance("carol", "registry") == TOKEN

    def test_mint_disabled_outside_development(self, client: TestClient) -> None:
        client.app.dependency_overrides[get_app_settings] = lambda: Settings(app_env="production")
        response = client.post("/api/v1/ledger/mint", json={"account": "carol", "amount": 1})
        assert response.status_code == 403

    def test_mint_validates_amount(self, client: TestClient) -> None:
        response = client.post("/api/v1/ledger/mint", json={"account": "carol", "amount": 0})
        assert response.status_code == 422

    def test_health(self, client: TestClient) -> None:
        _list(client)
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["open_listings"] == 1


class TestFiltersAndAudit:
    def test_filter_by_seller(self, client: TestClient) -> None:
        tx = _list(client)
        client.post(f"/api/v1/listings/{tx}/close", json={"caller": "seller"})
        other = _list(client, caller="mallory")

        mine = client.get("/api/v1/listings", params={"seller": "seller"}).json()
        assert [item["transaction_id"] for item in mine] == [tx]
        assert mine[0]["closed"] is True
        assert [item["transaction_id"] for item in client.get("/api/v1/listings").json()] == [other]

    def test_admin_audit_log(self, client: TestClient) -> None:
        _list(client)
        client.post("/api/v1/admin/close", json={"caller": "owner"})

        events = client.get("/api/v1/admin/events").json()
        assert [e["event_type"] for e in events] == ["LISTING_CREATED", "REGISTRY_CLOSED"]
        assert events[1]["transaction_id"] is None
