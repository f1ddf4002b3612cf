"""
Integration tests for the HTTP API.

Tests the full stack in-process: FastAPI app -> dependencies -> services ->
in-memory stores, using TestClient (httpx).
"""

import pytest
from fastapi.testclient import TestClient
from market_auth.api.app import create_app
from market_auth.config import Settings

ADMIN_EMAIL = "root@market.com"
ADMIN_PASSWORD = "rootpass1"

ANN = {"role": "customer", "name": "Ann Lee", "email": "ann@x.com", "password": "password1", "phone": "0711234567"}
BOB = {
    "role": "seller",
    "name": "Bob Stone",
    "email": "bob@shop.com",
    "password": "password1",
    "shopName": "Bob's Bakery",
    "phone": "0722345678",
    "address": "12 High Street",
}


@pytest.fixture
def client():
    """App wired with in-memory stores and a bootstrap admin."""
    settings = Settings(
        env="test",
        jwt_secret="test-secret-key",
        bcrypt_rounds=4,
        bootstrap_admin_email=ADMIN_EMAIL,
        bootstrap_admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
    )
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _login(client, email, password, role=None):
    body = {"email": email, "password": password}
    if role:
        body["role"] = role
    return client.post("/auth/login", json=body)


def _admin_token(client):
    response = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert response.status_code == 200
    return response.json()["token"]


def _approved_seller(client, seller=BOB):
    seller_id = client.post("/auth/register", json=seller).json()["user"]["id"]
    client.put(f"/admin/sellers/{seller_id}/approve", headers=_bearer(_admin_token(client)))
    return seller_id, _login(client, seller["email"], seller["password"]).json()["token"]


class TestAPIIntegration:
    """End-to-end HTTP behaviour."""

    def test_health_endpoint_no_auth(self, client):
        """Health endpoint doesn't require auth."""
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_registration_approval_scenario(self, client):
        """Customer signup, duplicate email, pending seller, approval, login."""
        response = client.post("/auth/register", json=ANN)
        assert response.status_code == 201
        assert response.json()["token"]
        assert response.json()["user"]["email"] == "ann@x.com"

        response = client.post("/auth/register", json=dict(BOB, email="ann@x.com"))
        assert response.status_code == 400
        assert response.json()["success"] is False

        response = client.post("/auth/register", json=BOB)
        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        assert "token" not in response.json()
        seller_id = response.json()["user"]["id"]

        response = _login(client, "bob@shop.com", "password1")
        assert response.status_code == 403

        response = client.put(f"/admin/sellers/{seller_id}/approve", headers=_bearer(_admin_token(client)))
        assert response.status_code == 200

        response = _login(client, "bob@shop.com", "password1")
        assert response.status_code == 200
        assert response.json()["token"]
        assert response.json()["user"]["status"] == "approved"

    def test_validation_errors_listed(self, client):
        """Every violated rule comes back in one 400."""
        response = client.post("/auth/register", json={"role": "seller", "email": "bad"})

        assert response.status_code == 400
        body = response.json()
        assert len(body["errors"]) >= 5
        assert "Shop name is required for sellers" in body["errors"]

    def test_wrong_json_type_is_validation_error(self, client):
        """Schema-level body errors use the same 400 shape as rule violations."""
        response = client.post("/auth/register", json=dict(ANN, phone=711234567012))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert len(body["errors"]) == 1
        assert body["errors"][0].startswith("phone: ")
        assert "detail" not in body

    def test_me_requires_bearer(self, client):
        """401 responses carry WWW-Authenticate."""
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json() == {"success": False, "message": "Not authorized to access this route"}

    def test_me_and_logout(self, client):
        """Token works for /auth/me until logout."""
        token = client.post("/auth/register", json=ANN).json()["token"]

        response = client.get("/auth/me", headers=_bearer(token))
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Ann Lee"

        assert client.post("/auth/logout", headers=_bearer(token)).status_code == 200
        assert client.get("/auth/me", headers=_bearer(token)).status_code == 401

    def test_logout_without_token(self, client):
        """Logout always succeeds."""
        assert client.post("/auth/logout").status_code == 200

    def test_admin_routes_need_admin(self, client):
        """Customers cannot reach admin routes."""
        token = client.post("/auth/register", json=ANN).json()["token"]

        response = client.get("/admin/sellers/pending", headers=_bearer(token))
        assert response.status_code == 403

    def test_pending_list_and_reject(self, client):
        """Admins see pending sellers and can reject with a reason."""
        seller_id = client.post("/auth/register", json=BOB).json()["user"]["id"]
        admin = _bearer(_admin_token(client))

        response = client.get("/admin/sellers/pending", headers=admin)
        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["id"] == seller_id

        response = client.put(f"/admin/sellers/{seller_id}/reject", json={}, headers=admin)
        assert response.status_code == 400

        response = client.put(
            f"/admin/sellers/{seller_id}/reject", json={"rejectionReason": "Blurry ID"}, headers=admin
        )
        assert response.status_code == 200
        assert response.json()["user"]["status"] == "rejected"

    def test_deactivation_blocks_existing_token(self, client):
        """Deactivating an account invalidates its live token."""
        registered = client.post("/auth/register", json=ANN).json()
        token, customer_id = registered["token"], registered["user"]["id"]

        response = client.put(f"/admin/customers/{customer_id}/deactivate", headers=_bearer(_admin_token(client)))
        assert response.status_code == 200

        assert client.get("/auth/me", headers=_bearer(token)).status_code == 401

    def test_customer_listing_is_scoped(self, client):
        """Customers only ever see themselves; limit is capped."""
        ann = client.post("/auth/register", json=ANN).json()
        client.post("/auth/register", json=dict(ANN, email="cat@x.com", name="Cat Cole"))

        response = client.get("/customers", params={"limit": 99999, "email": "cat"}, headers=_bearer(ann["token"]))
        assert response.status_code == 200
        body = response.json()
        assert body["limit"] == 100
        assert body["total"] == 0

        response = client.get("/customers", headers=_bearer(ann["token"]))
        assert [c["id"] for c in response.json()["items"]] == [ann["user"]["id"]]

        response = client.get("/customers", headers=_bearer(_admin_token(client)))
        assert response.json()["total"] == 2

    def test_customer_by_id_ownership(self, client):
        """Customers cannot read another customer's profile."""
        ann = client.post("/auth/register", json=ANN).json()
        cat = client.post("/auth/register", json=dict(ANN, email="cat@x.com")).json()

        assert client.get(f"/customers/{ann['user']['id']}", headers=_bearer(ann["token"])).status_code == 200
        assert client.get(f"/customers/{cat['user']['id']}", headers=_bearer(ann["token"])).status_code == 403

    def test_public_sellers_only_approved(self, client):
        """The public directory lists approved, active sellers."""
        _approved_seller(client)
        client.post("/auth/register", json=dict(BOB, email="eve@shop.com", shopName="Eve's"))

        response = client.get("/sellers/public/approved", params={"status": "pending"})
        assert response.status_code == 200
        assert [s["email"] for s in response.json()["items"]] == ["bob@shop.com"]

    def test_product_writes_need_approved_owner(self, client):
        """Approved sellers create products; other sellers cannot edit them."""
        pending_id = client.post("/auth/register", json=dict(BOB, email="eve@shop.com")).json()["user"]["id"]
        admin = _bearer(_admin_token(client))
        _, bob_token = _approved_seller(client)

        product = {"name": "Sourdough", "price": 4.5, "category": ["bread"]}
        response = client.post("/products", json=product, headers=_bearer(bob_token))
        assert response.status_code == 201
        product_id = response.json()["product"]["id"]

        # Eve gets approved, then revoked back to rejected: her old token no longer passes
        client.put(f"/admin/sellers/{pending_id}/approve", headers=admin)
        eve_token = _login(client, "eve@shop.com", "password1").json()["token"]
        response = client.put(f"/products/{product_id}", json={"price": 1}, headers=_bearer(eve_token))
        assert response.status_code == 403

        client.put(f"/admin/sellers/{pending_id}/reject", json={"rejection_reason": "Fraud"}, headers=admin)
        response = client.post("/products", json=product, headers=_bearer(eve_token))
        assert response.status_code == 403

        response = client.put(f"/products/{product_id}", json={"price": 5}, headers=_bearer(bob_token))
        assert response.status_code == 200
        assert response.json()["product"]["price"] == 5

    def test_products_public_listing(self, client):
        """Anyone can list products; filters and search apply."""
        _, bob_token = _approved_seller(client)
        for name, price in (("Sourdough", 4.5), ("Baguette", 2.0), ("Rye", 3.0)):
            client.post("/products", json={"name": name, "price": price}, headers=_bearer(bob_token))

        response = client.get("/products", params={"price_min": 2.5, "sort": "price", "sortOrder": "asc"})
        assert response.status_code == 200
        assert [p["name"] for p in response.json()["items"]] == ["Rye", "Sourdough"]

        response = client.get("/products", params={"search": "GUET"})
        assert response.json()["total"] == 1

    def test_payments_need_customer_or_admin(self, client):
        """Sellers cannot list payments."""
        _, bob_token = _approved_seller(client)

        assert client.get("/payments", headers=_bearer(bob_token)).status_code == 403
