"""
Tests for the reference API server.

These tests verify the HTTP contract the storefront gateway relies on.
"""

from fastapi.testclient import TestClient

from api.repository import ServerRepository


def place_order(api_client: TestClient, user_id: str, total: float = 45.0) -> dict:
    product = api_client.get("/api/products/1").json()
    response = api_client.post("/api/orders", json={
        "userId": user_id,
        "items": [{**product, "quantity": 1}],
        "total": total,
        "shippingAddress": "1 Main St",
    })
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    """Tests for /api/health."""

    def test_connected(self, api_client: TestClient):
        body = api_client.get("/api/health").json()

        assert body["status"] == "active"
        assert body["database"] == "connected"
        assert "timestamp" in body

    def test_disconnected_database(self, api_client: TestClient, server_repository: ServerRepository):
        """Test that the service stays up and data routes answer 503."""
        server_repository.online = False

        health = api_client.get("/api/health")
        products = api_client.get("/api/products")

        assert health.status_code == 200
        assert health.json()["database"] == "disconnected"
        assert products.status_code == 503
        assert products.json() == {"error": "Database unavailable"}


class TestProductEndpoints:
    """Tests for /api/products."""

    def test_list_products(self, api_client: TestClient):
        body = api_client.get("/api/products").json()

        assert len(body) == 5
        assert "reviewsCount" in body[0]

    def test_filters(self, api_client: TestClient):
        assert [p["id"] for p in api_client.get("/api/products", params={"category": "Electronics"}).json()] == ["2", "4"]
        assert [p["id"] for p in api_client.get("/api/products", params={"search": "YOGA"}).json()] == ["3"]
        assert len(api_client.get("/api/products", params={"category": "All"}).json()) == 5

    def test_limit_is_capped(self, api_client: TestClient, server_repository: ServerRepository):
        server_repository.reseed(250)

        assert len(api_client.get("/api/products").json()) == 100
        assert api_client.get("/api/products", params={"limit": 500}).status_code == 422

    def test_get_product(self, api_client: TestClient):
        assert api_client.get("/api/products/4").json()["name"] == "Premium Headphones 104"
        assert api_client.get("/api/products/nope").status_code == 404

    def test_seed(self, api_client: TestClient):
        response = api_client.post("/api/products/seed", params={"count": 20})

        assert response.json() == {"count": 20}
        assert len(api_client.get("/api/products").json()) == 20


class TestAuthEndpoints:
    """Tests for /api/auth/*."""

    def test_demo_login_registers(self, api_client: TestClient):
        first = api_client.post("/api/auth/login", json={"email": "jamie@example.com"}).json()
        second = api_client.post("/api/auth/login", json={"email": "jamie@example.com"}).json()

        assert first["id"] == second["id"]
        assert first["name"] == "jamie"
        assert first["role"] == "user"
        assert first["token"].count(".") == 2

    def test_admin_role(self, api_client: TestClient):
        body = api_client.post("/api/auth/login", json={"email": "admin@novamart.example"}).json()

        assert body["role"] == "admin"

    def test_register_and_password_login(self, api_client: TestClient):
        created = api_client.post("/api/auth/register", json={
            "name": "Jamie", "email": "jamie@example.com", "password": "s3cret",
        })
        assert created.status_code == 200
        assert "passwordHash" not in created.json()

        ok = api_client.post("/api/auth/login", json={"email": "jamie@example.com", "password": "s3cret"})
        bad = api_client.post("/api/auth/login", json={"email": "jamie@example.com", "password": "nope"})

        assert ok.json()["id"] == created.json()["id"]
        assert bad.status_code == 404

    def test_register_conflict(self, api_client: TestClient):
        body = {"name": "Jamie", "email": "jamie@example.com", "password": "pw"}
        api_client.post("/api/auth/register", json=body)

        assert api_client.post("/api/auth/register", json=body).status_code == 409

    def test_google_login(self, api_client: TestClient):
        body = api_client.post("/api/auth/google", json={"email": "g@example.com", "name": "Gee"}).json()

        assert body["name"] == "Gee"

    def test_invalid_body(self, api_client: TestClient):
        assert api_client.post("/api/auth/login", json={}).status_code == 422


class TestOrderEndpoints:
    """Tests for /api/orders."""

    def test_create_order(self, api_client: TestClient):
        order = place_order(api_client, "u-1", total=44.999)

        assert order["id"].startswith("ORD-")
        assert order["status"] == "Processing"
        assert order["total"] == 45.0
        assert order["items"][0]["quantity"] == 1
        assert "date" in order

    def test_user_orders_most_recent_first(self, api_client: TestClient):
        first = place_order(api_client, "u-1")
        second = place_order(api_client, "u-1")
        place_order(api_client, "u-2")

        ids = [o["id"] for o in api_client.get("/api/orders/user/u-1").json()]

        assert ids == [second["id"], first["id"]]
        assert len(api_client.get("/api/orders").json()) == 3

    def test_update_status(self, api_client: TestClient):
        order = place_order(api_client, "u-1")

        response = api_client.patch(f"/api/orders/{order['id']}/status", json={"status": "Out for Delivery"})

        assert response.json() == {"success": True}
        assert api_client.get("/api/orders/user/u-1").json()[0]["status"] == "Out for Delivery"

    def test_update_unknown_order(self, api_client: TestClient):
        response = api_client.patch("/api/orders/ORD-NONE/status", json={"status": "Shipped"})

        assert response.json() == {"success": False}

    def test_invalid_status(self, api_client: TestClient):
        order = place_order(api_client, "u-1")

        response = api_client.patch(f"/api/orders/{order['id']}/status", json={"status": "Lost"})

        assert response.status_code == 422

    def test_order_requires_total(self, api_client: TestClient):
        response = api_client.post("/api/orders", json={"userId": "u-1", "items": []})

        assert response.status_code == 422
