"""
Tests for the local mock database.

These tests verify that the fallback path mirrors the server's filtering,
auth and order semantics and survives a restart through persistence.
"""

import random

import pytest

from storefront.catalog import generate_products
from storefront.errors import ConflictError, NotFoundError
from storefront.mock_db import CATALOG_CACHE_LIMIT, MOCK_PAGE_SIZE, MockDatabase
from storefront.models import CartItem, Product
from storefront.persistence import MOCK_DB_KEY, MemoryBackend, PersistenceAdapter


class TestMockCatalog:
    """Tests for catalog queries."""

    async def test_category_filter(self, mock_db: MockDatabase):
        products = await mock_db.get_products(category="Electronics")

        assert {p.id for p in products} == {"2", "4"}

    async def test_all_category_is_unfiltered(self, mock_db: MockDatabase):
        assert len(await mock_db.get_products(category="All")) == 5

    async def test_query_matches_name_or_tag(self, mock_db: MockDatabase):
        assert [p.id for p in await mock_db.get_products("LAMP")] == ["1"]
        assert [p.id for p in await mock_db.get_products("novel", "Books")] == ["5"]
        assert await mock_db.get_products("lamp", "Books") == []

    async def test_results_are_paged(self, persistence: PersistenceAdapter):
        db = MockDatabase(persistence, catalog=generate_products(120, random.Random(2)))

        assert len(await db.get_products()) == MOCK_PAGE_SIZE

    async def test_results_are_copies(self, mock_db: MockDatabase):
        (lamp,) = await mock_db.get_products("lamp")
        lamp.price = 0.01

        (again,) = await mock_db.get_products("lamp")
        assert again.price == 45.0

    async def test_get_product(self, mock_db: MockDatabase):
        assert (await mock_db.get_product("3")).name == "Eco Yoga Mat 103"
        assert await mock_db.get_product("missing") is None

    async def test_reseed(self, mock_db: MockDatabase):
        assert await mock_db.reseed(30) == 30
        assert await mock_db.get_product("30") is not None


class TestMockPersistence:
    """Tests for the aggregate record."""

    def test_seeds_when_empty(self):
        db = MockDatabase(PersistenceAdapter(MemoryBackend()))

        assert len(db.products) == 1000
        assert len(db.reviews) == 4

    def test_cache_is_capped(self, persistence: PersistenceAdapter):
        MockDatabase(persistence, catalog=generate_products(150, random.Random(4)))

        stored = persistence.load(MOCK_DB_KEY)
        assert len(stored["products"]) == CATALOG_CACHE_LIMIT

    async def test_state_survives_restart(self, persistence: PersistenceAdapter, products: list[Product]):
        db = MockDatabase(persistence, catalog=products)
        user = await db.login("shopper@example.com")
        await db.place_order(user.id, [CartItem.from_product(products[0])], 45.0, "1 Main St")

        reopened = MockDatabase(persistence)

        assert len(reopened.products) == 5
        assert len(await reopened.get_orders(user.id)) == 1

    def test_corrupt_record_reseeds(self, backend: MemoryBackend, persistence: PersistenceAdapter, products):
        persistence.save(MOCK_DB_KEY, {"products": [{"id": 1}]})

        db = MockDatabase(persistence, catalog=products)

        assert [p.id for p in db.products] == ["1", "2", "3", "4", "5"]


class TestMockAuth:
    """Tests for login, signup and google login."""

    async def test_passwordless_login_registers(self, mock_db: MockDatabase):
        user = await mock_db.login("jamie@example.com")

        assert user.id.startswith("u-") and len(user.id) == 11
        assert user.name == "jamie"
        assert user.role == "user"
        assert user.token

    async def test_login_is_idempotent(self, mock_db: MockDatabase):
        first = await mock_db.login("jamie@example.com")
        second = await mock_db.login("jamie@example.com")

        assert first.id == second.id
        assert len(mock_db.users) == 1

    async def test_admin_email_gets_admin_role(self, mock_db: MockDatabase):
        assert (await mock_db.login("site-admin@example.com")).is_admin

    async def test_password_login(self, mock_db: MockDatabase):
        created = await mock_db.signup("Jamie", "jamie@example.com", "s3cret")

        assert (await mock_db.login("jamie@example.com", "s3cret")).id == created.id
        with pytest.raises(NotFoundError):
            await mock_db.login("jamie@example.com", "wrong")
        with pytest.raises(NotFoundError):
            await mock_db.login("nobody@example.com", "s3cret")

    async def test_password_is_not_stored(self, mock_db: MockDatabase):
        await mock_db.signup("Jamie", "jamie@example.com", "s3cret")

        assert "s3cret" not in str(mock_db.persistence.load(MOCK_DB_KEY))

    async def test_signup_conflict(self, mock_db: MockDatabase):
        await mock_db.signup("Jamie", "jamie@example.com", "pw")

        with pytest.raises(ConflictError):
            await mock_db.signup("Other", "jamie@example.com", "pw")

    async def test_google_login_upserts(self, mock_db: MockDatabase):
        first = await mock_db.google_login("g@example.com", "Gee")
        second = await mock_db.google_login("g@example.com", "Gee")

        assert first.id == second.id
        assert mock_db.users[0].provider == "google"


class TestMockOrders:
    """Tests for order placement and status updates."""

    async def test_place_order(self, mock_db: MockDatabase, lamp: Product):
        order = await mock_db.place_order("u-1", [CartItem.from_product(lamp, 2)], 90.004, None)

        assert order.id.startswith("ORD-")
        assert order.id[4:] == order.id[4:].upper()
        assert order.total == 90.0
        assert order.status == "Processing"

    async def test_orders_most_recent_first(self, mock_db: MockDatabase, lamp: Product):
        items = [CartItem.from_product(lamp)]
        first = await mock_db.place_order("u-1", items, 45, None)
        second = await mock_db.place_order("u-1", items, 45, None)
        await mock_db.place_order("u-2", items, 45, None)

        assert [o.id for o in await mock_db.get_orders("u-1")] == [second.id, first.id]
        assert len(await mock_db.get_orders()) == 3

    async def test_update_status(self, mock_db: MockDatabase, lamp: Product):
        order = await mock_db.place_order("u-1", [CartItem.from_product(lamp)], 45, None)

        updated = await mock_db.update_order_status(order.id, "Out for Delivery")

        assert updated.status == "Out for Delivery"
        assert await mock_db.update_order_status("ORD-MISSING", "Shipped") is None
