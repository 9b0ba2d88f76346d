"""
Local stand-in for the remote catalog/order/auth service.

When the remote service cannot be reached, the gateway delegates every call
here. The mock implements the same filtering, auth and order semantics as the
server, over a locally seeded catalog, and writes through the persistence
adapter after every mutation so state survives a restart.

Design decisions:
- A single aggregate record ("novamart_db") holds products, users, orders
  and reviews
- Only the first 100 products are cached; the cache is deliberately lossy
- An empty product list on load triggers a fresh seed
- Search results are capped at 50 to simulate paging
- Optional latency makes the mock feel like a network call in demos
"""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from storefront import accounts
from storefront.catalog import DEFAULT_CATALOG_SIZE, generate_products, seed_reviews
from storefront.errors import ConflictError, NotFoundError
from storefront.models import (
    AccountRecord,
    CartItem,
    Order,
    OrderStatus,
    Product,
    Review,
    User,
)
from storefront.persistence import MOCK_DB_KEY, PersistenceAdapter

logger = logging.getLogger("mock_db")

MOCK_PAGE_SIZE = 50
CATALOG_CACHE_LIMIT = 100


class MockDatabase:
    """
    In-memory database mirroring the remote API, persisted as one blob.

    Example:
        db = MockDatabase(PersistenceAdapter())
        products = await db.get_products("lamp", "Home")
        user = await db.login("shopper@example.com")
    """

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        catalog: Optional[list[Product]] = None,
        latency: float = 0.0,
    ):
        """
        Args:
            persistence: Where the aggregate record is kept
            catalog: Products to seed with when nothing is stored
                     (a freshly generated catalog when omitted)
            latency: Seconds each call sleeps to simulate the network
        """
        self.persistence = persistence or PersistenceAdapter()
        self.latency = latency

        self.products: list[Product] = []
        self.users: list[AccountRecord] = []
        self.orders: list[Order] = []
        self.reviews: list[Review] = []

        self._load()
        if not self.products:
            self.products = list(catalog) if catalog is not None else generate_products()
            self.reviews = seed_reviews()
            logger.info(f"Seeded local catalog with {len(self.products)} products")
            self._save()

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load(self) -> None:
        data = self.persistence.load(MOCK_DB_KEY)
        if not isinstance(data, dict):
            return
        try:
            self.products = [Product(**p) for p in data.get("products", [])]
            self.users = [AccountRecord(**u) for u in data.get("users", [])]
            self.orders = [Order(**o) for o in data.get("orders", [])]
            self.reviews = [Review(**r) for r in data.get("reviews", [])]
        except (ValidationError, TypeError, AttributeError) as e:
            logger.warning(f"Stored mock database is corrupt, starting fresh: {e}")
            self.products, self.users, self.orders, self.reviews = [], [], [], []

    def _save(self) -> None:
        self.persistence.save(MOCK_DB_KEY, {
            "products": [p.to_wire() for p in self.products[:CATALOG_CACHE_LIMIT]],
            "users": [u.to_wire() for u in self.users],
            "orders": [o.to_wire() for o in self.orders],
            "reviews": [r.to_wire() for r in self.reviews],
        })

    async def _delay(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    # =========================================================================
    # Catalog
    # =========================================================================

    async def get_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[Product]:
        """
        Filter the local catalog.

        Category is an exact match unless absent or "All"; query is a
        case-insensitive substring match on name or tags.
        """
        await self._delay()
        results = self.products
        if category and category != "All":
            results = [p for p in results if p.category == category]
        if query:
            results = [p for p in results if p.matches(query)]
        return [p.model_copy(deep=True) for p in results[:MOCK_PAGE_SIZE]]

    async def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product.model_copy(deep=True)
        return None

    async def reseed(self, count: int = DEFAULT_CATALOG_SIZE) -> int:
        """Wipe and regenerate the catalog. Returns the new product count."""
        await self._delay()
        self.products = generate_products(count)
        self._save()
        logger.info(f"Catalog reseeded with {count} products")
        return count

    # =========================================================================
    # Accounts
    # =========================================================================

    def _find_user(self, email: str) -> Optional[AccountRecord]:
        return next((u for u in self.users if u.email == email), None)

    async def login(self, email: str, password: Optional[str] = None) -> User:
        """
        Sign in.

        Without a password this is the demo login: an unknown email is
        registered on the spot. With a password the account must exist and
        the password must match its stored hash.

        Raises:
            NotFoundError: Password given but no matching account
        """
        await self._delay()
        record = self._find_user(email)
        if password is not None:
            if record is None or not accounts.verify_password(password, record.password_hash):
                raise NotFoundError(f"No account matches {email}")
        elif record is None:
            record = AccountRecord(
                id=accounts.new_user_id(),
                email=email,
                name=accounts.name_from_email(email),
                role=accounts.role_for_email(email),
            )
            self.users.append(record)
            self._save()
            logger.info(f"Created local account {record.id} for {email}")
        return record.to_user(token=accounts.issue_token(record.id))

    async def signup(self, name: str, email: str, password: str) -> User:
        """
        Register a new account.

        Raises:
            ConflictError: The email is already registered
        """
        await self._delay()
        if self._find_user(email) is not None:
            raise ConflictError(f"An account already exists for {email}")
        record = AccountRecord(
            id=accounts.new_user_id(),
            email=email,
            name=name,
            role=accounts.role_for_email(email),
            password_hash=accounts.hash_password(password),
        )
        self.users.append(record)
        self._save()
        return record.to_user(token=accounts.issue_token(record.id))

    async def google_login(self, email: str, name: str) -> User:
        """Upsert an account tagged with the google provider."""
        await self._delay()
        record = self._find_user(email)
        if record is None:
            record = AccountRecord(
                id=accounts.new_user_id(),
                email=email,
                name=name,
                role=accounts.role_for_email(email),
                provider="google",
            )
            self.users.append(record)
        else:
            record.provider = "google"
        self._save()
        return record.to_user(token=accounts.issue_token(record.id))

    # =========================================================================
    # Orders
    # =========================================================================

    async def place_order(
        self,
        user_id: str,
        items: list[CartItem],
        total: float,
        address: Optional[str],
    ) -> Order:
        await self._delay()
        order = Order(
            id=accounts.new_order_id(),
            user_id=user_id,
            items=[item.model_copy(deep=True) for item in items],
            total=round(total, 2),
            status=OrderStatus.PROCESSING,
            shipping_address=address,
        )
        self.orders.insert(0, order)
        self._save()
        logger.info(f"Local order {order.id} placed for {user_id}: ${order.total:.2f}")
        return order.model_copy(deep=True)

    async def get_orders(self, user_id: Optional[str] = None) -> list[Order]:
        """Orders, most recent first; every user's when user_id is omitted."""
        await self._delay()
        orders = self.orders if user_id is None else [o for o in self.orders if o.user_id == user_id]
        return [o.model_copy(deep=True) for o in orders]

    async def update_order_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        """Set the status of an order. Returns None if the order is unknown."""
        await self._delay()
        for order in self.orders:
            if order.id == order_id:
                order.status = OrderStatus(status).value
                self._save()
                return order.model_copy(deep=True)
        logger.warning(f"Status update for unknown order {order_id}")
        return None
