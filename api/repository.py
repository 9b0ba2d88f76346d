"""
In-memory backing store for the reference server.

Holds the catalog, accounts and orders the HTTP API serves. The `online`
flag simulates the database connection: when it is False every data call
raises DatabaseOffline and the API answers 503, while the process itself
keeps running and /api/health reports the outage.
"""

import logging
from typing import Optional

from storefront import accounts
from storefront.catalog import DEFAULT_CATALOG_SIZE, generate_products
from storefront.errors import ConflictError, NotFoundError, StorefrontError
from storefront.models import AccountRecord, CartItem, Order, OrderStatus, Product, User

logger = logging.getLogger("api.repository")

PRODUCT_LIMIT = 100


class DatabaseOffline(StorefrontError):
    """The backing database is not connected."""


class ServerRepository:
    """Catalog, account and order storage for the API."""

    def __init__(self, catalog: Optional[list[Product]] = None, online: bool = True):
        self.products: list[Product] = list(catalog) if catalog is not None else generate_products()
        self.users: dict[str, AccountRecord] = {}
        self.orders: list[Order] = []
        self.online = online

    def _require_online(self) -> None:
        if not self.online:
            raise DatabaseOffline("database is disconnected")

    # =========================================================================
    # Catalog
    # =========================================================================

    def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = PRODUCT_LIMIT,
    ) -> list[Product]:
        self._require_online()
        results = self.products
        if category and category != "All":
            results = [p for p in results if p.category == category]
        if search:
            results = [p for p in results if p.matches(search)]
        return results[:min(limit, PRODUCT_LIMIT)]

    def get_product(self, product_id: str) -> Optional[Product]:
        self._require_online()
        return next((p for p in self.products if p.id == product_id), None)

    def reseed(self, count: int = DEFAULT_CATALOG_SIZE) -> int:
        self._require_online()
        self.products = generate_products(count)
        logger.info(f"Catalog reseeded with {count} products")
        return count

    # =========================================================================
    # Accounts
    # =========================================================================

    def login(self, email: str, password: Optional[str] = None) -> User:
        """
        Passwordless login registers unknown emails; a password login needs
        an existing account with a matching hash.
        """
        self._require_online()
        record = self.users.get(email)
        if password is not None:
            if record is None or not accounts.verify_password(password, record.password_hash):
                raise NotFoundError("Invalid email or password")
        elif record is None:
            record = AccountRecord(
                id=accounts.new_user_id(),
                email=email,
                name=accounts.name_from_email(email),
                role=accounts.role_for_email(email),
            )
            self.users[email] = record
            logger.info(f"Registered {record.id} on first login")
        return record.to_user(token=accounts.issue_token(record.id))

    def register(self, name: str, email: str, password: str) -> User:
        self._require_online()
        if email in self.users:
            raise ConflictError(f"Email already registered: {email}")
        record = AccountRecord(
            id=accounts.new_user_id(),
            email=email,
            name=name,
            role=accounts.role_for_email(email),
            password_hash=accounts.hash_password(password),
        )
        self.users[email] = record
        logger.info(f"Registered {record.id}")
        return record.to_user(token=accounts.issue_token(record.id))

    def google_login(self, email: str, name: str) -> User:
        self._require_online()
        record = self.users.get(email)
        if record is None:
            record = AccountRecord(
                id=accounts.new_user_id(),
                email=email,
                name=name,
                role=accounts.role_for_email(email),
                provider="google",
            )
            self.users[email] = record
        return record.to_user(token=accounts.issue_token(record.id))

    # =========================================================================
    # Orders
    # =========================================================================

    def create_order(
        self,
        user_id: str,
        items: list[CartItem],
        total: float,
        shipping_address: Optional[str],
    ) -> Order:
        self._require_online()
        order = Order(
            id=accounts.new_order_id(),
            user_id=user_id,
            items=items,
            total=round(total, 2),
            shipping_address=shipping_address,
        )
        self.orders.append(order)
        logger.info(f"Order {order.id} created for {user_id}: ${order.total:.2f}")
        return order

    def orders_for_user(self, user_id: str) -> list[Order]:
        """Most recent first."""
        self._require_online()
        mine = [o for o in self.orders if o.user_id == user_id]
        return sorted(reversed(mine), key=lambda o: o.date, reverse=True)

    def all_orders(self) -> list[Order]:
        self._require_online()
        return sorted(reversed(self.orders), key=lambda o: o.date, reverse=True)

    def update_status(self, order_id: str, status: OrderStatus) -> bool:
        self._require_online()
        for order in self.orders:
            if order.id == order_id:
                order.status = OrderStatus(status).value
                logger.info(f"Order {order_id} -> {order.status}")
                return True
        logger.warning(f"Status update for unknown order {order_id}")
        return False
