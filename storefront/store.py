"""
The storefront's application state container.

The Store is the single authoritative holder of session state: catalog,
cart, wishlist, compare tray, orders, reviews, notifications, recently
viewed products, the active coupon and the locale. Every public operation
(a) validates its input minimally, (b) mutates the relevant slices,
(c) persists the durable ones, (d) may call the remote data gateway and
(e) appends a notification describing the outcome.

Design decisions:
- An explicit, constructible object; collaborators are injected
- Every slice change is published on a ChangeBus so a presentation layer
  can re-render what changed
- Durable slices (cart, wishlist, recently viewed, locale, user) are written
  through the persistence adapter on every change; a failed write never
  blocks the in-memory update
- Network work happens first, the synchronous state update afterwards
- No operation lets an exception escape: failures become notifications or
  silent no-ops

Lifecycle: UNINITIALIZED -> LOADING -> READY, entered once per session.
"""

import logging
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from storefront import accounts, pricing
from storefront.catalog import seed_reviews
from storefront.change_bus import ChangeBus, ChangeHandler, StateChange
from storefront.errors import ConflictError, NotFoundError, StorefrontError
from storefront.gateway import RemoteDataGateway
from storefront.models import (
    CartItem,
    Coupon,
    Locale,
    Notification,
    Order,
    OrderStatus,
    Product,
    Review,
    User,
)
from storefront.notifications import NotificationQueue
from storefront.persistence import (
    CART_KEY,
    LOCALE_KEY,
    USER_KEY,
    VIEWED_KEY,
    WISHLIST_KEY,
    PersistenceAdapter,
)

logger = logging.getLogger("store")

COMPARE_LIMIT = 2
RECENTLY_VIEWED_LIMIT = 8


class StoreLifecycle(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class StoreSnapshot(BaseModel):
    """The durable subset of store state."""
    cart: list[CartItem] = Field(default_factory=list)
    wishlist: list[str] = Field(default_factory=list)
    recently_viewed: list[str] = Field(default_factory=list)
    locale: Locale = Locale.EN
    user: Optional[User] = None


class Store:
    """
    Session state plus the operations that change it.

    Example:
        store = Store(gateway, persistence=PersistenceAdapter(JsonFileBackend(path)))
        await store.initialize()
        store.add_to_cart(store.products[0])
        await store.login("shopper@example.com")
        order = await store.place_order("221B Baker Street")
    """

    def __init__(
        self,
        gateway: RemoteDataGateway,
        persistence: Optional[PersistenceAdapter] = None,
        notifications: Optional[NotificationQueue] = None,
        bus: Optional[ChangeBus] = None,
    ):
        """
        Args:
            gateway: Remote data gateway (with its local fallback)
            persistence: Durable storage for the session slices
            notifications: Notification queue (5 s expiry when omitted)
            bus: Change bus slice updates are published on
        """
        self.gateway = gateway
        self.persistence = persistence or PersistenceAdapter()
        self.bus = bus or ChangeBus()
        self.notification_queue = notifications or NotificationQueue()
        if self.notification_queue.on_change is None:
            self.notification_queue.on_change = self._notifications_changed

        self.lifecycle = StoreLifecycle.UNINITIALIZED
        self.products: list[Product] = []
        self.is_loading = False
        self.cart: list[CartItem] = []
        self.wishlist: list[str] = []
        self.compare_list: list[str] = []
        self.user: Optional[User] = None
        self.orders: list[Order] = []
        self.reviews: list[Review] = []
        self.recently_viewed: list[str] = []
        self.active_coupon: Optional[Coupon] = None
        self.locale: Locale = Locale.EN

    # =========================================================================
    # Change plumbing
    # =========================================================================

    def subscribe(self, slice_name: str, handler: ChangeHandler) -> None:
        self.bus.subscribe(slice_name, handler)

    def subscribe_all(self, handler: ChangeHandler) -> None:
        self.bus.subscribe_all(handler)

    def _commit(self, slice_name: str, operation: str) -> None:
        """Persist the slice if it is durable, then publish the change."""
        value = self._slice_value(slice_name)
        if slice_name == "cart":
            self.persistence.save(CART_KEY, [item.to_wire() for item in self.cart])
        elif slice_name == "wishlist":
            self.persistence.save(WISHLIST_KEY, self.wishlist)
        elif slice_name == "recently_viewed":
            self.persistence.save(VIEWED_KEY, self.recently_viewed)
        elif slice_name == "locale":
            self.persistence.save(LOCALE_KEY, Locale(self.locale).value)
        elif slice_name == "user":
            if self.user is None:
                self.persistence.remove(USER_KEY)
            else:
                self.persistence.save(USER_KEY, self.user.to_wire())
        self.bus.publish(StateChange(slice=slice_name, value=value, operation=operation))

    def _slice_value(self, slice_name: str) -> Any:
        value = getattr(self, slice_name)
        return list(value) if isinstance(value, list) else value

    def _notifications_changed(self, live: list[Notification]) -> None:
        self.bus.publish(StateChange(slice="notifications", value=live, operation="notifications"))

    def _set_loading(self, loading: bool, operation: str) -> None:
        self.is_loading = loading
        self.bus.publish(StateChange(slice="is_loading", value=loading, operation=operation))

    # =========================================================================
    # Initialization
    # =========================================================================

    async def initialize(self) -> None:
        """
        Load the catalog and restore the previous session.

        Runs once; later calls are no-ops. Fetch failures leave a degraded
        but usable state (e.g. an empty catalog) instead of raising.
        """
        if self.lifecycle != StoreLifecycle.UNINITIALIZED:
            logger.warning("Store already initialized")
            return

        self.lifecycle = StoreLifecycle.LOADING
        self._set_loading(True, "initialize")
        try:
            try:
                self.products = await self.gateway.list_products()
            except Exception as e:
                logger.error(f"Catalog fetch failed during startup: {e}")
                self.products = []
            self.reviews = seed_reviews()

            self._restore_durable_slices()

            if self.user is not None:
                try:
                    self.orders = await self.gateway.list_user_orders(self.user.id)
                except Exception as e:
                    logger.error(f"Order fetch for {self.user.id} failed during startup: {e}")
                    self.orders = []
        finally:
            self.lifecycle = StoreLifecycle.READY
            self._set_loading(False, "initialize")

        for slice_name in ("products", "reviews", "user", "orders", "cart",
                           "wishlist", "recently_viewed", "locale"):
            self.bus.publish(StateChange(
                slice=slice_name, value=self._slice_value(slice_name), operation="initialize",
            ))
        logger.info(
            f"Store ready: {len(self.products)} products, {len(self.cart)} cart lines, "
            f"user={'none' if self.user is None else self.user.id}, backend={self.gateway.mode}"
        )

    def _restore_durable_slices(self) -> None:
        """Each slice restores independently; a bad one is treated as empty."""
        raw_user = self.persistence.load(USER_KEY)
        if raw_user is not None:
            try:
                self.user = User(**raw_user)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Discarding stored user: {e}")

        try:
            self.cart = [CartItem(**item) for item in self.persistence.load(CART_KEY, [])]
        except (ValidationError, TypeError) as e:
            logger.warning(f"Discarding stored cart: {e}")
            self.cart = []

        wishlist = self.persistence.load(WISHLIST_KEY, [])
        self.wishlist = [str(pid) for pid in wishlist] if isinstance(wishlist, list) else []

        viewed = self.persistence.load(VIEWED_KEY, [])
        if isinstance(viewed, list):
            self.recently_viewed = [str(pid) for pid in viewed][:RECENTLY_VIEWED_LIMIT]

        raw_locale = self.persistence.load(LOCALE_KEY)
        if raw_locale is not None:
            try:
                self.locale = Locale(raw_locale)
            except ValueError:
                logger.warning(f"Ignoring unknown stored locale {raw_locale!r}")

    # =========================================================================
    # Notifications
    # =========================================================================

    @property
    def notifications(self) -> list[Notification]:
        return self.notification_queue.items

    def add_notification(self, level: str, message: str) -> Notification:
        """Show a message that removes itself after the queue's TTL."""
        return self.notification_queue.add(level, message)

    # =========================================================================
    # Catalog
    # =========================================================================

    async def refresh_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
    ) -> None:
        """Re-query the catalog. Other slices are left alone."""
        self._set_loading(True, "refresh_products")
        try:
            self.products = await self.gateway.list_products(query, category)
            self._commit("products", "refresh_products")
        except Exception as e:
            logger.error(f"Catalog refresh failed: {e}")
        finally:
            self._set_loading(False, "refresh_products")

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def _product_name(self, product_id: str) -> str:
        product = self.get_product(product_id)
        return product.name if product else "Item"

    def set_locale(self, locale: str) -> bool:
        try:
            self.locale = Locale(locale)
        except ValueError:
            logger.warning(f"Unsupported locale {locale!r}")
            return False
        self._commit("locale", "set_locale")
        return True

    # =========================================================================
    # Cart
    # =========================================================================

    def _cart_item(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.cart if item.id == product_id), None)

    def add_to_cart(self, product: Product) -> None:
        """Add one unit. A product already in the cart gets its quantity bumped."""
        existing = self._cart_item(product.id)
        if existing is not None:
            existing.quantity += 1
            self.add_notification("info", f"Updated {product.name} quantity.")
        else:
            self.cart.append(CartItem.from_product(product))
            self.add_notification("success", f"{product.name} added to cart!")
        self._commit("cart", "add_to_cart")

    def remove_from_cart(self, product_id: str) -> None:
        self.cart = [item for item in self.cart if item.id != product_id]
        self._commit("cart", "remove_from_cart")

    def update_cart_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity, never below 1."""
        item = self._cart_item(product_id)
        if item is not None:
            item.quantity = max(1, int(quantity))
        self._commit("cart", "update_cart_quantity")

    def clear_cart(self) -> None:
        self.cart = []
        self._commit("cart", "clear_cart")

    def _remove_ordered(self, ordered: list[CartItem]) -> None:
        """Take the ordered quantities out of the cart, keeping later additions."""
        ordered_qty = {item.id: item.quantity for item in ordered}
        remaining = []
        for item in self.cart:
            left = item.quantity - ordered_qty.get(item.id, 0)
            if left > 0:
                item.quantity = left
                remaining.append(item)
        self.cart = remaining
        self._commit("cart", "place_order")

    @property
    def cart_count(self) -> int:
        return sum(item.quantity for item in self.cart)

    @property
    def cart_subtotal(self) -> float:
        return pricing.cart_subtotal(self.cart)

    @property
    def cart_total(self) -> float:
        """Subtotal less the active coupon; shipping is not included."""
        return pricing.merchandise_total(self.cart, self.active_coupon)

    # =========================================================================
    # Wishlist, compare tray, recently viewed
    # =========================================================================

    def toggle_wishlist(self, product_id: str) -> bool:
        """Returns True if the product is now on the wishlist."""
        if product_id in self.wishlist:
            self.wishlist = [pid for pid in self.wishlist if pid != product_id]
            self.add_notification("info", "Removed from wishlist.")
            added = False
        else:
            self.wishlist.append(product_id)
            self.add_notification("success", f"{self._product_name(product_id)} saved to wishlist!")
            added = True
        self._commit("wishlist", "toggle_wishlist")
        return added

    def wishlist_products(self) -> list[Product]:
        return [p for pid in self.wishlist if (p := self.get_product(pid)) is not None]

    def toggle_compare(self, product_id: str) -> bool:
        """
        Add or remove a product from the two-slot compare tray.

        A third product is refused (error notification, tray unchanged);
        nothing is evicted. Returns True if the tray changed.
        """
        if product_id in self.compare_list:
            self.compare_list = [pid for pid in self.compare_list if pid != product_id]
        elif len(self.compare_list) >= COMPARE_LIMIT:
            self.add_notification("error", f"You can only compare {COMPARE_LIMIT} products at a time.")
            return False
        else:
            self.compare_list.append(product_id)
            self.add_notification("info", "Product added to comparison tray.")
        self._commit("compare_list", "toggle_compare")
        return True

    def compare_products(self) -> list[Product]:
        return [p for pid in self.compare_list if (p := self.get_product(pid)) is not None]

    def track_view(self, product_id: str) -> None:
        """Move the product to the front of the recently viewed list."""
        viewed = [product_id] + [pid for pid in self.recently_viewed if pid != product_id]
        self.recently_viewed = viewed[:RECENTLY_VIEWED_LIMIT]
        self._commit("recently_viewed", "track_view")

    def recommended_products(self) -> list[Product]:
        """Recently viewed products in recency order ("picked for you")."""
        return [p for pid in self.recently_viewed if (p := self.get_product(pid)) is not None]

    def watch_price(self, product_id: str) -> None:
        self.add_notification(
            "info",
            f"Price alert set for {self._product_name(product_id)}! "
            "We'll notify you if the price drops.",
        )

    # =========================================================================
    # Coupons
    # =========================================================================

    def apply_coupon(self, code: str) -> bool:
        """
        Activate a coupon by code (case-insensitive).

        On a miss the current coupon, if any, stays active.
        """
        coupon = pricing.find_coupon(code)
        if coupon is None:
            self.add_notification("error", "Invalid coupon code.")
            return False
        self.active_coupon = coupon
        self._commit("active_coupon", "apply_coupon")
        self.add_notification("success", f"Coupon {coupon.code} applied!")
        return True

    # =========================================================================
    # Orders
    # =========================================================================

    async def place_order(self, address: Optional[str]) -> Optional[Order]:
        """
        Check out the cart.

        Requires a signed-in user (otherwise a silent no-op). The gateway
        receives the discounted merchandise total; shipping is the caller's
        concern. On success the order is prepended to the history, the
        ordered lines leave the cart and the coupon is cleared.
        """
        if self.user is None:
            logger.info("place_order ignored: nobody is signed in")
            return None
        if not self.cart:
            self.add_notification("error", "Your cart is empty.")
            return None

        items = [item.model_copy(deep=True) for item in self.cart]
        total = pricing.merchandise_total(items, self.active_coupon)
        try:
            order = await self.gateway.place_order(self.user.id, items, total, address)
        except Exception as e:
            logger.error(f"Order placement failed: {e}")
            self.add_notification("error", "We couldn't place your order. Please try again.")
            return None

        self.orders.insert(0, order)
        self._commit("orders", "place_order")
        self._remove_ordered(items)
        self.active_coupon = None
        self._commit("active_coupon", "place_order")
        self.add_notification("success", "Order placed successfully! Check your email for confirmation.")
        return order

    async def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        """
        Admin: change an order's status.

        The in-memory copy is updated only if this session holds the order;
        the remote (or local) update applies regardless.
        """
        try:
            status = OrderStatus(status)
            acknowledged = await self.gateway.update_order_status(order_id, status)
        except Exception as e:
            logger.error(f"Status update for {order_id} failed: {e}")
            self.add_notification("error", f"Could not update order {order_id}.")
            return False
        if not acknowledged:
            logger.warning(f"Status update for unknown order {order_id}")
            self.add_notification("error", f"Order {order_id} was not found.")
            return False

        for order in self.orders:
            if order.id == order_id:
                order.status = status.value
        self._commit("orders", "update_order_status")
        self.add_notification("info", f"Order {order_id} status updated to {status.value}.")
        return True

    async def load_all_orders(self) -> bool:
        """Admin: replace the order slice with every customer's orders."""
        if self.user is None or not self.user.is_admin:
            self.add_notification("error", "Admin access required.")
            return False
        try:
            self.orders = await self.gateway.list_all_orders()
        except Exception as e:
            logger.error(f"Loading all orders failed: {e}")
            return False
        self._commit("orders", "load_all_orders")
        return True

    async def reseed_catalog(self) -> bool:
        """Admin: regenerate the catalog, then reload it."""
        if self.user is None or not self.user.is_admin:
            self.add_notification("error", "Admin access required.")
            return False
        try:
            count = await self.gateway.seed_catalog()
        except Exception as e:
            logger.error(f"Catalog reseed failed: {e}")
            self.add_notification("error", "Catalog reseed failed.")
            return False
        await self.refresh_products()
        self.add_notification("success", f"Catalog reseeded with {count} products.")
        return True

    # =========================================================================
    # Accounts
    # =========================================================================

    async def login(self, email: str, password: Optional[str] = None) -> bool:
        """Sign in and load the user's orders. Returns False on rejection."""
        try:
            user = await self.gateway.login(email, password)
        except NotFoundError:
            self.add_notification("error", "Invalid email or password.")
            return False
        except Exception as e:
            logger.error(f"Login for {email} failed: {e}")
            self.add_notification("error", "Login failed. Please try again.")
            return False
        await self._start_session(user, "login")
        self.add_notification("success", f"Welcome back, {user.name}!")
        return True

    async def signup(self, name: str, email: str, password: str) -> bool:
        try:
            user = await self.gateway.signup(name, email, password)
        except ConflictError:
            self.add_notification("error", "An account with that email already exists.")
            return False
        except Exception as e:
            logger.error(f"Signup for {email} failed: {e}")
            self.add_notification("error", "Signup failed. Please try again.")
            return False
        await self._start_session(user, "signup")
        self.add_notification("success", f"Welcome to NovaMart, {user.name}!")
        return True

    async def login_with_google(self, email: str, name: str) -> bool:
        try:
            user = await self.gateway.google_login(email, name)
        except StorefrontError as e:
            logger.error(f"Google login for {email} failed: {e}")
            self.add_notification("error", "Google sign-in failed.")
            return False
        await self._start_session(user, "login_with_google")
        self.add_notification("success", f"Welcome back, {user.name}!")
        return True

    async def _start_session(self, user: User, operation: str) -> None:
        """Make `user` current and load their orders. The cart is untouched."""
        self.user = user
        self._commit("user", operation)
        try:
            self.orders = await self.gateway.list_user_orders(user.id)
        except Exception as e:
            logger.error(f"Order fetch for {user.id} failed: {e}")
            self.orders = []
        self._commit("orders", operation)

    def logout(self) -> None:
        """Forget the user and their orders. The cart is kept."""
        self.user = None
        self._commit("user", "logout")
        self.orders = []
        self._commit("orders", "logout")
        self.add_notification("info", "Logged out successfully.")

    # =========================================================================
    # Reviews
    # =========================================================================

    def add_review(
        self,
        product_id: str,
        user_name: str,
        rating: int,
        comment: str,
    ) -> Optional[Review]:
        """Record a review for this session. Not sent to the remote service."""
        try:
            review = Review(
                id=accounts.new_review_id(),
                product_id=product_id,
                user_name=user_name,
                rating=rating,
                comment=comment,
                date=date.today().isoformat(),
            )
        except ValidationError as e:
            logger.warning(f"Rejected review for {product_id}: {e}")
            self.add_notification("error", "Reviews need a rating between 1 and 5.")
            return None
        self.reviews.insert(0, review)
        self._commit("reviews", "add_review")
        self.add_notification("success", "Review submitted! Thank you.")
        return review

    def product_reviews(self, product_id: str) -> list[Review]:
        return [r for r in self.reviews if r.product_id == product_id]

    # =========================================================================
    # Snapshots
    # =========================================================================

    @property
    def backend_mode(self) -> str:
        """Either "live" or "mock", for a status indicator."""
        return self.gateway.mode

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            cart=[item.model_copy(deep=True) for item in self.cart],
            wishlist=list(self.wishlist),
            recently_viewed=list(self.recently_viewed),
            locale=self.locale,
            user=self.user.model_copy() if self.user else None,
        )
