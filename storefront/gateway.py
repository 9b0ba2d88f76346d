"""
Remote data gateway with transparent local fallback.

Every catalog, auth and order operation first tries the remote service. The
primary call never raises for remote trouble: it returns a Result holding
either the decoded body or a RemoteError. A single decision function,
should_fall_back(), then chooses the local mock path for that error. The
caller sees the same return type either way; only latency and freshness can
differ.

Design decisions:
- Network errors, timeouts, non-2xx responses and bodies that fail model
  validation are all RemoteErrors
- Each request carries an explicit timeout so a hung remote is bounded
- With no http(s) base URL configured the gateway is mock-only
- `mode` records which path served the latest call ("live" or "mock")
- A 4xx answer from the service is its verdict on the request, so it is
  raised as NotFoundError or ConflictError and never replayed on the mock
"""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from pydantic import ValidationError

from storefront.errors import (
    ConflictError,
    NotFoundError,
    RemoteError,
    RemoteErrorKind,
    RemoteUnavailable,
    StorefrontError,
)
from storefront.mock_db import MockDatabase
from storefront.models import CartItem, Order, OrderStatus, Product, User
from storefront.results import Result

logger = logging.getLogger("gateway")

T = TypeVar("T")

DEFAULT_TIMEOUT = 8.0

MODE_LIVE = "live"
MODE_MOCK = "mock"

# Client errors that say nothing about the request itself
TRANSIENT_CLIENT_STATUSES = frozenset({408, 429})


def should_fall_back(error: RemoteError) -> bool:
    """
    Decide whether a failed remote call is served by the local database.

    Unreachable, timed-out, disabled and malformed calls fall back, as do
    5xx answers. Any other 4xx is a definitive answer from the service.
    """
    if error.kind != RemoteErrorKind.HTTP_STATUS or error.status_code is None:
        return True
    if error.status_code in TRANSIENT_CLIENT_STATUSES:
        return True
    return not 400 <= error.status_code < 500


def rejection_for(operation: str, error: RemoteError) -> StorefrontError:
    """The exception raised when a failed call is not served locally."""
    if error.status_code == 409:
        return ConflictError(f"{operation}: {error.detail}")
    if error.status_code == 404:
        return NotFoundError(f"{operation}: {error.detail}")
    return RemoteUnavailable(f"{operation}: {error}")


FallbackPolicy = Callable[[RemoteError], bool]


class RemoteDataGateway:
    """
    Async access to the catalog/order/auth service.

    Example:
        gateway = RemoteDataGateway("http://localhost:5000/api", MockDatabase())
        products = await gateway.list_products("lamp", "Home")
        print(gateway.mode)  # "live" or "mock"
        await gateway.aclose()
    """

    def __init__(
        self,
        base_url: Optional[str],
        mock_db: MockDatabase,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        fallback_policy: FallbackPolicy = should_fall_back,
    ):
        """
        Args:
            base_url: API root, e.g. "http://localhost:5000/api"; None or a
                      non-http value disables the remote path
            mock_db: Local database used on fallback
            client: HTTP client to use (one is created lazily when omitted)
            timeout: Seconds before a remote call is abandoned
            fallback_policy: Decision function applied to each RemoteError
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self.mock_db = mock_db
        self.timeout = timeout
        self.fallback_policy = fallback_policy
        self._client = client
        self._owns_client = client is None
        self.mode = MODE_LIVE if self.live_enabled else MODE_MOCK

    @property
    def live_enabled(self) -> bool:
        return bool(self.base_url) and self.base_url.startswith(("http://", "https://"))

    @property
    def is_mock(self) -> bool:
        return self.mode == MODE_MOCK

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RemoteDataGateway":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # =========================================================================
    # Primary path
    # =========================================================================

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
    ) -> Result[Any, RemoteError]:
        """Call the remote service. Never raises for remote failures."""
        if not self.live_enabled:
            return Result.err(RemoteError(RemoteErrorKind.DISABLED, "no remote service configured"))

        url = f"{self.base_url}{path}"
        try:
            response = await self._http().request(
                method, url, params=params, json=json, timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            return Result.err(RemoteError(RemoteErrorKind.TIMEOUT, f"{method} {path}: {e!r}"))
        except httpx.HTTPError as e:
            return Result.err(RemoteError(RemoteErrorKind.UNREACHABLE, f"{method} {path}: {e!r}"))

        if not response.is_success:
            return Result.err(RemoteError(
                RemoteErrorKind.HTTP_STATUS,
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            ))
        try:
            return Result.ok(response.json())
        except ValueError as e:
            return Result.err(RemoteError(RemoteErrorKind.MALFORMED, f"{method} {path}: {e}"))

    @staticmethod
    def _decode(result: Result[Any, RemoteError], decoder: Callable[[Any], T]) -> Result[T, RemoteError]:
        """Turn a JSON body into models; a body that does not fit is MALFORMED."""
        def attempt(body: Any) -> Result[T, RemoteError]:
            try:
                return Result.ok(decoder(body))
            except (ValidationError, TypeError, ValueError, KeyError, AttributeError) as e:
                return Result.err(RemoteError(RemoteErrorKind.MALFORMED, str(e)))
        return result.bind(attempt)

    async def _resolve(
        self,
        operation: str,
        result: Result[T, RemoteError],
        fallback: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the remote value, or run the local equivalent."""
        if result.is_ok:
            self.mode = MODE_LIVE
            return result.value

        error = result.error
        if not self.fallback_policy(error):
            if error.kind == RemoteErrorKind.HTTP_STATUS:
                self.mode = MODE_LIVE
            logger.info(f"{operation}: remote rejected the request ({error})")
            raise rejection_for(operation, error)
        if error.kind != RemoteErrorKind.DISABLED:
            logger.warning(f"{operation}: remote failed ({error}), using local database")
        self.mode = MODE_MOCK
        return await fallback()

    # =========================================================================
    # Catalog
    # =========================================================================

    async def list_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
    ) -> list[Product]:
        """Search the catalog. "All" or no category means unfiltered."""
        params = {}
        if query:
            params["search"] = query
        if category:
            params["category"] = category
        result = self._decode(
            await self._request("GET", "/products", params=params),
            lambda body: [Product(**p) for p in body],
        )
        return await self._resolve(
            "list_products", result, lambda: self.mock_db.get_products(query, category)
        )

    async def get_product(self, product_id: str) -> Optional[Product]:
        """None when neither the service nor the local database knows the id."""
        result = self._decode(
            await self._request("GET", f"/products/{product_id}"),
            lambda body: Product(**body),
        )
        try:
            return await self._resolve(
                "get_product", result, lambda: self.mock_db.get_product(product_id)
            )
        except NotFoundError:
            return None

    async def seed_catalog(self) -> int:
        """Admin: wipe and regenerate the catalog. Returns the product count."""
        result = self._decode(
            await self._request("POST", "/products/seed"),
            lambda body: int(body["count"]),
        )
        return await self._resolve("seed_catalog", result, self.mock_db.reseed)

    # =========================================================================
    # Auth
    # =========================================================================

    async def login(self, email: str, password: Optional[str] = None) -> User:
        payload: dict[str, Any] = {"email": email}
        if password is not None:
            payload["password"] = password
        result = self._decode(
            await self._request("POST", "/auth/login", json=payload),
            lambda body: User(**body),
        )
        return await self._resolve(
            "login", result, lambda: self.mock_db.login(email, password)
        )

    async def signup(self, name: str, email: str, password: str) -> User:
        result = self._decode(
            await self._request(
                "POST", "/auth/register",
                json={"name": name, "email": email, "password": password},
            ),
            lambda body: User(**body),
        )
        return await self._resolve(
            "signup", result, lambda: self.mock_db.signup(name, email, password)
        )

    async def google_login(self, email: str, name: str) -> User:
        result = self._decode(
            await self._request("POST", "/auth/google", json={"email": email, "name": name}),
            lambda body: User(**body),
        )
        return await self._resolve(
            "google_login", result, lambda: self.mock_db.google_login(email, name)
        )

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
        snapshot = [item.model_copy(deep=True) for item in items]
        payload = {
            "userId": user_id,
            "items": [item.to_wire() for item in snapshot],
            "total": total,
            "shippingAddress": address,
        }
        result = self._decode(
            await self._request("POST", "/orders", json=payload),
            lambda body: Order(**body),
        )
        return await self._resolve(
            "place_order", result,
            lambda: self.mock_db.place_order(user_id, snapshot, total, address),
        )

    async def list_user_orders(self, user_id: str) -> list[Order]:
        """A user's orders, most recent first."""
        result = self._decode(
            await self._request("GET", f"/orders/user/{user_id}"),
            lambda body: [Order(**o) for o in body],
        )
        return await self._resolve(
            "list_user_orders", result, lambda: self.mock_db.get_orders(user_id)
        )

    async def list_all_orders(self) -> list[Order]:
        """Admin: every order, most recent first."""
        result = self._decode(
            await self._request("GET", "/orders"),
            lambda body: [Order(**o) for o in body],
        )
        return await self._resolve("list_all_orders", result, self.mock_db.get_orders)

    async def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        """
        Admin: set an order's status.

        Returns True when the service acknowledged the update (or, on the
        local path, when the order exists).
        """
        status = OrderStatus(status)

        async def local() -> bool:
            return await self.mock_db.update_order_status(order_id, status) is not None

        result = self._decode(
            await self._request("PATCH", f"/orders/{order_id}/status", json={"status": status.value}),
            lambda body: bool(body.get("success", True)),
        )
        return await self._resolve("update_order_status", result, local)

    # =========================================================================
    # Health
    # =========================================================================

    async def health(self) -> dict[str, Any]:
        async def local() -> dict[str, Any]:
            return {"status": "active", "database": "local", "mode": MODE_MOCK}

        result = self._decode(await self._request("GET", "/health"), dict)
        return await self._resolve("health", result, local)
