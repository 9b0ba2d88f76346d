"""
Scripted shopping session.

Walks a Store through a typical visit: browse, cart, wishlist, compare,
coupon, sign-in, checkout and an admin status change. Run it against the
local mock database or a live server to watch the logs.
"""

import asyncio
from typing import Optional

from storefront.config import Settings, build_store, configure_logging
from storefront.persistence import MemoryBackend
from storefront.pricing import checkout_total, shipping_fee
from storefront.store import Store


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70 + "\n")


def _step(action: str) -> None:
    print("-" * 70)
    print(f"ACTION: {action}")
    print("-" * 70)


def _show_notifications(store: Store, start: int) -> int:
    history = store.notification_queue.history
    for notification in history[start:]:
        print(f"  [{notification.type}] {notification.message}")
    return len(history)


async def run_shopping_session(settings: Optional[Settings] = None, durable: bool = False) -> Store:
    """
    Run the scripted session and return the store for inspection.

    Args:
        settings: Configuration; mock-only (no remote URL) when omitted
        durable: Keep state on disk under settings.data_dir instead of in memory
    """
    settings = settings or Settings(api_url=None)
    store = build_store(settings, backend=None if durable else MemoryBackend())
    seen = 0

    _banner(f"NOVAMART DEMO: Shopping session ({store.backend_mode} backend)")

    await store.initialize()
    print(f"Catalog loaded: {len(store.products)} products\n")
    if not store.products:
        print("No products available; nothing to demo.")
        return store

    first, second, third = (store.products + store.products[:3])[:3]

    _step(f"Viewing and adding {first.name} to the cart twice")
    store.track_view(first.id)
    store.add_to_cart(first)
    store.add_to_cart(first)
    seen = _show_notifications(store, seen)

    _step(f"Saving {second.name} to the wishlist and comparing three products")
    store.toggle_wishlist(second.id)
    store.toggle_compare(first.id)
    store.toggle_compare(second.id)
    store.toggle_compare(third.id)
    seen = _show_notifications(store, seen)

    _step("Applying coupons BOGUS and nova10")
    store.apply_coupon("BOGUS")
    store.apply_coupon("nova10")
    seen = _show_notifications(store, seen)
    print(f"\n  Subtotal: ${store.cart_subtotal:.2f}")
    print(f"  After coupon: ${store.cart_total:.2f}")
    print(f"  Shipping: ${shipping_fee(store.cart_subtotal):.2f}")
    print(f"  Checkout total: ${checkout_total(store.cart, store.active_coupon):.2f}\n")

    _step("Signing in as admin@novamart.example and checking out")
    await store.login("admin@novamart.example")
    order = await store.place_order("42 Market Street")
    seen = _show_notifications(store, seen)

    if order is not None:
        _step(f"Marking {order.id} as Shipped")
        await store.update_order_status(order.id, "Shipped")
        seen = _show_notifications(store, seen)

    _step("Signing out")
    store.logout()
    _show_notifications(store, seen)

    print("\nState changes published:")
    for change in store.bus.get_change_log()[-8:]:
        print(f"  {change}")

    await store.gateway.aclose()
    return store


def main() -> None:
    configure_logging()
    asyncio.run(run_shopping_session())


if __name__ == "__main__":
    main()
