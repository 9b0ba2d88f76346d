"""
Coupons and cart arithmetic.

The store owns the merchandise total (subtotal less the coupon discount);
shipping is added by whoever renders the checkout, so it lives here as a
separate helper instead of inside any store operation.
"""

from typing import Iterable, Optional

from storefront.models import CartItem, Coupon


COUPONS: list[Coupon] = [
    Coupon(code="NOVA10", discount=10, description="10% off"),
    Coupon(code="WELCOME20", discount=20, description="20% off"),
]

FREE_SHIPPING_THRESHOLD = 50.0
FLAT_SHIPPING_FEE = 10.0


def find_coupon(code: str) -> Optional[Coupon]:
    """Case-insensitive exact lookup in the coupon table."""
    wanted = code.strip().upper()
    for coupon in COUPONS:
        if coupon.code.upper() == wanted:
            return coupon.model_copy()
    return None


def cart_subtotal(items: Iterable[CartItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def coupon_discount(subtotal: float, coupon: Optional[Coupon]) -> float:
    if coupon is None:
        return 0.0
    return round(subtotal * coupon.discount / 100, 2)


def merchandise_total(items: Iterable[CartItem], coupon: Optional[Coupon]) -> float:
    """Subtotal less the coupon discount. This is what an order records."""
    subtotal = cart_subtotal(items)
    return round(subtotal - coupon_discount(subtotal, coupon), 2)


def shipping_fee(subtotal: float) -> float:
    """Free above the threshold, flat fee otherwise."""
    return 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE


def checkout_total(items: Iterable[CartItem], coupon: Optional[Coupon]) -> float:
    """Merchandise total plus shipping, as shown on the checkout page."""
    items = list(items)
    return round(merchandise_total(items, coupon) + shipping_fee(cart_subtotal(items)), 2)
