"""
Domain models for the NovaMart storefront.

These models describe everything the client-side store holds: catalog
products, cart lines, the signed-in user, placed orders, reviews, coupons
and the ephemeral notifications shown to the shopper.

Design decisions:
- Using Pydantic for validation and serialization
- Wire format (HTTP bodies and durable storage) is camelCase to match the
  catalog service; Python attributes stay snake_case
- Models accept either spelling on input (populate_by_name)
- CartItem copies every Product field so a cart line (and the order that
  snapshots it) is independent of later catalog edits
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================

class Category(str, Enum):
    """Fixed set of catalog categories."""
    ELECTRONICS = "Electronics"
    FASHION = "Fashion"
    HOME = "Home"
    MOBILES = "Mobiles"
    ACCESSORIES = "Accessories"
    GROCERY = "Grocery"
    APPLIANCES = "Appliances"
    HEALTH = "Health"
    BEAUTY = "Beauty"
    SPORTS = "Sports"
    BOOKS = "Books"


class OrderStatus(str, Enum):
    """
    Order lifecycle states.

    Listed in their usual order, but no transition graph is enforced: an
    admin may move a Delivered order back to Processing.
    """
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class NotificationLevel(str, Enum):
    """Severity of a user-facing notification."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Locale(str, Enum):
    EN = "en"
    HI = "hi"


# =============================================================================
# Base model
# =============================================================================

class WireModel(BaseModel):
    """Base for models that travel over HTTP or into durable storage."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_wire(self) -> dict:
        """Serialize to the JSON-ready camelCase form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Catalog
# =============================================================================

class Product(WireModel):
    """
    Catalog item.

    Read-only from the store's perspective; only an admin re-seed replaces
    the catalog.
    """
    id: str = Field(..., description="Stable unique product identifier")
    name: str = Field(..., description="Product display name")
    description: str = Field(default="")
    price: float = Field(..., ge=0, description="Current price")
    category: Category = Field(..., description="Product category")
    image: str = Field(default="", description="Image URL")
    rating: float = Field(default=0.0, ge=0, le=5)
    reviews_count: int = Field(default=0, ge=0)
    stock: int = Field(default=0, ge=0, description="Advisory stock level")
    tags: list[str] = Field(default_factory=list)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on the name or any tag."""
        q = query.lower()
        return q in self.name.lower() or any(q in tag.lower() for tag in self.tags)


class CartItem(Product):
    """
    A product line in the cart.

    Carries a full copy of the product plus a quantity. The product id is
    the uniqueness key within a cart.
    """
    quantity: int = Field(default=1, ge=1, description="Quantity in cart")

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartItem":
        return cls(**product.model_dump(), quantity=quantity)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


# =============================================================================
# Accounts and orders
# =============================================================================

class User(WireModel):
    """The authenticated identity. At most one is current per session."""
    id: str
    name: str
    email: str
    role: Role = Field(default=Role.USER)
    token: Optional[str] = Field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class AccountRecord(User):
    """
    Server-side view of a user, as stored by the mock database and the
    reference server. Never handed to the store directly; see to_user().
    """
    password_hash: Optional[str] = Field(default=None)
    provider: Optional[str] = Field(default=None, description="e.g. 'google'")

    def to_user(self, token: Optional[str] = None) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            token=token if token is not None else self.token,
        )


class Order(WireModel):
    """
    A checkout's permanent receipt.

    Items are snapshots taken at purchase time; price and quantity never
    follow later catalog changes. Only the status is mutated afterwards.
    """
    id: str = Field(..., description="ORD-XXXXXXXX style identifier")
    user_id: str
    items: list[CartItem] = Field(default_factory=list)
    total: float = Field(..., ge=0, description="Discounted merchandise total")
    status: OrderStatus = Field(default=OrderStatus.PROCESSING)
    date: datetime = Field(default_factory=utcnow)
    shipping_address: Optional[str] = Field(default=None)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class Review(WireModel):
    """Shopper feedback. Immutable once created."""
    id: str
    product_id: str
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    date: str = Field(..., description="YYYY-MM-DD")


class Coupon(WireModel):
    """A code mapped to a percentage discount."""
    code: str
    discount: float = Field(..., ge=0, le=100, description="Percent off")
    description: str = ""


# =============================================================================
# Session-only models
# =============================================================================

class Notification(BaseModel):
    """Ephemeral UI message. Never persisted."""
    id: str = Field(default_factory=lambda: uuid4().hex[:9])
    type: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(use_enum_values=True)

