"""
Client-side state core for the NovaMart storefront.

This package contains:
- Domain models (Product, CartItem, Order, User, Review, Coupon)
- The Store state container and its change bus
- A remote data gateway with a local mock database fallback
- Durable key-value persistence for session slices
- Self-expiring notifications and coupon/shipping arithmetic
"""

from storefront.models import (
    CartItem,
    Category,
    Coupon,
    Locale,
    Notification,
    NotificationLevel,
    Order,
    OrderStatus,
    Product,
    Review,
    Role,
    User,
)
from storefront.errors import ConflictError, NotFoundError, StorefrontError
from storefront.gateway import RemoteDataGateway
from storefront.mock_db import MockDatabase
from storefront.persistence import JsonFileBackend, MemoryBackend, PersistenceAdapter
from storefront.store import Store, StoreLifecycle
from storefront.config import Settings, build_store, load_settings

__all__ = [
    "CartItem",
    "Category",
    "Coupon",
    "Locale",
    "Notification",
    "NotificationLevel",
    "Order",
    "OrderStatus",
    "Product",
    "Review",
    "Role",
    "User",
    "ConflictError",
    "NotFoundError",
    "StorefrontError",
    "RemoteDataGateway",
    "MockDatabase",
    "JsonFileBackend",
    "MemoryBackend",
    "PersistenceAdapter",
    "Store",
    "StoreLifecycle",
    "Settings",
    "build_store",
    "load_settings",
]
