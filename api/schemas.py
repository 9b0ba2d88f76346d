"""
Request and response bodies for the reference server.

Bodies use the same camelCase wire names as the storefront models.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from storefront.models import CartItem, OrderStatus, WireModel


class LoginRequest(WireModel):
    email: str = Field(..., min_length=3)
    password: Optional[str] = Field(default=None, description="Omit for demo login")


class RegisterRequest(WireModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class GoogleLoginRequest(WireModel):
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)


class OrderCreate(WireModel):
    user_id: str
    items: list[CartItem] = Field(default_factory=list)
    total: float = Field(..., ge=0)
    shipping_address: Optional[str] = None


class StatusUpdate(WireModel):
    status: OrderStatus


class StatusAck(WireModel):
    success: bool


class SeedResult(WireModel):
    count: int


class HealthStatus(WireModel):
    status: str = "active"
    database: str = Field(..., description='"connected" or "disconnected"')
    timestamp: datetime
