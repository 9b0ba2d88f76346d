"""
Reference catalog/order/auth server for the NovaMart storefront.

This application provides the HTTP API the storefront gateway talks to:
1. Catalog search and lookup (/api/products)
2. Demo and password authentication (/api/auth/...)
3. Order placement, history and status changes (/api/orders)
4. Health reporting (/api/health)

Run with:
    uvicorn api.main:app --reload --port 5000

Then visit http://localhost:5000/docs for interactive API documentation.

A disconnected database never stops the process: /api/health reports it and
data routes answer 503 until it returns.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.repository import DatabaseOffline, ServerRepository
from api.schemas import (
    GoogleLoginRequest,
    HealthStatus,
    LoginRequest,
    OrderCreate,
    RegisterRequest,
    SeedResult,
    StatusAck,
    StatusUpdate,
)
from storefront.errors import ConflictError, NotFoundError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("api")


def _repository(request: Request) -> ServerRepository:
    return request.app.state.repository


# =============================================================================
# Health Check
# =============================================================================

router = APIRouter(prefix="/api")


@router.get("/health", tags=["Health"])
def health_check(request: Request):
    """Service liveness plus database connectivity."""
    return HealthStatus(
        database="connected" if _repository(request).online else "disconnected",
        timestamp=datetime.now(timezone.utc),
    ).to_wire()


# =============================================================================
# Catalog
# =============================================================================

@router.get("/products", tags=["Catalog"])
def list_products(
    request: Request,
    search: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = Query(100, ge=1, le=100),
):
    """
    Search the catalog.

    `category` is an exact match ("All" disables it); `search` matches the
    name or any tag, case-insensitively. At most 100 products are returned.
    """
    products = _repository(request).list_products(search, category, limit)
    return [p.to_wire() for p in products]


@router.post("/products/seed", tags=["Catalog"])
def seed_products(request: Request, count: int = Query(1000, ge=1, le=5000)):
    """Admin: replace the catalog with freshly generated products."""
    return SeedResult(count=_repository(request).reseed(count)).to_wire()


@router.get("/products/{product_id}", tags=["Catalog"])
def get_product(request: Request, product_id: str):
    product = _repository(request).get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")
    return product.to_wire()


# =============================================================================
# Auth
# =============================================================================

@router.post("/auth/login", tags=["Auth"])
def login(request: Request, body: LoginRequest):
    return _repository(request).login(body.email, body.password).to_wire()


@router.post("/auth/register", tags=["Auth"])
def register(request: Request, body: RegisterRequest):
    return _repository(request).register(body.name, body.email, body.password).to_wire()


@router.post("/auth/google", tags=["Auth"])
def google_login(request: Request, body: GoogleLoginRequest):
    return _repository(request).google_login(body.email, body.name).to_wire()


# =============================================================================
# Orders
# =============================================================================

@router.post("/orders", status_code=201, tags=["Orders"])
def create_order(request: Request, body: OrderCreate):
    """Record an order. The server assigns the id, date and initial status."""
    order = _repository(request).create_order(
        body.user_id, body.items, body.total, body.shipping_address
    )
    return order.to_wire()


@router.get("/orders", tags=["Orders"])
def list_orders(request: Request):
    """Admin: every order, most recent first."""
    return [o.to_wire() for o in _repository(request).all_orders()]


@router.get("/orders/user/{user_id}", tags=["Orders"])
def list_user_orders(request: Request, user_id: str):
    return [o.to_wire() for o in _repository(request).orders_for_user(user_id)]


@router.patch("/orders/{order_id}/status", tags=["Orders"])
def update_order_status(request: Request, order_id: str, body: StatusUpdate):
    updated = _repository(request).update_status(order_id, body.status)
    return StatusAck(success=updated).to_wire()


# =============================================================================
# Application
# =============================================================================

def create_app(repository: Optional[ServerRepository] = None) -> FastAPI:
    """
    Build the application.

    Args:
        repository: Backing store (a freshly seeded one when omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = "connected" if app.state.repository.online else "DATABASE OFFLINE"
        logger.info(f"Starting NovaMart API ({state})")
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="NovaMart API",
        description="Catalog, authentication and order service for the NovaMart storefront.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.repository = repository or ServerRepository()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[os.environ.get("NOVAMART_FRONTEND_URL", "*")],
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(DatabaseOffline)
    async def database_offline(request: Request, exc: DatabaseOffline):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"error": "Database unavailable"})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    app.include_router(router)
    return app


app = create_app()
