"""
Shared pytest fixtures for the NovaMart storefront tests.

These fixtures provide a small hand-written catalog and fresh, in-memory
collaborators for every test so tests don't interfere with each other.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.repository import ServerRepository
from storefront.change_bus import ChangeBus
from storefront.gateway import RemoteDataGateway
from storefront.mock_db import MockDatabase
from storefront.models import Product
from storefront.notifications import NotificationQueue
from storefront.persistence import MemoryBackend, PersistenceAdapter
from storefront.store import Store


# =============================================================================
# Catalog Fixtures
# =============================================================================

@pytest.fixture
def products() -> list[Product]:
    """Five products across four categories, ids "1".."5"."""
    return [
        Product(id="1", name="Aura Desk Lamp 101", price=45.0, category="Home",
                rating=4.5, reviews_count=120, stock=30, tags=["home", "lamp", "aura"]),
        Product(id="2", name="Smart Speaker 102", price=120.0, category="Electronics",
                rating=4.1, reviews_count=80, stock=12, tags=["electronics", "speaker", "smart"]),
        Product(id="3", name="Eco Yoga Mat 103", price=25.5, category="Sports",
                rating=3.9, reviews_count=15, stock=0, tags=["sports", "yoga mat", "eco"]),
        Product(id="4", name="Premium Headphones 104", price=299.99, category="Electronics",
                rating=4.8, reviews_count=950, stock=7, tags=["electronics", "headphones", "premium"]),
        Product(id="5", name="Classic Novel 105", price=12.0, category="Books",
                rating=4.0, reviews_count=3, stock=100, tags=["books", "novel", "classic"]),
    ]


@pytest.fixture
def lamp(products: list[Product]) -> Product:
    """Aura Desk Lamp, $45.00."""
    return products[0]


@pytest.fixture
def speaker(products: list[Product]) -> Product:
    """Smart Speaker, $120.00."""
    return products[1]


# =============================================================================
# Storefront Fixtures
# =============================================================================

@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def persistence(backend: MemoryBackend) -> PersistenceAdapter:
    return PersistenceAdapter(backend)


@pytest.fixture
def mock_db(persistence: PersistenceAdapter, products: list[Product]) -> MockDatabase:
    """Local database seeded with the hand-written catalog."""
    return MockDatabase(persistence, catalog=products)


@pytest.fixture
def gateway(mock_db: MockDatabase) -> RemoteDataGateway:
    """Mock-only gateway (no remote URL configured)."""
    return RemoteDataGateway(None, mock_db)


@pytest.fixture
def store(gateway: RemoteDataGateway, persistence: PersistenceAdapter) -> Store:
    return Store(
        gateway,
        persistence=persistence,
        notifications=NotificationQueue(ttl=5.0),
        bus=ChangeBus(),
    )


@pytest.fixture
async def ready_store(store: Store) -> Store:
    """A store that has finished initialization."""
    await store.initialize()
    return store


# =============================================================================
# Server Fixtures
# =============================================================================

@pytest.fixture
def server_repository(products: list[Product]) -> ServerRepository:
    return ServerRepository(catalog=[p.model_copy() for p in products])


@pytest.fixture
def api_client(server_repository: ServerRepository) -> TestClient:
    return TestClient(create_app(server_repository))


@pytest.fixture
async def live_gateway(server_repository: ServerRepository, mock_db: MockDatabase):
    """Gateway whose remote path is the reference app, in-process."""
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=create_app(server_repository)))
    gateway = RemoteDataGateway("http://novamart.test/api", mock_db, client=client)
    yield gateway
    await client.aclose()
