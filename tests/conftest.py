"""
Shared fixtures: fresh in-memory stores per test, a SQLite-backed SQL
gateway, and a TestClient wired to them.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from scan2dine.database import init_db
from scan2dine.main import app, get_auth, get_gateway
from scan2dine.schemas import MenuItem, Restaurant
from scan2dine.services.accounts import OwnerSession
from scan2dine.services.auth.mock import MockAuthService
from scan2dine.services.gateway.memory import InMemoryMenuGateway
from scan2dine.services.gateway.sql import SqlMenuGateway

RESTAURANT_ID = "r1"


def make_item(name: str, category=None, item_id=None, price: float = 5.0, **extra) -> MenuItem:
    return MenuItem(
        id=item_id or name.lower().replace(" ", "-"),
        restaurant_id=RESTAURANT_ID,
        name=name,
        price=price,
        category=category,
        **extra,
    )


def make_restaurant(**fields) -> Restaurant:
    data = {"id": RESTAURANT_ID, "name": "Chez Nous", "phone": "+1 (555) 123-4567"}
    data.update(fields)
    return Restaurant(**data)


@pytest.fixture
def gateway() -> InMemoryMenuGateway:
    return InMemoryMenuGateway()


@pytest.fixture
async def sql_gateway():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield SqlMenuGateway(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest.fixture(params=["memory", "sql"])
async def any_gateway(request, gateway, sql_gateway):
    """Runs a test once per concrete gateway."""
    return gateway if request.param == "memory" else sql_gateway


@pytest.fixture
def auth_service() -> MockAuthService:
    return MockAuthService()


@pytest.fixture
def owner() -> OwnerSession:
    return OwnerSession(account_id=RESTAURANT_ID, email="owner@example.com", display_name="Jane")


@pytest.fixture
async def seeded_gateway(gateway: InMemoryMenuGateway) -> InMemoryMenuGateway:
    await gateway.create_restaurant(
        RESTAURANT_ID,
        {"name": "Chez Nous", "phone": "+1 (555) 123-4567", "email": "owner@example.com"},
    )
    await gateway.add_menu_item(RESTAURANT_ID, {"name": "Soup", "price": 4.5, "category": "Starters"})
    await gateway.add_menu_item(RESTAURANT_ID, {"name": "Cake", "price": 6.0, "category": "Desserts"})
    return gateway


@pytest.fixture
def client(gateway, auth_service):
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_auth] = lambda: auth_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
