"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TOKEN_BLACKLIST_ENABLED", "false")
os.environ.setdefault("ORDER_EVENTS_ENABLED", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, Hall, Product, Restaurant, RestaurantTable, Tenant
from rest_api.seed import DEMO_RESTAURANT_SLUG, DEMO_TENANT_SLUG, seed
from shared.infrastructure.db import get_db


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Demo data
# =============================================================================


@pytest.fixture
def seeded(db_session):
    """Demo tenant, restaurant, staff, floor and menu."""
    seed(db_session)
    return db_session


@pytest.fixture
def demo_tenant(seeded) -> Tenant:
    return seeded.scalar(select(Tenant).where(Tenant.slug == DEMO_TENANT_SLUG))


@pytest.fixture
def demo_restaurant(seeded) -> Restaurant:
    return seeded.scalar(select(Restaurant).where(Restaurant.slug == DEMO_RESTAURANT_SLUG))


@pytest.fixture
def demo_products(seeded, demo_restaurant) -> list[Product]:
    return list(seeded.scalars(
        select(Product).where(Product.restaurant_id == demo_restaurant.id).order_by(Product.id)
    ))


@pytest.fixture
def demo_tables(seeded, demo_restaurant) -> list[RestaurantTable]:
    return list(seeded.scalars(
        select(RestaurantTable).where(RestaurantTable.restaurant_id == demo_restaurant.id).order_by(RestaurantTable.id)
    ))


@pytest.fixture
def demo_halls(seeded, demo_restaurant) -> list[Hall]:
    return list(seeded.scalars(select(Hall).where(Hall.restaurant_id == demo_restaurant.id).order_by(Hall.id)))


def login_headers(client, email: str, password: str, restaurant_id: int | None = None) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, f"Login failed: {response.json()}"
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    if restaurant_id is not None:
        headers["x-restaurant-id"] = str(restaurant_id)
    # Keep auth explicit: later requests must not ride on the login cookies
    client.cookies.clear()
    return headers


@pytest.fixture
def owner_headers(client, demo_restaurant):
    return login_headers(client, "owner@demo.com", "owner123", demo_restaurant.id)


@pytest.fixture
def manager_headers(client, demo_restaurant):
    return login_headers(client, "manager@demo.com", "manager123", demo_restaurant.id)


@pytest.fixture
def waiter_headers(client, demo_restaurant):
    return login_headers(client, "waiter@demo.com", "waiter123", demo_restaurant.id)


@pytest.fixture
def super_admin_headers(client, seeded):
    response = client.post(
        "/api/super-admin/auth/login",
        json={"email": "superadmin@demo.com", "password": "superadmin123"},
    )
    assert response.status_code == 200, f"Login failed: {response.json()}"
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# =============================================================================
# Orders
# =============================================================================


@pytest.fixture
def place_public_order(client, demo_restaurant, demo_products):
    """Place a QR order on the demo restaurant and return the response body."""

    def _place(table_number: str | None = "T1", quantity: int = 2, **overrides):
        body = {
            "customer_name": "Asha",
            "customer_phone": "+919812345678",
            "table_number": table_number,
            "items": [{"product_id": demo_products[0].id, "quantity": quantity}],
            **overrides,
        }
        response = client.post(f"/api/public/{demo_restaurant.slug}/orders", json=body)
        assert response.status_code == 201, response.json()
        return response.json()

    return _place


@pytest.fixture
def create_order(client, manager_headers, demo_products, demo_tables):
    """Create a staff dine-in order and return the response body."""

    def _create(**overrides):
        body = {
            "order_type": "DINE_IN",
            "table_id": demo_tables[0].id,
            "customer_name": "Ravi",
            "customer_phone": "9876500001",
            "items": [
                {"product_id": demo_products[0].id, "quantity": 1},
                {"product_id": demo_products[1].id, "quantity": 2},
            ],
            **overrides,
        }
        response = client.post("/api/orders", json=body, headers=manager_headers)
        assert response.status_code == 201, response.json()
        return response.json()

    return _create
