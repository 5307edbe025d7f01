"""Pytest fixtures for storecart tests."""

import os

# must be set before storecart reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CART_LOCK_WAIT_SECONDS"] = "0.2"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storecart.api.deps import get_service
from storecart.data.database import Base, make_engine, init_db
from storecart.main import create_app
from storecart.services.cart_service import CartService
from storecart.services.lock_service import LockService
from storecart.services.product_client import ProductOffering

STORE_ID = 1
OTHER_STORE_ID = 2


class InMemoryCatalog:
    """Product-catalog collaborator backed by a dict."""

    def __init__(self):
        self.offerings = {}

    def put(self, offering_id, store_id, name, price, is_active=True):
        self.offerings[offering_id] = ProductOffering(
            id=offering_id,
            store_id=store_id,
            name=name,
            price=Decimal(price),
            is_active=is_active,
        )

    def set_price(self, offering_id, price):
        o = self.offerings[offering_id]
        self.offerings[offering_id] = ProductOffering(o.id, o.store_id, o.name, Decimal(price), o.is_active)

    def fetch_offering(self, store_id, offering_id):
        return self.offerings.get(offering_id)


class InMemoryStores:
    def __init__(self, *store_ids):
        self.store_ids = set(store_ids)

    def store_exists(self, store_id):
        return store_id in self.store_ids


class InProcessLockService(LockService):
    """LockService keeping the locks in a dict instead of Redis."""

    def __init__(self):
        self.held = {}

    def acquire(self, key, token, ttl=None):
        if key in self.held:
            return False
        self.held[key] = token
        return True

    def release(self, key, token):
        if self.held.get(key) == token:
            del self.held[key]
            return True
        return False


@pytest.fixture
def engine():
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def catalog():
    catalog = InMemoryCatalog()
    catalog.put(42, STORE_ID, "Keyboard", "199.99")
    catalog.put(43, STORE_ID, "Mouse", "49.50")
    catalog.put(44, STORE_ID, "Monitor", "899.00", is_active=False)
    catalog.put(50, OTHER_STORE_ID, "Keyboard", "189.00")
    return catalog


@pytest.fixture
def stores():
    return InMemoryStores(STORE_ID, OTHER_STORE_ID)


@pytest.fixture
def locks():
    return InProcessLockService()


@pytest.fixture
def service(db, catalog, stores, locks):
    return CartService(db, product_client=catalog, store_client=stores, lock_service=locks)


@pytest.fixture
def test_client(service):
    app = create_app(with_lifespan=False)
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as client:
        yield client
