"""
Shared fixtures: in-memory database, fake Redis and authenticated clients.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("REDIS_URL", "redis://localhost:6379")

import pytest
from fastapi.testclient import TestClient

from retailpos.core.database import Base, SessionLocal, engine, get_db
from retailpos.core.redis_client import cache_manager, session_manager
from retailpos.core.security import hash_password
from retailpos.main import app
from retailpos.models import Category, Customer, Product, StoreSettings, User, UserRole

PASSWORD = "secret123"


class FakeRedis:
    """In-memory stand-in for the subset of the Redis API the app uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    def expire(self, key, ttl):
        if key not in self.store:
            return False
        self.ttls[key] = ttl
        return True

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_manager, "client", fake)
    monkeypatch.setattr(session_manager, "client", fake)
    return fake


@pytest.fixture
def db():
    """A fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture
def admin(db, password_hash):
    user = User(
        email="admin@example.com",
        full_name="Ada Admin",
        password_hash=password_hash,
        role=UserRole.ADMIN,
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def staff(db, password_hash):
    user = User(
        email="staff@example.com",
        full_name="Sam Staff",
        password_hash=password_hash,
        role=UserRole.STAFF,
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


def auth_headers(user):
    token = session_manager.create_session(user.id, {"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)


@pytest.fixture
def store_settings(db):
    row = StoreSettings(
        store_name="Test Store",
        currency="USD",
        tax_rate=10.0,
        loyalty_rate=1.0,
        low_stock_threshold=5,
    )
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def category(db):
    row = Category(name="Groceries", description="Food")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def products(db, category):
    rows = [
        Product(sku="MILK001", name="Milk", price=4.0, cost=2.5, stock_quantity=20, category_id=category.id, is_active=True),
        Product(sku="BREAD001", name="Bread", price=3.0, cost=1.5, stock_quantity=3, category_id=category.id, is_active=True),
        Product(sku="TEA001", name="Tea", price=6.0, cost=3.0, stock_quantity=0, category_id=category.id, is_active=False),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def customer(db):
    row = Customer(full_name="Jordan Lee", email="jordan@example.com", phone="555-0101", loyalty_points=100)
    db.add(row)
    db.commit()
    return row
