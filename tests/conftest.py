import os
from decimal import Decimal

import pytest

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ.setdefault("DECREMENT_STOCK_ON_SALE", "1")

from fastapi.testclient import TestClient  # noqa: E402

from restaurant_pos.data import models  # noqa: E402,F401
from restaurant_pos.data.database import Base, SessionLocal, engine, get_db  # noqa: E402
from restaurant_pos.data.models import CategoryModel, CustomerModel, ProductModel  # noqa: E402
from restaurant_pos.domain.schemas import ProductRead  # noqa: E402
from restaurant_pos.services.cart_store import CartStore  # noqa: E402


class FakeRedis:
    """
    In-memory stand-in for the few redis commands CartStore uses.
    """

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, ex=None, **kwargs):
        self.data[name] = value
        self.ttls[name] = ex
        return True

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed


class RecordingNotifications:
    def __init__(self):
        self.receipts = []
        self.low_stock = []

    def send_order_receipt(self, order_id, customer_id=None):
        self.receipts.append((order_id, customer_id))

    def send_low_stock_alert(self, product_id, name, stock_quantity):
        self.low_stock.append((product_id, name, stock_quantity))


@pytest.fixture()
def db():
    """
    Fresh schema on the shared in-memory engine for every test.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_redis():
    return FakeRedis()


@pytest.fixture()
def cart_store(fake_redis):
    return CartStore(client=fake_redis, ttl=900)


@pytest.fixture()
def notifications():
    return RecordingNotifications()


@pytest.fixture()
def client(db, cart_store):
    """
    TestClient sharing the test session and the in-memory cart store.
    """
    from restaurant_pos.api.routers.carts import get_cart_store
    from restaurant_pos.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cart_store] = lambda: cart_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_category(db):
    def _make(name="Burgers", icon="🍔"):
        category = CategoryModel(name=name, icon=icon)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture()
def make_product(db):
    def _make(name="Classic Burger", price="9.99", stock=20, **kwargs):
        product = ProductModel(name=name, price=Decimal(price), stock_quantity=stock, **kwargs)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_customer(db):
    def _make(name="Ada", phone="5550100", points=0, spent="0"):
        customer = CustomerModel(
            name=name,
            phone=phone,
            loyalty_points=points,
            total_spent=Decimal(spent),
        )
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return _make


@pytest.fixture()
def snapshot():
    """Plain product snapshots for domain tests that need no database."""

    def _make(id=1, name="Item", price="1.00", stock=10, **kwargs) -> ProductRead:
        return ProductRead(id=id, name=name, price=Decimal(price), stock_quantity=stock, **kwargs)

    return _make
