from decimal import Decimal

import pytest
import redis
from kombu.exceptions import OperationalError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from restaurant_pos.data.models import CustomerModel, OrderItemModel, OrderModel, ProductModel
from restaurant_pos.domain.cart import Cart
from restaurant_pos.domain.errors import (
    EmptyCartError,
    IncompleteOrderError,
    InvalidRedemptionError,
    StaleLoyaltyBalanceError,
    StockLimitExceeded,
)
from restaurant_pos.domain.schemas import ProductRead
from restaurant_pos.repos.order_repo import OrderRepo
from restaurant_pos.services import order_service
from restaurant_pos.services.cart_service import CartService
from restaurant_pos.services.notification_service import NotificationService
from restaurant_pos.services.order_service import OrderService


def _fresh(db, model, pk):
    db.expire_all()
    return db.get(model, pk)


def _cart_with(*lines, customer_id=None):
    cart = Cart(customer_id=customer_id)
    for product, qty in lines:
        cart.add_item(ProductRead.model_validate(product), qty)
    return cart


@pytest.fixture()
def lunch(make_product):
    return (
        make_product("Classic Burger", price="9.99", stock=12),
        make_product("Lemonade", price="3.50", stock=30),
    )


# -- HTTP checkout ---------------------------------------------------------

def test_checkout_end_to_end(client, db, cart_store, lunch, make_customer):
    burger, lemonade = lunch
    customer = make_customer(points=40, spent="10.00")
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id, "quantity": 2})
    client.post(f"/carts/{cart_id}/items", json={"product_id": lemonade.id})
    client.put(f"/carts/{cart_id}/customer", json={"customer_id": customer.id})

    r = client.post(
        f"/carts/{cart_id}/checkout",
        json={"discount": "1.00", "points_redeemed": 40, "payment_method": "card"},
    )

    assert r.status_code == 201, r.text
    order = r.json()["order"]
    # 23.48 + 2.348 - 1.00 - 0.40
    assert Decimal(order["subtotal"]) == Decimal("23.48")
    assert Decimal(order["tax"]) == Decimal("2.35")
    assert Decimal(order["discount"]) == Decimal("1.40")
    assert Decimal(order["total"]) == Decimal("24.43")
    assert order["points_earned"] == 24
    assert order["points_redeemed"] == 40
    assert order["payment_method"] == "card"
    assert order["customer_id"] == customer.id
    assert [(i["product_name"], i["quantity"], Decimal(i["total_price"])) for i in order["items"]] == [
        ("Classic Burger", 2, Decimal("19.98")),
        ("Lemonade", 1, Decimal("3.50")),
    ]

    assert r.json()["customer"]["loyalty_points"] == 24
    stored = _fresh(db, CustomerModel, customer.id)
    assert stored.loyalty_points == 24
    assert stored.total_spent == Decimal("34.43")
    assert Decimal(r.json()["customer"]["total_spent"]) == stored.total_spent

    assert _fresh(db, ProductModel, burger.id).stock_quantity == 10
    assert _fresh(db, ProductModel, lemonade.id).stock_quantity == 29

    cart = client.get(f"/carts/{cart_id}").json()
    assert cart["items"] == []
    assert cart["customer_id"] is None

    fetched = client.get(f"/orders/{order['id']}").json()
    assert fetched["total"] == order["total"]
    assert fetched["items"] == order["items"]


def test_checkout_reference_scenario_without_discount(client, lunch, make_customer):
    burger, lemonade = lunch
    customer = make_customer()
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id, "quantity": 2})
    client.post(f"/carts/{cart_id}/items", json={"product_id": lemonade.id})
    client.put(f"/carts/{cart_id}/customer", json={"customer_id": customer.id})

    order = client.post(f"/carts/{cart_id}/checkout", json={}).json()["order"]

    assert Decimal(order["total"]) == Decimal("25.83")
    assert order["points_earned"] == 25
    assert order["payment_method"] == "cash"


def test_checkout_survives_broker_and_cart_store_outage(client, db, lunch, make_customer, monkeypatch):
    burger, _ = lunch
    customer = make_customer(spent="10.00")
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id, "quantity": 2})
    client.put(f"/carts/{cart_id}/customer", json={"customer_id": customer.id})

    def broker_down(*args, **kwargs):
        raise OperationalError("broker unreachable")

    def store_down(self, cart):
        raise redis.ConnectionError("connection reset")

    monkeypatch.setattr(NotificationService, "send_order_receipt", staticmethod(broker_down))
    monkeypatch.setattr(NotificationService, "send_low_stock_alert", staticmethod(broker_down))
    monkeypatch.setattr(CartService, "reset", store_down)

    r = client.post(f"/carts/{cart_id}/checkout", json={})

    assert r.status_code == 201, r.text
    assert db.query(OrderModel).count() == 1
    # 19.98 + 1.998, stored rounded
    assert Decimal(r.json()["customer"]["total_spent"]) == Decimal("31.98")


def test_checkout_without_customer_earns_nothing(client, lunch):
    burger, _ = lunch
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id})

    r = client.post(f"/carts/{cart_id}/checkout", json={})

    assert r.status_code == 201
    assert r.json()["order"]["points_earned"] == 0
    assert r.json()["customer"] is None


def test_rejected_checkout_keeps_cart(client, db, lunch, make_customer):
    burger, _ = lunch
    customer = make_customer(points=10)
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id, "quantity": 2})
    client.put(f"/carts/{cart_id}/customer", json={"customer_id": customer.id})

    r = client.post(f"/carts/{cart_id}/checkout", json={"points_redeemed": 11})

    assert r.status_code == 400
    cart = client.get(f"/carts/{cart_id}").json()
    assert cart["items"][0]["quantity"] == 2
    assert cart["customer_id"] == customer.id
    assert db.query(OrderModel).count() == 0


def test_checkout_empty_cart(client):
    cart_id = client.post("/carts/").json()["cart_id"]
    assert client.post(f"/carts/{cart_id}/checkout", json={}).status_code == 400


def test_checkout_rechecks_stock(client, db, lunch):
    burger, _ = lunch
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id, "quantity": 5})
    # another till sold most of it meanwhile
    client.patch(f"/products/{burger.id}/stock", json={"stock_quantity": 4})

    r = client.post(f"/carts/{cart_id}/checkout", json={})

    assert r.status_code == 409
    assert r.json()["detail"]["available"] == 4
    assert db.query(OrderModel).count() == 0
    assert db.query(OrderItemModel).count() == 0
    assert _fresh(db, ProductModel, burger.id).stock_quantity == 4
    assert client.get(f"/carts/{cart_id}").json()["items"][0]["quantity"] == 5


def test_order_lines_are_snapshots(client, db, lunch):
    burger, _ = lunch
    cart_id = client.post("/carts/").json()["cart_id"]
    client.post(f"/carts/{cart_id}/items", json={"product_id": burger.id})
    order_id = client.post(f"/carts/{cart_id}/checkout", json={}).json()["order"]["id"]

    product = _fresh(db, ProductModel, burger.id)
    product.name = "Renamed Burger"
    product.price = Decimal("15.00")
    db.commit()

    item = client.get(f"/orders/{order_id}").json()["items"][0]
    assert item["product_name"] == "Classic Burger"
    assert Decimal(item["unit_price"]) == Decimal("9.99")


def test_unknown_order(client):
    assert client.get("/orders/123").status_code == 404


# -- service level ---------------------------------------------------------

def test_place_order_sends_notifications(db, notifications, lunch):
    burger, _ = lunch
    svc = OrderService(db, notification_service=notifications)

    result = svc.place_order(_cart_with((burger, 3)), 0, 0, "cash")

    order_id = result["order"].id
    assert notifications.receipts == [(order_id, None)]
    # 12 - 3 = 9, at or below the default threshold of 10
    assert notifications.low_stock == [(burger.id, "Classic Burger", 9)]


def test_failed_notification_does_not_undo_order(db, lunch):
    burger, _ = lunch

    class BrokenNotifications:
        def send_order_receipt(self, order_id, customer_id=None):
            raise OperationalError("broker unreachable")

        def send_low_stock_alert(self, product_id, name, stock_quantity):
            raise OperationalError("broker unreachable")

    result = OrderService(db, notification_service=BrokenNotifications()).place_order(
        _cart_with((burger, 3)), 0, 0, "cash"
    )

    assert db.query(OrderModel).count() == 1
    assert result["order"].total == Decimal("32.97")
    assert _fresh(db, ProductModel, burger.id).stock_quantity == 9


def test_place_order_without_stock_decrement(db, notifications, lunch):
    burger, _ = lunch
    svc = OrderService(db, notification_service=notifications, decrement_stock=False)

    svc.place_order(_cart_with((burger, 3)), 0, 0, "cash")

    assert _fresh(db, ProductModel, burger.id).stock_quantity == 12
    assert notifications.low_stock == []


def test_failed_line_insert_leaves_no_order(db, notifications, lunch, make_customer, monkeypatch):
    burger, lemonade = lunch
    customer = make_customer(points=5)

    def broken(self, order_id, lines):
        raise SQLAlchemyError("order_items unavailable")

    monkeypatch.setattr(OrderRepo, "insert_order_lines", broken)
    svc = OrderService(db, notification_service=notifications)

    with pytest.raises(SQLAlchemyError):
        svc.place_order(_cart_with((burger, 1), (lemonade, 1), customer_id=customer.id), 0, 5, "cash")

    assert db.query(OrderModel).count() == 0
    assert _fresh(db, CustomerModel, customer.id).loyalty_points == 5
    assert _fresh(db, ProductModel, burger.id).stock_quantity == 12
    assert notifications.receipts == []


def test_failed_rollback_raises_incomplete_order(db, notifications, lunch, monkeypatch):
    burger, _ = lunch

    def broken_lines(self, order_id, lines):
        raise SQLAlchemyError("order_items unavailable")

    def broken_rollback():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(OrderRepo, "insert_order_lines", broken_lines)
    monkeypatch.setattr(db, "rollback", broken_rollback)
    svc = OrderService(db, notification_service=notifications)

    with pytest.raises(IncompleteOrderError) as exc:
        svc.place_order(_cart_with((burger, 1)), 0, 0, "cash")

    assert exc.value.order_id is not None


def test_stale_loyalty_balance_rolls_back(db, notifications, lunch, make_customer, monkeypatch):
    burger, _ = lunch
    customer = make_customer(points=50)
    real_settle = order_service.settle

    def settle_then_spend_elsewhere(*args, **kwargs):
        settlement = real_settle(*args, **kwargs)
        # a second till redeems the same points before this order is written
        db.execute(update(CustomerModel).where(CustomerModel.id == customer.id).values(loyalty_points=10))
        return settlement

    monkeypatch.setattr(order_service, "settle", settle_then_spend_elsewhere)
    svc = OrderService(db, notification_service=notifications)

    with pytest.raises(StaleLoyaltyBalanceError) as exc:
        svc.place_order(_cart_with((burger, 1), customer_id=customer.id), 0, 50, "cash")

    assert exc.value.balance == 10
    assert db.query(OrderModel).count() == 0
    assert _fresh(db, ProductModel, burger.id).stock_quantity == 12


def test_place_order_validation_errors(db, notifications, lunch, make_customer):
    burger, _ = lunch
    customer = make_customer(points=3)
    svc = OrderService(db, notification_service=notifications)

    with pytest.raises(EmptyCartError):
        svc.place_order(Cart(), 0, 0, "cash")
    with pytest.raises(InvalidRedemptionError):
        svc.place_order(_cart_with((burger, 1), customer_id=customer.id), 0, 4, "cash")
    assert db.query(OrderModel).count() == 0


def test_stock_race_between_lines(db, notifications, lunch):
    burger, lemonade = lunch
    cart = _cart_with((burger, 2), (lemonade, 5))
    db.execute(update(ProductModel).where(ProductModel.id == lemonade.id).values(stock_quantity=1))
    db.commit()

    with pytest.raises(StockLimitExceeded) as exc:
        OrderService(db, notification_service=notifications).place_order(cart, 0, 0, "cash")

    assert exc.value.product_id == lemonade.id
    assert _fresh(db, ProductModel, burger.id).stock_quantity == 12
