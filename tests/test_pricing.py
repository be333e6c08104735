from decimal import Decimal

import pytest
from pydantic import ValidationError

from restaurant_pos.domain.cart import Cart
from restaurant_pos.domain.errors import (
    EmptyCartError,
    InvalidDiscountError,
    InvalidRedemptionError,
    UnsupportedPaymentMethodError,
)
from restaurant_pos.domain.pricing import TAX_RATE, quote, settle
from restaurant_pos.domain.schemas import CustomerRead, PaymentMethod


def _customer(points=0):
    return CustomerRead(id=1, name="Ada", loyalty_points=points)


@pytest.fixture()
def lunch(snapshot):
    cart = Cart()
    cart.add_item(snapshot(id=1, price="9.99", stock=10), 2)
    cart.add_item(snapshot(id=2, price="3.50", stock=10), 1)
    return cart


@pytest.fixture()
def ten_dollar_cart(snapshot):
    cart = Cart()
    cart.add_item(snapshot(id=1, price="10.00"))
    return cart


def test_reference_scenario(lunch):
    s = settle(lunch, 0, 0, "cash", _customer())

    assert s.subtotal == Decimal("23.48")
    assert s.tax == Decimal("2.348")
    assert s.total == Decimal("25.828")
    assert s.points_earned == 25
    assert s.discount == Decimal("0")
    assert s.payment_method is PaymentMethod.CASH


def test_tax_is_ten_percent_of_subtotal(lunch):
    s = settle(lunch)
    assert s.tax == s.subtotal * TAX_RATE


def test_total_is_floored_at_zero(ten_dollar_cart):
    s = settle(ten_dollar_cart, Decimal("50.00"), 0, "card", _customer())

    assert s.subtotal == Decimal("10.00")
    assert s.tax == Decimal("1.00")
    assert s.total == Decimal("0")
    assert s.points_earned == 0
    assert s.discount == Decimal("50.00")


def test_no_points_earned_without_customer(lunch):
    assert settle(lunch).points_earned == 0


def test_redeem_exact_balance(lunch):
    s = settle(lunch, 0, 40, "cash", _customer(points=40))

    assert s.discount == Decimal("0.40")
    assert s.points_redeemed == 40
    assert s.total == Decimal("25.428")
    assert s.points_earned == 25


def test_redeem_more_than_balance(lunch):
    with pytest.raises(InvalidRedemptionError) as exc:
        settle(lunch, 0, 41, "cash", _customer(points=40))
    assert exc.value.requested == 41
    assert exc.value.maximum == 40


@pytest.mark.parametrize("points", [-1, 1.5, True])
def test_redeem_rejects_bad_values(lunch, points):
    with pytest.raises(InvalidRedemptionError):
        settle(lunch, 0, points, "cash", _customer(points=100))


def test_redeem_without_customer(lunch):
    with pytest.raises(InvalidRedemptionError) as exc:
        settle(lunch, 0, 1)
    assert exc.value.maximum == 0


def test_discount_and_points_are_combined(lunch):
    s = settle(lunch, Decimal("5"), 100, "card", _customer(points=150))

    assert s.discount == Decimal("6.00")
    assert s.total == Decimal("19.828")
    assert s.points_earned == 19


def test_empty_cart_never_settles():
    with pytest.raises(EmptyCartError):
        settle(Cart(), 0, 0, "cash", _customer(points=10))


def test_negative_discount(lunch):
    with pytest.raises(InvalidDiscountError):
        settle(lunch, Decimal("-1"))


def test_unknown_payment_method(lunch):
    with pytest.raises(UnsupportedPaymentMethodError):
        settle(lunch, 0, 0, "bitcoin")


def test_settle_is_pure(lunch):
    customer = _customer(points=30)
    first = settle(lunch, Decimal("1.25"), 30, "card", customer)
    second = settle(lunch, Decimal("1.25"), 30, "card", customer)

    assert first == second
    assert customer.loyalty_points == 30
    assert lunch.subtotal() == Decimal("23.48")


def test_settlement_is_immutable(lunch):
    s = settle(lunch)
    with pytest.raises(ValidationError):
        s.total = Decimal("0")


def test_quote_allows_empty_cart(lunch):
    assert quote(Cart()) == {"subtotal": Decimal("0"), "tax": Decimal("0"), "total": Decimal("0")}
    assert quote(lunch)["total"] == Decimal("25.828")
