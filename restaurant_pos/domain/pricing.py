# restaurant_pos/domain/pricing.py
"""
Settlement calculator.

Every surface that shows money for a cart (cart view, checkout preview,
checkout itself) goes through ``settle``/``quote`` so the arithmetic lives in
one place. Amounts stay at full Decimal precision here; rounding to cents
happens when they are stored or displayed.
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from restaurant_pos.domain.errors import (
    EmptyCartError,
    InvalidDiscountError,
    InvalidRedemptionError,
    UnsupportedPaymentMethodError,
)
from restaurant_pos.domain.loyalty import points_for_total, points_value
from restaurant_pos.domain.schemas import PaymentMethod

TAX_RATE = Decimal("0.10")
ZERO = Decimal("0")


class Settlement(BaseModel):
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment_method: PaymentMethod
    points_earned: int
    points_redeemed: int

    model_config = ConfigDict(frozen=True)


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise UnsupportedPaymentMethodError(value) from None


def max_redeemable(customer) -> int:
    if customer is None:
        return 0
    return customer.loyalty_points or 0


def validate_redemption(points_to_redeem, customer) -> int:
    maximum = max_redeemable(customer)
    if (
        isinstance(points_to_redeem, bool)
        or not isinstance(points_to_redeem, int)
        or points_to_redeem < 0
        or points_to_redeem > maximum
    ):
        raise InvalidRedemptionError(points_to_redeem, maximum)
    return points_to_redeem


def quote(cart) -> dict:
    """Subtotal/tax/total for a cart with no discount applied, empty carts allowed."""
    subtotal = cart.subtotal()
    tax = subtotal * TAX_RATE
    return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}


def settle(
    cart,
    discount_amount=ZERO,
    points_to_redeem: int = 0,
    payment_method=PaymentMethod.CASH,
    customer=None,
) -> Settlement:
    if cart.is_empty():
        raise EmptyCartError()

    method = _payment_method(payment_method)

    discount_amount = _as_decimal(discount_amount)
    if discount_amount < ZERO:
        raise InvalidDiscountError(discount_amount)

    subtotal = cart.subtotal()
    tax = subtotal * TAX_RATE

    points = validate_redemption(points_to_redeem, customer)
    points_discount = points_value(points)

    # excess discount is absorbed, never refunded
    total = max(ZERO, subtotal + tax - discount_amount - points_discount)

    points_earned = points_for_total(total) if customer is not None else 0

    return Settlement(
        subtotal=subtotal,
        tax=tax,
        discount=discount_amount + points_discount,
        total=total,
        payment_method=method,
        points_earned=points_earned,
        points_redeemed=points,
    )
