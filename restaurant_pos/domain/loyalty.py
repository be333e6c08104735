# restaurant_pos/domain/loyalty.py
from decimal import Decimal, ROUND_FLOOR

from restaurant_pos.domain.errors import StaleLoyaltyBalanceError
from restaurant_pos.domain.schemas import CustomerRead

POINT_VALUE = Decimal("0.01")
TOP_CUSTOMERS = 10


def points_value(points: int) -> Decimal:
    return points * POINT_VALUE


def points_for_total(total: Decimal) -> int:
    """One point per whole currency unit of the final order total."""
    if total <= 0:
        return 0
    return int(total.to_integral_value(rounding=ROUND_FLOOR))


def apply_to_customer(customer, settlement) -> CustomerRead:
    """
    Return the customer record as it looks after the settled order.

    Redeemed points come off the balance, earned points are added and the
    order total is added to lifetime spend. A redemption bigger than the
    current balance means the settlement was validated against an older
    balance, so it is rejected instead of clamped.
    """
    current = customer if isinstance(customer, CustomerRead) else CustomerRead.model_validate(customer)

    remaining = current.loyalty_points - settlement.points_redeemed
    if remaining < 0:
        raise StaleLoyaltyBalanceError(current.id, current.loyalty_points, settlement.points_redeemed)

    return current.model_copy(
        update={
            "loyalty_points": remaining + settlement.points_earned,
            "total_spent": current.total_spent + settlement.total,
        }
    )


def loyalty_summary(customers) -> dict:
    customers = [c if isinstance(c, CustomerRead) else CustomerRead.model_validate(c) for c in customers]

    total_points = sum(c.loyalty_points for c in customers)
    total_customers = len(customers)
    avg_points = Decimal(total_points) / total_customers if total_customers else Decimal("0")

    top = sorted(customers, key=lambda c: c.total_spent, reverse=True)[:TOP_CUSTOMERS]

    return {
        "total_customers": total_customers,
        "total_points": total_points,
        "avg_points": avg_points,
        "top_customers": top,
    }
