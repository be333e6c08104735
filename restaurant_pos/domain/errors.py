"""Domain exceptions for the POS service."""


class PosError(Exception):
    """Base exception for all POS domain errors."""

    pass


class EmptyCartError(PosError):
    """Raised when a checkout is attempted on a cart without lines."""

    def __init__(self):
        super().__init__("Cannot settle an empty cart")


class StockLimitExceeded(PosError):
    """Raised when a cart quantity would exceed the product's stock."""

    def __init__(self, product_id: int, available: int, requested: int | None = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(f"Stock limit reached for product {product_id}: only {available} available")


class InvalidRedemptionError(PosError):
    """Raised when the requested loyalty redemption is not allowed."""

    def __init__(self, requested, maximum: int):
        self.requested = requested
        self.maximum = maximum
        super().__init__(f"Cannot redeem {requested} points (max {maximum})")


class StaleLoyaltyBalanceError(PosError):
    """Raised when applying a settlement would drive a loyalty balance negative."""

    def __init__(self, customer_id, balance: int, redeemed: int):
        self.customer_id = customer_id
        self.balance = balance
        self.redeemed = redeemed
        super().__init__(
            f"Customer {customer_id} has {balance} points, cannot redeem {redeemed}; "
            "balance changed since the redemption was validated"
        )


class IncompleteOrderError(PosError):
    """Raised when an order may have been left half-written."""

    def __init__(self, order_id: int | None, reason: str | None = None):
        self.order_id = order_id
        self.reason = reason
        msg = f"Order {order_id} may be incomplete and needs manual reconciliation"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class InvalidDiscountError(PosError):
    """Raised when a manual discount is negative."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Discount must not be negative: {amount}")


class UnsupportedPaymentMethodError(PosError):
    def __init__(self, method):
        self.method = method
        super().__init__(f"Unsupported payment method: {method}")


class ProductUnavailableError(PosError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not available for sale")


class NotFoundError(PosError):
    """Base for lookups that found nothing."""

    entity = "Entity"

    def __init__(self, key):
        self.key = key
        super().__init__(f"{self.entity} not found: {key}")


class CartNotFoundError(NotFoundError):
    entity = "Cart"


class CartLineNotFoundError(NotFoundError):
    entity = "Cart line for product"


class ProductNotFoundError(NotFoundError):
    entity = "Product"


class CategoryNotFoundError(NotFoundError):
    entity = "Category"


class CustomerNotFoundError(NotFoundError):
    entity = "Customer"


class OrderNotFoundError(NotFoundError):
    entity = "Order"
