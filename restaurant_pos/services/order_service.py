# restaurant_pos/services/order_service.py
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from restaurant_pos.data.models.order import OrderModel
from restaurant_pos.data.models.order_item import OrderItemModel
from restaurant_pos.domain.cart import Cart
from restaurant_pos.domain.errors import (
    CustomerNotFoundError,
    IncompleteOrderError,
    OrderNotFoundError,
    StaleLoyaltyBalanceError,
    StockLimitExceeded,
)
from restaurant_pos.domain.loyalty import apply_to_customer
from restaurant_pos.domain.pricing import Settlement, settle
from restaurant_pos.domain.schemas import CustomerRead, OrderDetailOut, OrderLineOut, OrderOut, money
from restaurant_pos.domain.stock import is_low_stock
from restaurant_pos.repos.customer_repo import CustomerRepo
from restaurant_pos.repos.order_repo import OrderRepo
from restaurant_pos.repos.product_repo import ProductRepo
from restaurant_pos.services.notification_service import NotificationService
from restaurant_pos.utils.settings import DECREMENT_STOCK_ON_SALE
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Checkout and order queries.

    A checkout is one database transaction: order header, order lines,
    stock decrement and the customer's loyalty update are committed
    together or not at all.
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService | None = None,
        decrement_stock: bool = DECREMENT_STOCK_ON_SALE,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.customers = CustomerRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.decrement_stock = decrement_stock

    def place_order(self, cart: Cart, discount, points_redeemed: int, payment_method):
        """
        Use Case: checkout of a terminal cart.

        1. Loads the attached customer (if any) and settles the cart
        2. Writes header + lines, decrements stock, applies loyalty
        3. Commits once, rolls everything back on any failure
        4. Sends the receipt / low stock notifications (async)
        """
        customer = None
        if cart.customer_id is not None:
            row = self.customers.get_customer(cart.customer_id)
            if not row:
                raise CustomerNotFoundError(cart.customer_id)
            customer = CustomerRead.model_validate(row)

        settlement = settle(cart, discount, points_redeemed, payment_method, customer)
        if customer:
            apply_to_customer(customer, settlement)

        order, low_stock = self._persist(cart, settlement, customer)

        logger.info(
            f"Order {order.id} placed from cart {cart.id}: total {money(settlement.total)}, "
            f"{len(cart.lines)} lines, customer {cart.customer_id}"
        )

        # the order is committed, a notification failure must not fail the checkout
        try:
            self.notification_service.send_order_receipt(order.id, cart.customer_id)
        except Exception as e:
            logger.warning(f"Failed to send receipt for order {order.id}: {e}")

        for product in low_stock:
            try:
                self.notification_service.send_low_stock_alert(product.id, product.name, product.stock_quantity)
            except Exception as e:
                logger.warning(f"Failed to send low stock alert for product {product.id}: {e}")

        return {
            "order": self.get_order(order.id),
            "customer": self._stored_customer(customer.id) if customer else None,
        }

    def _stored_customer(self, customer_id: int) -> CustomerRead:
        """Customer as committed, the loyalty update bypassed the identity map."""
        row = self.customers.get_customer(customer_id)
        self.db.refresh(row)
        return CustomerRead.model_validate(row)

    def _persist(self, cart: Cart, settlement: Settlement, customer: CustomerRead | None):
        order = None
        try:
            order = self.repo.insert_order(
                OrderModel(
                    customer_id=customer.id if customer else None,
                    subtotal=money(settlement.subtotal),
                    discount=money(settlement.discount),
                    tax=money(settlement.tax),
                    total=money(settlement.total),
                    payment_method=settlement.payment_method.value,
                    points_earned=settlement.points_earned,
                    points_redeemed=settlement.points_redeemed,
                    status="completed",
                )
            )

            self.repo.insert_order_lines(
                order.id,
                [
                    OrderItemModel(
                        product_id=line.product_id,
                        product_name=line.product.name,
                        quantity=line.quantity,
                        unit_price=money(line.product.price),
                        total_price=money(line.line_total),
                    )
                    for line in cart.lines
                ],
            )

            low_stock = self._decrement_stock(cart) if self.decrement_stock else []

            if customer:
                rowcount = self.customers.apply_loyalty(
                    customer.id,
                    redeemed=settlement.points_redeemed,
                    earned=settlement.points_earned,
                    spent=money(settlement.total),
                )
                if rowcount == 0:
                    current = self.customers.get_customer(customer.id)
                    balance = 0
                    if current is not None:
                        self.db.refresh(current)
                        balance = current.loyalty_points
                    raise StaleLoyaltyBalanceError(customer.id, balance, settlement.points_redeemed)

            self.db.commit()
            return order, low_stock

        except Exception as e:
            order_id = order.id if order is not None else None
            try:
                self.db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.critical(
                    f"ALERT: rollback failed for order {order_id}, manual reconciliation needed: {rollback_error}"
                )
                raise IncompleteOrderError(order_id, str(rollback_error)) from e
            logger.error(f"Checkout of cart {cart.id} rolled back: {e}")
            raise

    def _decrement_stock(self, cart: Cart):
        """Re-check stock at write time; the cart only saw a snapshot."""
        low_stock = []
        for line in cart.lines:
            rowcount = self.products.decrement_stock(line.product_id, line.quantity)
            product = self.products.get_product(line.product_id)
            if product is not None:
                self.db.refresh(product)
            if rowcount == 0:
                available = product.stock_quantity if product is not None else 0
                raise StockLimitExceeded(line.product_id, available, line.quantity)
            if is_low_stock(product):
                low_stock.append(product)
        return low_stock

    def get_order(self, order_id: int) -> OrderDetailOut:
        """
        Use Case: order with its line snapshots (Query).
        """
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        lines = self.repo.get_order_lines(order_id)
        return OrderDetailOut(
            **OrderOut.model_validate(order).model_dump(),
            items=[OrderLineOut.model_validate(line) for line in lines],
        )

    def list_orders(self, start: datetime | None = None, end: datetime | None = None) -> list[OrderOut]:
        return [OrderOut.model_validate(o) for o in self.repo.list_orders(start, end)]
