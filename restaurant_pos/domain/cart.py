# restaurant_pos/domain/cart.py
import uuid
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from restaurant_pos.domain.errors import (
    CartLineNotFoundError,
    ProductUnavailableError,
    StockLimitExceeded,
)
from restaurant_pos.domain.schemas import ProductRead
from restaurant_pos.domain.stock import can_set_quantity


class CartLine(BaseModel):
    product: ProductRead
    quantity: int = Field(..., gt=0)

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class Cart(BaseModel):
    """
    Terminal cart: at most one line per product, kept in insertion order.

    Every mutation is validated before it is applied, so a rejected call
    leaves the cart exactly as it was.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    lines: List[CartLine] = Field(default_factory=list)
    customer_id: int | None = None

    def get_line(self, product_id: int) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def is_empty(self) -> bool:
        return not self.lines

    def add_item(self, product, requested_qty: int = 1) -> CartLine:
        if requested_qty <= 0:
            raise ValueError("Quantity must be greater than 0")

        snapshot = product if isinstance(product, ProductRead) else ProductRead.model_validate(product)
        if not snapshot.is_available:
            raise ProductUnavailableError(snapshot.id)

        existing = self.get_line(snapshot.id)
        current = existing.quantity if existing else 0
        desired = current + requested_qty

        if not can_set_quantity(snapshot, desired):
            raise StockLimitExceeded(snapshot.id, snapshot.stock_quantity, desired)

        if existing:
            existing.product = snapshot
            existing.quantity = desired
            return existing

        line = CartLine(product=snapshot, quantity=desired)
        self.lines.append(line)
        return line

    def set_quantity(self, product_id: int, qty: int) -> CartLine | None:
        if qty <= 0:
            self.remove_item(product_id)
            return None

        line = self.get_line(product_id)
        if not line:
            raise CartLineNotFoundError(product_id)

        if not line.product.is_available:
            raise ProductUnavailableError(product_id)

        if not can_set_quantity(line.product, qty):
            raise StockLimitExceeded(product_id, line.product.stock_quantity, qty)

        line.quantity = qty
        return line

    def refresh_product(self, product) -> None:
        """Replace a line's product snapshot with fresher data, if the line exists."""
        line = self.get_line(product.id)
        if line:
            line.product = product if isinstance(product, ProductRead) else ProductRead.model_validate(product)

    def remove_item(self, product_id: int) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []

    def select_customer(self, customer_id: int) -> None:
        self.customer_id = customer_id

    def deselect_customer(self) -> None:
        self.customer_id = None

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))
