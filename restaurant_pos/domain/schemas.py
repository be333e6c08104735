# restaurant_pos/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List
from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, date
from enum import Enum

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Round a currency amount to cents, half up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


# -- catalog --------------------------------------------------------------

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str | None = Field(None, max_length=16)


class CategoryRead(BaseModel):
    id: int
    name: str
    icon: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for adding a product to the menu."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    category_id: int | None = Field(None, gt=0)
    low_stock_threshold: int | None = Field(None, ge=0)
    image_url: str | None = None
    is_available: bool = True


class ProductRead(BaseModel):
    """Product snapshot, also the product reference stored on cart lines."""

    id: int
    name: str
    price: Decimal
    stock_quantity: int
    category_id: int | None = None
    low_stock_threshold: int | None = None
    image_url: str | None = None
    is_available: bool = True

    model_config = ConfigDict(from_attributes=True)


class ProductOut(ProductRead):
    stock_status: str


class StockUpdate(BaseModel):
    stock_quantity: int = Field(..., ge=0, description="New stock quantity (>= 0)")


# -- customers ------------------------------------------------------------

class CustomerCreate(BaseModel):
    """Schema for registering a loyalty customer."""

    name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=32)
    email: str | None = Field(None, max_length=254)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class CustomerRead(BaseModel):
    id: int
    name: str
    phone: str | None = None
    email: str | None = None
    loyalty_points: int = 0
    total_spent: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("loyalty_points", mode="before")
    @classmethod
    def _points_default(cls, v):
        return 0 if v is None else v

    @field_validator("total_spent", mode="before")
    @classmethod
    def _spent_default(cls, v):
        return Decimal("0") if v is None else v


# -- carts ----------------------------------------------------------------

class ItemIn(BaseModel):
    """Schema for adding a product to a cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class QuantityIn(BaseModel):
    """Schema for replacing a line quantity; 0 or less removes the line."""

    quantity: int


class CustomerSelectIn(BaseModel):
    customer_id: int = Field(..., gt=0)


class CheckoutIn(BaseModel):
    """Schema for confirming (or previewing) a checkout."""

    discount: Decimal = Field(Decimal("0"), ge=0)
    points_redeemed: int = Field(0, ge=0)
    payment_method: PaymentMethod = PaymentMethod.CASH


class CartLineOut(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class CartOut(BaseModel):
    """Schema for a terminal cart (response)."""

    cart_id: str
    customer_id: int | None = None
    items: List[CartLineOut]
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    @field_validator("subtotal", "tax", "total")
    @classmethod
    def _round(cls, v: Decimal) -> Decimal:
        return money(v)


class SettlementOut(BaseModel):
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment_method: PaymentMethod
    points_earned: int
    points_redeemed: int

    model_config = ConfigDict(from_attributes=True)

    @field_validator("subtotal", "tax", "discount", "total")
    @classmethod
    def _round(cls, v: Decimal) -> Decimal:
        return money(v)


# -- orders ---------------------------------------------------------------

class OrderLineOut(BaseModel):
    id: int
    product_id: int | None = None
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order header (response)."""

    id: int
    customer_id: int | None = None
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    points_earned: int
    points_redeemed: int
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(OrderOut):
    items: List[OrderLineOut]


class CheckoutOut(BaseModel):
    order: OrderDetailOut
    customer: CustomerRead | None = None


# -- reports --------------------------------------------------------------

class DailySales(BaseModel):
    day: date
    revenue: Decimal
    orders: int


class PaymentMethodSales(BaseModel):
    name: str
    value: Decimal


class SalesReportOut(BaseModel):
    start: datetime
    end: datetime
    total_revenue: Decimal
    total_orders: int
    avg_order_value: Decimal
    total_tax: Decimal
    daily: List[DailySales]
    by_payment_method: List[PaymentMethodSales]
    recent_orders: List[OrderOut]


class LoyaltyReportOut(BaseModel):
    total_customers: int
    total_points: int
    avg_points: Decimal
    top_customers: List[CustomerRead]
