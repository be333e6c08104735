# restaurant_pos/domain/stock.py
"""
Stock availability gate and low-stock helpers.

The gate only looks at the product snapshot it is given; it never changes
stock. Stock changes go through ProductRepo (manual edits and the
check-and-decrement done at checkout).
"""

DEFAULT_LOW_STOCK_THRESHOLD = 10

IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"


def can_set_quantity(product, desired_qty: int) -> bool:
    return desired_qty <= product.stock_quantity


def low_stock_threshold(product) -> int:
    if product.low_stock_threshold is None:
        return DEFAULT_LOW_STOCK_THRESHOLD
    return product.low_stock_threshold


def is_out_of_stock(product) -> bool:
    return product.stock_quantity <= 0


def is_low_stock(product) -> bool:
    # flags for restocking only, a low product can still be sold
    return product.stock_quantity <= low_stock_threshold(product)


def stock_status(product) -> str:
    if is_out_of_stock(product):
        return OUT_OF_STOCK
    if is_low_stock(product):
        return LOW_STOCK
    return IN_STOCK
