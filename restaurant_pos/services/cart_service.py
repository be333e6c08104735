from typing import Dict, Any
from sqlalchemy.orm import Session

from restaurant_pos.domain.cart import Cart
from restaurant_pos.domain.errors import CustomerNotFoundError, ProductNotFoundError
from restaurant_pos.domain.pricing import quote, settle
from restaurant_pos.domain.schemas import ProductRead
from restaurant_pos.repos.customer_repo import CustomerRepo
from restaurant_pos.repos.product_repo import ProductRepo
from restaurant_pos.services.cart_store import CartStore
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Terminal use cases for the cart domain
    commands (create, add, set, remove, clear, customer) change state
    queries (get, quote) only read
    A command either saves the changed cart or raises and saves nothing.
    """

    def __init__(self, db: Session, store: CartStore):
        self.products = ProductRepo(db)
        self.customers = CustomerRepo(db)
        self.store = store

    @staticmethod
    def to_view(cart: Cart) -> Dict[str, Any]:
        totals = quote(cart)
        return {
            "cart_id": cart.id,
            "customer_id": cart.customer_id,
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.product.name,
                    "unit_price": line.product.price,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in cart.lines
            ],
            **totals,
        }

    def _product(self, product_id: int) -> ProductRead:
        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return ProductRead.model_validate(product)

    #query
    def load(self, cart_id: str) -> Cart:
        return self.store.load(cart_id)

    def get_cart(self, cart_id: str) -> Dict[str, Any]:
        return self.to_view(self.store.load(cart_id))

    def preview(self, cart_id: str, discount, points_redeemed: int, payment_method):
        """Price the cart as checkout would, without persisting anything."""
        cart = self.store.load(cart_id)
        customer = self.customers.get_customer(cart.customer_id) if cart.customer_id else None
        return settle(cart, discount, points_redeemed, payment_method, customer)

    #commands
    def create_cart(self) -> Dict[str, Any]:
        cart = self.store.save(Cart())
        logger.info(f"Created cart {cart.id}")
        return self.to_view(cart)

    def add_item(self, cart_id: str, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        cart = self.store.load(cart_id)
        product = self._product(product_id)

        cart.add_item(product, quantity)
        self.store.save(cart)

        logger.info(f"Added {quantity} x product {product_id} to cart {cart_id}")
        return self.to_view(cart)

    def set_quantity(self, cart_id: str, product_id: int, quantity: int) -> Dict[str, Any]:
        cart = self.store.load(cart_id)

        if quantity > 0:
            # validate against current stock and availability, not the snapshot taken when added
            product = self.products.get_product(product_id)
            if product:
                cart.refresh_product(product)

        cart.set_quantity(product_id, quantity)
        self.store.save(cart)

        logger.info(f"Cart {cart_id}: product {product_id} quantity set to {max(quantity, 0)}")
        return self.to_view(cart)

    def remove_item(self, cart_id: str, product_id: int) -> Dict[str, Any]:
        cart = self.store.load(cart_id)
        cart.remove_item(product_id)
        self.store.save(cart)
        return self.to_view(cart)

    def clear_items(self, cart_id: str) -> Dict[str, Any]:
        cart = self.store.load(cart_id)
        cart.clear()
        self.store.save(cart)
        logger.info(f"Cart {cart_id} cleared")
        return self.to_view(cart)

    def select_customer(self, cart_id: str, customer_id: int) -> Dict[str, Any]:
        cart = self.store.load(cart_id)
        if not self.customers.get_customer(customer_id):
            raise CustomerNotFoundError(customer_id)

        cart.select_customer(customer_id)
        self.store.save(cart)
        return self.to_view(cart)

    def deselect_customer(self, cart_id: str) -> Dict[str, Any]:
        cart = self.store.load(cart_id)
        cart.deselect_customer()
        self.store.save(cart)
        return self.to_view(cart)

    def reset(self, cart: Cart) -> Dict[str, Any]:
        """After a successful checkout: empty the cart and forget the customer."""
        cart.clear()
        cart.deselect_customer()
        self.store.save(cart)
        return self.to_view(cart)

    def discard(self, cart_id: str) -> bool:
        return self.store.delete(cart_id)
