#restaurant_pos/api/routers/carts.py
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from restaurant_pos.api.errors import http_error
from restaurant_pos.data.database import get_db
from restaurant_pos.domain.errors import PosError
from restaurant_pos.domain.schemas import (
    CartOut,
    CheckoutIn,
    CheckoutOut,
    CustomerSelectIn,
    ItemIn,
    QuantityIn,
    SettlementOut,
)
from restaurant_pos.services.cart_service import CartService
from restaurant_pos.services.cart_store import CartStore
from restaurant_pos.services.order_service import OrderService
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/carts", tags=["carts"])


@lru_cache(maxsize=1)
def get_cart_store() -> CartStore:
    return CartStore()


def get_service(db: Session = Depends(get_db), store: CartStore = Depends(get_cart_store)):
    return CartService(db=db, store=store)


@router.post("/", response_model=CartOut, status_code=201)
def create_cart(svc: CartService = Depends(get_service)):
    return svc.create_cart()


@router.get("/{cart_id}", response_model=CartOut)
def get_cart(cart_id: str, svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(cart_id)
    except PosError as e:
        raise http_error(e)


@router.delete("/{cart_id}", status_code=204)
def discard_cart(cart_id: str, svc: CartService = Depends(get_service)):
    if not svc.discard(cart_id):
        raise HTTPException(status_code=404, detail="Cart not found")


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(cart_id: str, payload: ItemIn, svc: CartService = Depends(get_service)):
    try:
        return svc.add_item(cart_id, payload.product_id, payload.quantity)
    except (PosError, ValueError) as e:
        raise http_error(e)


@router.put("/{cart_id}/items/{product_id}", response_model=CartOut)
def set_quantity(
    cart_id: str,
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_service),
):
    try:
        return svc.set_quantity(cart_id, product_id, payload.quantity)
    except PosError as e:
        raise http_error(e)


@router.delete("/{cart_id}/items/{product_id}", response_model=CartOut)
def remove_item(cart_id: str, product_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.remove_item(cart_id, product_id)
    except PosError as e:
        raise http_error(e)


@router.delete("/{cart_id}/items", response_model=CartOut)
def clear_items(cart_id: str, svc: CartService = Depends(get_service)):
    try:
        return svc.clear_items(cart_id)
    except PosError as e:
        raise http_error(e)


@router.put("/{cart_id}/customer", response_model=CartOut)
def select_customer(cart_id: str, payload: CustomerSelectIn, svc: CartService = Depends(get_service)):
    try:
        return svc.select_customer(cart_id, payload.customer_id)
    except PosError as e:
        raise http_error(e)


@router.delete("/{cart_id}/customer", response_model=CartOut)
def deselect_customer(cart_id: str, svc: CartService = Depends(get_service)):
    try:
        return svc.deselect_customer(cart_id)
    except PosError as e:
        raise http_error(e)


@router.post("/{cart_id}/quote", response_model=SettlementOut)
def quote_checkout(cart_id: str, payload: CheckoutIn, svc: CartService = Depends(get_service)):
    """
    Checkout preview, same calculation as the real checkout.
    """
    try:
        settlement = svc.preview(cart_id, payload.discount, payload.points_redeemed, payload.payment_method)
    except PosError as e:
        raise http_error(e)
    return settlement.model_dump()


@router.post("/{cart_id}/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    cart_id: str,
    payload: CheckoutIn,
    db: Session = Depends(get_db),
    svc: CartService = Depends(get_service),
):
    """
    Settles the cart and stores the order; on success the cart is emptied
    and the customer deselected. On failure the cart is left untouched.
    """
    orders = OrderService(db)
    try:
        cart = svc.load(cart_id)
        result = orders.place_order(cart, payload.discount, payload.points_redeemed, payload.payment_method)
    except (PosError, SQLAlchemyError) as e:
        raise http_error(e)

    try:
        svc.reset(cart)
    except Exception as e:
        # order already committed, the terminal can clear the cart by hand
        logger.error(f"Order {result['order'].id} placed but cart {cart_id} was not reset: {e}")
    return result
