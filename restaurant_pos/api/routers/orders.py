# restaurant_pos/api/routers/orders.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from restaurant_pos.api.errors import http_error
from restaurant_pos.data.database import get_db
from restaurant_pos.domain.errors import PosError
from restaurant_pos.domain.schemas import OrderDetailOut, OrderOut
from restaurant_pos.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Orders newest first, optionally limited to a date range.
    """
    return get_service(db).list_orders(start, end)


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).get_order(order_id)
    except PosError as e:
        raise http_error(e)
