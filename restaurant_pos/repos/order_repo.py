# restaurant_pos/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from restaurant_pos.data.models.order import OrderModel
from restaurant_pos.data.models.order_item import OrderItemModel


class OrderRepo:
    """
    Order header and line writes only flush; the caller owns the
    transaction and commits header and lines together.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def insert_order_lines(self, order_id: int, lines: list[OrderItemModel]) -> list[OrderItemModel]:
        for line in lines:
            line.order_id = order_id
        self.db.add_all(lines)
        self.db.flush()
        return lines

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_lines(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def list_orders(self, start: datetime | None = None, end: datetime | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if start is not None:
            stmt = stmt.where(OrderModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(OrderModel.created_at <= end)
        return list(self.db.execute(stmt).scalars())
