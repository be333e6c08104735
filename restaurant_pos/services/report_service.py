# restaurant_pos/services/report_service.py
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from restaurant_pos.domain.loyalty import loyalty_summary
from restaurant_pos.domain.schemas import OrderOut, money
from restaurant_pos.repos.customer_repo import CustomerRepo
from restaurant_pos.repos.order_repo import OrderRepo
from restaurant_pos.utils.settings import REPORT_DEFAULT_DAYS

RECENT_ORDERS = 10


def _utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes, everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReportService:
    """Read-only aggregates for the sales and loyalty dashboards."""

    def __init__(self, db: Session):
        self.orders = OrderRepo(db)
        self.customers = CustomerRepo(db)

    def sales_report(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        days: int = REPORT_DEFAULT_DAYS,
    ) -> dict:
        end = _utc(end) if end else datetime.now(timezone.utc)
        start = _utc(start) if start else end - timedelta(days=days)
        if start > end:
            raise ValueError("Report start must not be after its end")

        orders = self.orders.list_orders(start, end)

        total_revenue = sum((o.total for o in orders), Decimal("0"))
        total_orders = len(orders)
        avg_order_value = total_revenue / total_orders if total_orders else Decimal("0")
        total_tax = sum((o.tax or Decimal("0") for o in orders), Decimal("0"))

        daily = OrderedDict()
        day = start.date()
        while day <= end.date():
            daily[day] = {"day": day, "revenue": Decimal("0"), "orders": 0}
            day += timedelta(days=1)
        for o in orders:
            bucket = daily.get(_utc(o.created_at).date())
            if bucket is not None:
                bucket["revenue"] += o.total
                bucket["orders"] += 1

        by_method = {}
        for o in orders:
            method = o.payment_method or "cash"
            by_method[method] = by_method.get(method, Decimal("0")) + o.total

        return {
            "start": start,
            "end": end,
            "total_revenue": money(total_revenue),
            "total_orders": total_orders,
            "avg_order_value": money(avg_order_value),
            "total_tax": money(total_tax),
            "daily": list(daily.values()),
            "by_payment_method": [
                {"name": name.capitalize(), "value": money(value)}
                for name, value in sorted(by_method.items())
            ],
            "recent_orders": [OrderOut.model_validate(o) for o in orders[:RECENT_ORDERS]],
        }

    def loyalty_report(self) -> dict:
        summary = loyalty_summary(self.customers.list_customers())
        summary["avg_points"] = money(summary["avg_points"])
        return summary
