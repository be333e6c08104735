# restaurant_pos/services/notification_service.py
from restaurant_pos.celery_worker import celery_app
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Sends order and stock notifications.
    Uses Celery so the checkout request does not wait for delivery.
    """

    @staticmethod
    def send_order_receipt(order_id: int, customer_id: int | None = None):
        send_order_receipt_task.delay(order_id, customer_id)

    @staticmethod
    def send_low_stock_alert(product_id: int, name: str, stock_quantity: int):
        send_low_stock_alert_task.delay(product_id, name, stock_quantity)


@celery_app.task(name="restaurant_pos.services.notification_service.send_order_receipt_task")
def send_order_receipt_task(order_id: int, customer_id: int | None = None):
    """
    Celery task - a real deployment would hand the receipt to a printer
    or e-mail gateway. For now it only logs.
    """
    logger.info(f"[RECEIPT] Order {order_id} completed (customer {customer_id})")
    return {"order_id": order_id, "customer_id": customer_id, "status": "sent"}


@celery_app.task(name="restaurant_pos.services.notification_service.send_low_stock_alert_task")
def send_low_stock_alert_task(product_id: int, name: str, stock_quantity: int):
    logger.warning(f"[LOW STOCK] {name} (product {product_id}): {stock_quantity} left")
    return {"product_id": product_id, "stock_quantity": stock_quantity, "status": "sent"}
