# restaurant_pos/tasks/stock.py
from restaurant_pos.celery_worker import celery_app
from restaurant_pos.data.database import SessionLocal
from restaurant_pos.domain.stock import is_out_of_stock
from restaurant_pos.repos.product_repo import ProductRepo
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="restaurant_pos.tasks.stock.low_stock_sweep_task")
def low_stock_sweep_task():
    logger.info("Low stock sweep started")

    db = SessionLocal()
    try:
        products = ProductRepo(db).list_low_stock()
        logger.info(f"Found {len(products)} products at or below their low stock threshold")

        for product in products:
            state = "out of stock" if is_out_of_stock(product) else f"{product.stock_quantity} left"
            logger.warning(f"Restock needed: {product.name} (product {product.id}) {state}")

        return [product.id for product in products]
    finally:
        db.close()
