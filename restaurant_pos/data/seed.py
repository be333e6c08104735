# restaurant_pos/data/seed.py
from decimal import Decimal

from restaurant_pos.data.database import Base, SessionLocal, engine
from restaurant_pos.data.models import CategoryModel, ProductModel
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)

MENU = {
    ("Burgers", "🍔"): [
        ("Classic Burger", "9.99", 40),
        ("Cheese Burger", "11.49", 35),
    ],
    ("Drinks", "🥤"): [
        ("Cola", "2.50", 120),
        ("Lemonade", "3.50", 60),
    ],
    ("Desserts", "🍰"): [
        ("Cheesecake", "5.75", 8),
    ],
}


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(CategoryModel).first():
            return False
        for (name, icon), products in MENU.items():
            category = CategoryModel(name=name, icon=icon)
            db.add(category)
            db.flush()
            for product_name, price, stock in products:
                db.add(
                    ProductModel(
                        category_id=category.id,
                        name=product_name,
                        price=Decimal(price),
                        stock_quantity=stock,
                    )
                )
        db.commit()
        logger.info(f"Seeded {len(MENU)} categories")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()
