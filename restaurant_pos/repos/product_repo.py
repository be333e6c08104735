# restaurant_pos/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from restaurant_pos.data.models.category import CategoryModel
from restaurant_pos.data.models.product import ProductModel
from restaurant_pos.domain.stock import is_low_stock


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_categories(self) -> list[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars())

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def create_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self, category_id: int | None = None, available_only: bool = False) -> list[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.name)
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        if available_only:
            stmt = stmt.where(ProductModel.is_available.is_(True))
        return list(self.db.execute(stmt).scalars())

    def list_low_stock(self) -> list[ProductModel]:
        return [p for p in self.list_products() if is_low_stock(p)]

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product_stock(self, product_id: int, new_qty: int) -> ProductModel | None:
        product = self.get_product(product_id)
        if product:
            product.stock_quantity = new_qty
            self.db.commit()
            self.db.refresh(product)
        return product

    def decrement_stock(self, product_id: int, qty: int) -> int:
        """
        Check-and-decrement inside the caller's transaction.

        np. UPDATE products SET stock_quantity = stock_quantity - 2
            WHERE id = 1 AND stock_quantity >= 2
        Returns the rowcount, 0 means there was not enough stock.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock_quantity >= qty)
            .values(stock_quantity=ProductModel.stock_quantity - qty)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
