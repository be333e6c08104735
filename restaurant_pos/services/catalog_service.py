# restaurant_pos/services/catalog_service.py
from sqlalchemy.orm import Session

from restaurant_pos.data.models.category import CategoryModel
from restaurant_pos.data.models.product import ProductModel
from restaurant_pos.domain.errors import CategoryNotFoundError, ProductNotFoundError
from restaurant_pos.domain.schemas import (
    CategoryCreate,
    CategoryRead,
    ProductCreate,
    ProductOut,
    ProductRead,
)
from restaurant_pos.domain.stock import stock_status
from restaurant_pos.repos.product_repo import CategoryRepo, ProductRepo
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


def to_product_out(product) -> ProductOut:
    snapshot = ProductRead.model_validate(product)
    return ProductOut(**snapshot.model_dump(), stock_status=stock_status(snapshot))


class CatalogService:
    """Menu and stock management: categories, products and manual stock edits."""

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.categories = CategoryRepo(db)

    def list_categories(self) -> list[CategoryRead]:
        return [CategoryRead.model_validate(c) for c in self.categories.list_categories()]

    def create_category(self, payload: CategoryCreate) -> CategoryRead:
        created = self.categories.create_category(CategoryModel(name=payload.name, icon=payload.icon))
        logger.info(f"Category {created.id} ({created.name}) created")
        return CategoryRead.model_validate(created)

    def list_products(self, category_id: int | None = None, include_unavailable: bool = False) -> list[ProductOut]:
        products = self.products.list_products(category_id, available_only=not include_unavailable)
        return [to_product_out(p) for p in products]

    def low_stock_products(self) -> list[ProductOut]:
        return [to_product_out(p) for p in self.products.list_low_stock()]

    def get_product(self, product_id: int) -> ProductRead:
        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return ProductRead.model_validate(product)

    def create_product(self, payload: ProductCreate) -> ProductOut:
        if payload.category_id is not None and not self.categories.get_category(payload.category_id):
            raise CategoryNotFoundError(payload.category_id)

        created = self.products.create_product(ProductModel(**payload.model_dump()))
        logger.info(f"Product {created.id} ({created.name}) added with stock {created.stock_quantity}")
        return to_product_out(created)

    def update_stock(self, product_id: int, new_qty: int) -> ProductOut:
        if new_qty < 0:
            raise ValueError("Invalid quantity")

        product = self.products.update_product_stock(product_id, new_qty)
        if not product:
            raise ProductNotFoundError(product_id)

        logger.info(f"Stock of product {product_id} set to {new_qty}")
        return to_product_out(product)
