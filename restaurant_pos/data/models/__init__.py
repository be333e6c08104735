#import all models so SQLAlchemy registers them in Base.metadata

from restaurant_pos.data.models.category import CategoryModel
from restaurant_pos.data.models.product import ProductModel
from restaurant_pos.data.models.customer import CustomerModel
from restaurant_pos.data.models.order import OrderModel
from restaurant_pos.data.models.order_item import OrderItemModel

__all__ = ["CategoryModel", "ProductModel", "CustomerModel", "OrderModel", "OrderItemModel"]
