from commerce_api.models.order import Order, OrderItem
from commerce_api.models.product import Product
from commerce_api.models.role import ADMIN_ROLE_NAME, DEFAULT_ROLE_NAME, Role
from commerce_api.models.user import User

__all__ = [
    "ADMIN_ROLE_NAME",
    "DEFAULT_ROLE_NAME",
    "Order",
    "OrderItem",
    "Product",
    "Role",
    "User",
]
