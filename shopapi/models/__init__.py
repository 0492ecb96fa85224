from shopapi.models.users import User, UserRole
from shopapi.models.session import UserSession
from shopapi.models.product import Product
from shopapi.models.order import Order, OrderItem, OrderStatus, TERMINAL_STATUSES
from shopapi.models.log import Log

__all__ = [
    "User", "UserRole", "UserSession", "Product",
    "Order", "OrderItem", "OrderStatus", "TERMINAL_STATUSES", "Log",
]
