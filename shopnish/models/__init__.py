"""Top-level models package imports.

Importing model modules here ensures SQLAlchemy registers all models
when `shopnish.models` is imported. This prevents relationship resolution
errors (e.g., when a relationship references a class defined in
another module).
"""

from .approval import ApprovalStatus
from .user import User
from .seller import Seller
from .catalog import Category, Product
from .cart import CartItem
from .order import Order, OrderItem, OrderStatus, PaymentStatus, PaymentMethod
from .delivery import DeliveryBoy, DeliveryAssignment, AssignmentStatus
from .food import FoodVendor, FoodItem, FoodOrder, FoodOrderStatus
from .service import ServiceProvider, ServiceBooking, BookingStatus
from .notification import Notification

__all__ = [
    "ApprovalStatus",
    "User",
    "Seller",
    "Category",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "DeliveryBoy",
    "DeliveryAssignment",
    "AssignmentStatus",
    "FoodVendor",
    "FoodItem",
    "FoodOrder",
    "FoodOrderStatus",
    "ServiceProvider",
    "ServiceBooking",
    "BookingStatus",
    "Notification",
]
