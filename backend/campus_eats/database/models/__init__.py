"""
Database models package initialization.

Models are imported here so that they are registered with the Base metadata
and relationship targets resolve regardless of import order.
"""

from campus_eats.database.base import Base, BaseModel
from campus_eats.database.models.menu_item import MenuItem
from campus_eats.database.models.order import Order, OrderItem
from campus_eats.database.models.user import User

__all__ = [
    "Base",
    "BaseModel",
    "MenuItem",
    "Order",
    "OrderItem",
    "User",
]
