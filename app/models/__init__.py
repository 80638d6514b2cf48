"""Application models package."""

from app.models.menu import MenuItem
from app.models.order import Order, OrderItem, Receipt, TokenIssue
from app.models.user import User

__all__ = ["User", "MenuItem", "Order", "OrderItem", "Receipt", "TokenIssue"]
