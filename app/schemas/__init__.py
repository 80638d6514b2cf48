"""Schema exports."""

from app.schemas.auth import AuthUserResponse, LoginRequest, RegisterRequest, TokenResponse
from app.schemas.menu import MenuItemCreate, MenuItemRead, MenuItemUpdate
from app.schemas.order import (
    OrderAdvance,
    OrderCard,
    OrderCreate,
    OrderItemPayload,
    OrderItemRead,
    OrderRead,
    PaymentLinkRequest,
    PaymentLinkResponse,
    ReceiptRead,
)

__all__ = [
    "AuthUserResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "MenuItemCreate",
    "MenuItemRead",
    "MenuItemUpdate",
    "OrderAdvance",
    "OrderCard",
    "OrderCreate",
    "OrderItemPayload",
    "OrderItemRead",
    "OrderRead",
    "PaymentLinkRequest",
    "PaymentLinkResponse",
    "ReceiptRead",
]
