"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

OrderStatus = Literal["queued", "preparing", "ready", "completed"]
OrderType = Literal["INSTANT", "SCHEDULED"]


class OrderItemPayload(BaseModel):
    """Single cart line submitted at checkout."""

    menu_item_id: str
    quantity: int = Field(default=1, ge=1)


class OrderCreate(BaseModel):
    """Checkout payload."""

    items: list[OrderItemPayload]
    order_type: OrderType = "INSTANT"
    pickup_time: datetime | None = None
    payment_choice: Literal["online", "offline"] | None = None


class OrderAdvance(BaseModel):
    """Staff request to move an order to its next status."""

    status: Literal["preparing", "ready", "completed"]


class PaymentLinkRequest(BaseModel):
    """Cart used to price the UPI payment request."""

    items: list[OrderItemPayload]


class PaymentLinkResponse(BaseModel):
    amount: Decimal
    upi_link: str


class OrderItemRead(BaseModel):
    """Serialized order item snapshot."""

    id: str = Field(validation_alias=AliasChoices("menu_item_id", "id"))
    name: str
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    """Serialized order as delivered to API callers and subscribers."""

    id: str
    token_number: int
    user_id: int
    items: list[OrderItemRead]
    total_amount: Decimal
    status: OrderStatus
    order_type: OrderType
    pickup_time: datetime | None
    time_slot: str
    estimated_wait_time: str | None
    payment_method: Literal["ONLINE", "OFFLINE"]
    payment_status: Literal["PAID", "PAY_ON_PICKUP"]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCard(OrderRead):
    """Order enriched with the status badge and the single action staff may take."""

    status_label: str
    status_color: str
    next_action: OrderStatus | None


class ReceiptRead(BaseModel):
    """Serialized payment receipt."""

    receipt_id: str
    order_id: str
    user_id: int
    token_number: int
    items: list[OrderItemRead]
    total_amount: Decimal
    payment_method: str
    payment_status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
