"""Order models for canteen pickup orders."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.types import UTCDateTime

ORDER_STATUSES: list[str] = ["queued", "preparing", "ready", "completed"]
ORDER_TYPES: tuple[str, ...] = ("INSTANT", "SCHEDULED")
PAYMENT_METHODS: tuple[str, ...] = ("ONLINE", "OFFLINE")
PAYMENT_STATUSES: tuple[str, ...] = ("PAID", "PAY_ON_PICKUP")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Customer order identified at the counter by its token number."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    token_number: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(Enum(*ORDER_STATUSES, name="order_status"), nullable=False, default="queued")
    order_type: Mapped[str] = mapped_column(Enum(*ORDER_TYPES, name="order_type"), nullable=False)
    pickup_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    time_slot: Mapped[str] = mapped_column(String(64), nullable=False)
    estimated_wait_time: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_method: Mapped[str] = mapped_column(Enum(*PAYMENT_METHODS, name="payment_method"), nullable=False)
    payment_status: Mapped[str] = mapped_column(Enum(*PAYMENT_STATUSES, name="payment_status"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)

    user: Mapped["User"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("uq_orders_token_number", "token_number", unique=True),
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class OrderItem(Base):
    """Snapshot of an order line item taken at checkout."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")


class TokenIssue(Base):
    """One row per issued token; the autoincrement key is the token number."""

    __tablename__ = "token_issues"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    issued_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)


class Receipt(Base):
    """Payment receipt issued once per created order."""

    __tablename__ = "receipts"

    id: Mapped[int] = mapped_column(primary_key=True)
    receipt_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    token_number: Mapped[int] = mapped_column(Integer, nullable=False)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utcnow)
