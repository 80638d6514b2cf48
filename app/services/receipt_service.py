"""Receipt issuance for placed orders."""

import random
import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import SessionContext
from app.models.order import Order, Receipt
from app.services.errors import OrderNotFoundError


def generate_receipt_id() -> str:
    return f"RCP{int(time.time() * 1000)}{random.randint(0, 999)}"


def build_receipt(order: Order) -> Receipt:
    """Snapshot a flushed order into a receipt row."""
    return Receipt(
        receipt_id=generate_receipt_id(),
        order_id=order.id,
        user_id=order.user_id,
        token_number=order.token_number,
        items=[
            {"id": item.menu_item_id, "name": item.name, "quantity": item.quantity, "price": str(item.price)}
            for item in order.items
        ],
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
    )


def get_receipt_for(db: Session, ctx: SessionContext, order_id: str) -> Receipt:
    receipt = db.scalar(select(Receipt).where(Receipt.order_id == order_id).limit(1))
    if receipt is None or (not ctx.is_staff and receipt.user_id != ctx.user_id):
        raise OrderNotFoundError(f"Receipt for order {order_id} not found")
    return receipt
