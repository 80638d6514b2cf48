"""Order submission flow and caller-scoped order reads."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.security import SessionContext
from app.models.order import Order, OrderItem
from app.services.cart import Cart
from app.services.errors import EstimationError, OrderNotFoundError, PersistenceError, ValidationError
from app.services.menu_service import build_cart
from app.services.order_queries import count_active_orders, get_order
from app.services.payment import resolve_payment
from app.services.receipt_service import build_receipt
from app.services.token_allocator import TokenAllocator
from app.services.wait_time_estimator import WaitTimeEstimator
from app.utils.time import ensure_aware, format_time_slot, utc_now

logger = logging.getLogger(__name__)


def validate_submission(cart: Cart, order_type: str, pickup_time: datetime | None, now: datetime) -> datetime | None:
    """Check checkout preconditions and return the normalized pickup time."""
    if cart.is_empty():
        raise ValidationError("EmptyCart", "Your cart is empty")
    if any(line.quantity < 1 for line in cart.lines):
        raise ValidationError("InvalidQuantity", "Quantities must be at least 1")

    if order_type == "INSTANT":
        return None
    if order_type != "SCHEDULED":
        raise ValidationError("InvalidOrderType", f"Unknown order type: {order_type}")
    if pickup_time is None:
        raise ValidationError("MissingPickupTime", "Choose a pickup time for a scheduled order")
    pickup = ensure_aware(pickup_time)
    if pickup <= now:
        raise ValidationError("PastPickupTime", "Pickup time must be in the future")
    return pickup


def _estimate_wait_time(db: Session, estimator: WaitTimeEstimator | None, item_count: int) -> str | None:
    if estimator is None:
        return None
    try:
        active_orders = count_active_orders(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[ESTIMATOR] Active order count failed; proceeding without wait estimate: %s", exc)
        return None
    try:
        return estimator.estimate(active_orders, item_count)
    except EstimationError as exc:
        logger.warning("[ESTIMATOR] Proceeding without wait estimate: %s", exc)
        return None


def submit_order(
    db: Session,
    ctx: SessionContext,
    cart: Cart,
    order_type: str,
    pickup_time: datetime | None,
    payment_choice: str | None,
    *,
    allocator: TokenAllocator,
    estimator: WaitTimeEstimator | None = None,
    now: datetime | None = None,
) -> Order:
    """Turn a validated cart into exactly one queued order.

    All input checks run before a token is requested, so a rejected checkout
    never consumes a token. The cart is cleared only after the order row is
    committed.
    """
    now = now or utc_now()
    pickup = validate_submission(cart, order_type, pickup_time, now)
    payment_method, payment_status = resolve_payment(payment_choice)

    token_number = allocator.next_token()

    estimated_wait_time: str | None = None
    if order_type == "INSTANT":
        estimated_wait_time = _estimate_wait_time(db, estimator, cart.total_quantity)

    order = Order(
        token_number=token_number,
        user_id=ctx.user_id,
        total_amount=cart.total_price,
        status="queued",
        order_type=order_type,
        pickup_time=pickup,
        time_slot=format_time_slot(pickup),
        estimated_wait_time=estimated_wait_time,
        payment_method=payment_method,
        payment_status=payment_status,
        created_at=now,
        items=[
            OrderItem(
                position=position,
                menu_item_id=line.item_id,
                name=line.name,
                quantity=line.quantity,
                price=line.price,
            )
            for position, line in enumerate(cart.lines)
        ],
    )
    try:
        db.add(order)
        db.flush()
        db.add(build_receipt(order))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[ORDERS] Order write failed; token #%s discarded", token_number)
        raise PersistenceError("Could not place the order. Please try again.") from exc

    db.refresh(order)
    cart.clear()
    logger.info(
        "[ORDERS] Created order id=%s token=#%s type=%s payment=%s for user_id=%s",
        order.id,
        order.token_number,
        order.order_type,
        order.payment_method,
        ctx.user_id,
    )
    return order


def get_order_for(db: Session, ctx: SessionContext, order_id: str) -> Order:
    """Return an order visible to the caller: staff see all, customers their own."""
    order = get_order(db, order_id)
    if order is None or (not ctx.is_staff and order.user_id != ctx.user_id):
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def checkout(
    db: Session,
    ctx: SessionContext,
    lines: Iterable[tuple[str, int]],
    order_type: str,
    pickup_time: datetime | None,
    payment_choice: str | None,
    *,
    allocator: TokenAllocator,
    estimator: WaitTimeEstimator | None = None,
    now: datetime | None = None,
) -> Order:
    """Reprice ``(menu_item_id, quantity)`` lines against the live menu and submit them.

    A dish switched off since it was added to the cart fails with
    ``ItemUnavailable`` before any token is allocated.
    """
    cart = build_cart(db, lines)
    return submit_order(
        db,
        ctx,
        cart,
        order_type,
        pickup_time,
        payment_choice,
        allocator=allocator,
        estimator=estimator,
        now=now,
    )
