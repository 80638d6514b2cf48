"""Order status transition helpers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.security import SessionContext
from app.models.order import ORDER_STATUSES, Order
from app.services.errors import InvalidTransitionError, OrderBusyError, OrderNotFoundError, PersistenceError
from app.services.order_notifications import mark_order_changed
from app.services.order_queries import get_order

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "queued": {"preparing"},
    "preparing": {"ready"},
    "ready": {"completed"},
    "completed": set(),
}

STATUS_BADGES: dict[str, tuple[str, str]] = {
    "queued": ("Queued", "warning"),
    "preparing": ("Preparing", "secondary"),
    "ready": ("Ready", "success"),
    "completed": ("Completed", "muted"),
}

STATUS_MESSAGES: dict[str, str] = {
    "preparing": "Order marked as preparing",
    "ready": "Order marked as ready",
    "completed": "Order completed",
}


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def next_status(current: str) -> str | None:
    """Return the single successor of ``current``, or None for terminal states."""
    successors = ALLOWED_TRANSITIONS.get(current, set())
    return next(iter(successors), None)


def available_actions(current: str) -> list[str]:
    """Statuses a staff member may be offered for an order in ``current``."""
    successor = next_status(current)
    return [successor] if successor is not None else []


def status_badge(status: str) -> tuple[str, str]:
    """Return ``(label, color_key)`` for a status badge."""
    return STATUS_BADGES.get(status, (status.title(), "muted"))


class OrderUpdateGuard:
    """Per-order in-flight flag; a second update for the same order fails fast."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._updating: set[str] = set()

    def is_updating(self, order_id: str) -> bool:
        with self._lock:
            return order_id in self._updating

    @contextmanager
    def hold(self, order_id: str) -> Iterator[None]:
        with self._lock:
            if order_id in self._updating:
                raise OrderBusyError(f"Order {order_id} is already being updated")
            self._updating.add(order_id)
        try:
            yield
        finally:
            with self._lock:
                self._updating.discard(order_id)


update_guard: OrderUpdateGuard = OrderUpdateGuard()


def advance(
    db: Session,
    ctx: SessionContext,
    order_id: str,
    target_status: str,
    guard: OrderUpdateGuard | None = None,
) -> Order:
    """Move an order to its next status.

    The write is a compare-and-set on ``(id, status)``, so two staff members
    racing on the same order cannot both succeed and no other column changes.
    """
    if not ctx.is_staff:
        raise PermissionError("Only staff can change order status")
    if target_status not in ORDER_STATUSES[1:]:
        raise InvalidTransitionError("unknown", target_status)

    with (guard or update_guard).hold(order_id):
        order = get_order(db, order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        current = order.status
        if not can_transition(current, target_status):
            raise InvalidTransitionError(current, target_status)

        try:
            result = db.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == current)
                .values(status=target_status),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount != 1:
                db.rollback()
                raise InvalidTransitionError(current, target_status)
            mark_order_changed(db, order_id, order.user_id)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("[ORDERS] Status update failed for order_id=%s", order_id)
            raise PersistenceError("Could not update the order. Please try again.") from exc

    db.refresh(order)
    logger.info(
        "[ORDERS] Token #%s moved %s -> %s by user_id=%s",
        order.token_number,
        current,
        target_status,
        ctx.user_id,
    )
    return order
