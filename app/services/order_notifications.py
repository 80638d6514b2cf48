"""Change notification channel for order rows.

Committed order changes are collected from SQLAlchemy session events and fanned
out to subscriptions. Each subscription re-reads its own view of the store
(staff queue, one customer's history, or a single order) and hands the fresh
snapshot to its callback, so a subscriber always sees the latest committed
state rather than the individual change that woke it up.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from itertools import chain
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from app.db import session as db_session
from app.models.order import Order
from app.schemas.order import OrderRead
from app.services.order_queries import get_order, list_active_orders, list_user_orders

logger = logging.getLogger(__name__)

PENDING_CHANGES_KEY: str = "canteen.pending_order_changes"


@dataclass(frozen=True)
class OrderChange:
    """Identity of an order row touched by a committed transaction."""

    order_id: str
    user_id: int | None


class Subscription:
    """Handle returned by ``subscribe_*``; call ``cancel()`` on teardown.

    Fetch and delivery run under one lock, so deliveries to a subscriber are
    serialized and each one carries a snapshot at least as new as the previous.
    """

    def __init__(
        self,
        broker: OrderChangeBroker,
        name: str,
        matches: Callable[[OrderChange], bool],
        fetch: Callable[[Session], Any],
        callback: Callable[[Any], None],
        session_factory: Callable[[], Session] | None,
    ) -> None:
        self.name = name
        self._broker = broker
        self._matches = matches
        self._fetch = fetch
        self._callback = callback
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def matches(self, change: OrderChange) -> bool:
        return self._matches(change)

    def refresh(self) -> None:
        """Fetch the current snapshot and deliver it to the callback."""
        with self._lock:
            if not self._active:
                return
            factory = self._session_factory or db_session.SessionLocal
            with factory() as db:
                snapshot = self._fetch(db)
            if snapshot is None:
                return
            self._callback(snapshot)

    def cancel(self) -> bool:
        """Stop deliveries; returns False when already cancelled."""
        with self._lock:
            if not self._active:
                return False
            self._active = False
        self._broker._remove(self)
        logger.debug("[NOTIFY] Subscription %s cancelled", self.name)
        return True


class OrderChangeBroker:
    """In-process fan-out of committed order changes."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def _add(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("[NOTIFY] Subscription %s registered", subscription.name)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe_active(
        self,
        callback: Callable[[list[OrderRead]], None],
        session_factory: Callable[[], Session] | None = None,
    ) -> Subscription:
        """Staff queue: every change re-delivers all non-completed orders, oldest first."""

        def fetch(db: Session) -> list[OrderRead]:
            return [OrderRead.model_validate(order) for order in list_active_orders(db)]

        return self._add(Subscription(self, "active", lambda change: True, fetch, callback, session_factory))

    def subscribe_user(
        self,
        user_id: int,
        callback: Callable[[list[OrderRead]], None],
        session_factory: Callable[[], Session] | None = None,
    ) -> Subscription:
        """Customer history: changes to the user's rows re-deliver their orders, newest first."""

        def fetch(db: Session) -> list[OrderRead]:
            return [OrderRead.model_validate(order) for order in list_user_orders(db, user_id)]

        return self._add(
            Subscription(
                self,
                f"user:{user_id}",
                lambda change: change.user_id == user_id,
                fetch,
                callback,
                session_factory,
            )
        )

    def subscribe_order(
        self,
        order_id: str,
        callback: Callable[[OrderRead], None],
        session_factory: Callable[[], Session] | None = None,
    ) -> Subscription:
        """Single order: changes to that row deliver the updated record."""

        def fetch(db: Session) -> OrderRead | None:
            order = get_order(db, order_id)
            return OrderRead.model_validate(order) if order is not None else None

        return self._add(
            Subscription(
                self,
                f"order:{order_id}",
                lambda change: change.order_id == order_id,
                fetch,
                callback,
                session_factory,
            )
        )

    def publish(self, changes: Iterable[OrderChange]) -> None:
        """Refresh every subscription matching at least one change."""
        changes = list(changes)
        if not changes:
            return
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if not any(subscription.matches(change) for change in changes):
                continue
            try:
                subscription.refresh()
            except Exception:
                logger.exception("[NOTIFY] Delivery to subscription %s failed", subscription.name)


order_events: OrderChangeBroker = OrderChangeBroker()


def mark_order_changed(session: Session, order_id: str, user_id: int | None) -> None:
    """Record a change made outside the unit of work, e.g. a bulk UPDATE."""
    pending: dict[str, OrderChange] = session.info.setdefault(PENDING_CHANGES_KEY, {})
    pending[order_id] = OrderChange(order_id=order_id, user_id=user_id)


@event.listens_for(Session, "after_flush")
def _collect_order_changes(session: Session, flush_context) -> None:
    for obj in chain(session.new, session.dirty, session.deleted):
        if not isinstance(obj, Order):
            continue
        # Read loaded state only; lazy loads are not allowed inside flush events.
        state = inspect(obj).dict
        order_id = state.get("id")
        if order_id is not None:
            mark_order_changed(session, order_id, state.get("user_id"))


@event.listens_for(Session, "after_commit")
def _publish_order_changes(session: Session) -> None:
    pending: dict[str, OrderChange] | None = session.info.pop(PENDING_CHANGES_KEY, None)
    if pending:
        order_events.publish(pending.values())


@event.listens_for(Session, "after_rollback")
def _discard_order_changes(session: Session) -> None:
    session.info.pop(PENDING_CHANGES_KEY, None)
