"""Order change notification tests."""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.security import SessionContext
from app.db.base import Base
from app.models import Order, User
from app.models.order import ORDER_STATUSES
from app.schemas.order import OrderRead
from app.services.cart import Cart
from app.services.order_notifications import OrderChange, OrderChangeBroker, order_events
from app.services.order_service import submit_order
from app.services.order_status import advance
from app.services.token_allocator import TokenAllocator

STAFF = SessionContext(user_id=1, role="STAFF")
ALICE = SessionContext(user_id=2, role="CUSTOMER")
BOB = SessionContext(user_id=3, role="CUSTOMER")
NOW = datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _setup(tmp_path: Path) -> sessionmaker:
    engine = _build_test_engine(tmp_path / "test_notifications.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    with testing_session_local() as db:
        db.add_all(
            [
                User(id=1, email="staff@example.com", password_hash="x", role="STAFF"),
                User(id=2, email="alice@example.com", password_hash="x", role="CUSTOMER"),
                User(id=3, email="bob@example.com", password_hash="x", role="CUSTOMER"),
            ]
        )
        db.commit()
    return testing_session_local


def _place(session_local: sessionmaker, ctx: SessionContext) -> str:
    cart = Cart()
    cart.add("A", "Samosa", Decimal("50"), quantity=2)
    with session_local() as db:
        order = submit_order(
            db, ctx, cart, "INSTANT", None, "offline", allocator=TokenAllocator(session_local), now=NOW
        )
        return order.id


def test_staff_and_owner_subscriptions_see_status_change(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    staff_snapshots: list[list[OrderRead]] = []
    alice_snapshots: list[list[OrderRead]] = []
    bob_snapshots: list[list[OrderRead]] = []

    subscriptions = [
        order_events.subscribe_active(staff_snapshots.append, session_factory=session_local),
        order_events.subscribe_user(ALICE.user_id, alice_snapshots.append, session_factory=session_local),
        order_events.subscribe_user(BOB.user_id, bob_snapshots.append, session_factory=session_local),
    ]
    try:
        with session_local() as db:
            advance(db, STAFF, order_id, "preparing")
    finally:
        for subscription in subscriptions:
            subscription.cancel()

    assert [[order.status for order in snapshot] for snapshot in staff_snapshots] == [["preparing"]]
    assert [[order.status for order in snapshot] for snapshot in alice_snapshots] == [["preparing"]]
    assert alice_snapshots[0][0].id == order_id
    assert bob_snapshots == []


def test_active_subscription_sees_new_orders_oldest_first(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    snapshots: list[list[OrderRead]] = []

    subscription = order_events.subscribe_active(snapshots.append, session_factory=session_local)
    try:
        _place(session_local, ALICE)
        _place(session_local, BOB)
    finally:
        subscription.cancel()

    assert [[order.token_number for order in snapshot] for snapshot in snapshots] == [[1], [1, 2]]


def test_completed_orders_leave_the_staff_queue(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    snapshots: list[list[OrderRead]] = []

    with session_local() as db:
        advance(db, STAFF, order_id, "preparing")
        advance(db, STAFF, order_id, "ready")

    subscription = order_events.subscribe_active(snapshots.append, session_factory=session_local)
    try:
        subscription.refresh()
        with session_local() as db:
            advance(db, STAFF, order_id, "completed")
    finally:
        subscription.cancel()

    assert [[order.status for order in snapshot] for snapshot in snapshots] == [["ready"], []]


def test_single_order_subscription_observes_monotonic_statuses(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    other_id = _place(session_local, BOB)
    delivered: list[OrderRead] = []

    subscription = order_events.subscribe_order(order_id, delivered.append, session_factory=session_local)
    try:
        subscription.refresh()
        with session_local() as db:
            advance(db, STAFF, other_id, "preparing")
            for target in ("preparing", "ready", "completed"):
                advance(db, STAFF, order_id, target)
    finally:
        subscription.cancel()

    statuses = [order.status for order in delivered]
    assert statuses == ["queued", "preparing", "ready", "completed"]
    assert all(order.id == order_id for order in delivered)
    ranks = [ORDER_STATUSES.index(status) for status in statuses]
    assert ranks == sorted(ranks)


def test_cancelled_subscription_receives_nothing(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    delivered: list[OrderRead] = []
    count_before = order_events.subscription_count

    subscription = order_events.subscribe_order(order_id, delivered.append, session_factory=session_local)
    assert order_events.subscription_count == count_before + 1
    assert subscription.cancel() is True
    assert subscription.cancel() is False
    assert order_events.subscription_count == count_before

    with session_local() as db:
        advance(db, STAFF, order_id, "preparing")
    subscription.refresh()

    assert delivered == []
    assert not subscription.active


def test_failing_subscriber_does_not_break_the_writer(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    delivered: list[OrderRead] = []

    def broken(_snapshot) -> None:
        raise RuntimeError("socket closed")

    subscriptions = [
        order_events.subscribe_order(order_id, broken, session_factory=session_local),
        order_events.subscribe_order(order_id, delivered.append, session_factory=session_local),
    ]
    try:
        with session_local() as db:
            order = advance(db, STAFF, order_id, "preparing")
    finally:
        for subscription in subscriptions:
            subscription.cancel()

    assert order.status == "preparing"
    assert [snapshot.status for snapshot in delivered] == ["preparing"]


def test_rolled_back_changes_are_not_published(tmp_path: Path) -> None:
    session_local = _setup(tmp_path)
    order_id = _place(session_local, ALICE)
    delivered: list[OrderRead] = []

    subscription = order_events.subscribe_order(order_id, delivered.append, session_factory=session_local)
    try:
        with session_local() as db:
            order = db.get(Order, order_id)
            order.estimated_wait_time = "soon"
            db.flush()
            db.rollback()
    finally:
        subscription.cancel()

    assert delivered == []


def test_broker_publish_matches_by_user_and_order() -> None:
    broker = OrderChangeBroker()
    seen: list[str] = []

    def fetch_name(name: str):
        return lambda db: name

    class NullSession:
        def __enter__(self):
            return self

        def __exit__(self, *exc_info) -> None:
            return None

    user_sub = broker.subscribe_user(2, seen.append, session_factory=NullSession)
    order_sub = broker.subscribe_order("order-1", seen.append, session_factory=NullSession)
    user_sub._fetch = fetch_name("user")
    order_sub._fetch = fetch_name("order")

    broker.publish([OrderChange(order_id="order-9", user_id=3)])
    assert seen == []

    broker.publish([OrderChange(order_id="order-1", user_id=2), OrderChange(order_id="order-2", user_id=2)])
    assert seen == ["user", "order"]

    broker.publish([])
    assert seen == ["user", "order"]
