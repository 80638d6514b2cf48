"""Order status lifecycle tests."""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.security import SessionContext
from app.db.base import Base
from app.models import Order, OrderItem, User
from app.services.errors import InvalidTransitionError, OrderBusyError, OrderNotFoundError
from app.services.order_status import (
    OrderUpdateGuard,
    advance,
    available_actions,
    can_transition,
    next_status,
    status_badge,
)

STAFF = SessionContext(user_id=1, role="STAFF")


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _seed_order(tmp_path: Path, status: str = "queued") -> tuple[sessionmaker, str]:
    engine = _build_test_engine(tmp_path / "test_status_flow.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    setup_session: Session = testing_session_local()
    try:
        setup_session.add_all(
            [
                User(id=1, email="staff@example.com", password_hash="x", role="STAFF"),
                User(id=2, email="student@example.com", password_hash="x", role="CUSTOMER"),
            ]
        )
        order = Order(
            token_number=7,
            user_id=2,
            total_amount=Decimal("160"),
            status=status,
            order_type="INSTANT",
            time_slot="Instant Order",
            payment_method="OFFLINE",
            payment_status="PAY_ON_PICKUP",
            created_at=datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc),
            items=[OrderItem(position=0, menu_item_id="A", name="Samosa", quantity=2, price=Decimal("50"))],
        )
        setup_session.add(order)
        setup_session.commit()
        order_id = order.id
    finally:
        setup_session.close()
    return testing_session_local, order_id


def test_transition_table_is_a_single_forward_chain() -> None:
    assert next_status("queued") == "preparing"
    assert next_status("preparing") == "ready"
    assert next_status("ready") == "completed"
    assert next_status("completed") is None

    assert can_transition("queued", "preparing")
    assert not can_transition("queued", "ready")
    assert not can_transition("ready", "queued")
    assert not can_transition("completed", "queued")

    assert available_actions("queued") == ["preparing"]
    assert available_actions("completed") == []


def test_status_badges_for_each_state() -> None:
    assert status_badge("queued") == ("Queued", "warning")
    assert status_badge("preparing") == ("Preparing", "secondary")
    assert status_badge("ready") == ("Ready", "success")
    assert status_badge("completed") == ("Completed", "muted")


def test_staff_advances_order_through_every_status(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)

    with session_local() as db:
        for target in ("preparing", "ready", "completed"):
            order = advance(db, STAFF, order_id, target)
            assert order.status == target

    with session_local() as db:
        stored = db.get(Order, order_id)
        assert stored.status == "completed"
        assert stored.token_number == 7
        assert stored.total_amount == Decimal("160")
        assert stored.payment_status == "PAY_ON_PICKUP"
        assert [item.name for item in stored.items] == ["Samosa"]


@pytest.mark.parametrize(
    ("start", "target"),
    [
        ("queued", "ready"),
        ("queued", "completed"),
        ("preparing", "completed"),
        ("ready", "preparing"),
        ("completed", "preparing"),
    ],
)
def test_skipping_or_reversing_status_is_rejected(tmp_path: Path, start: str, target: str) -> None:
    session_local, order_id = _seed_order(tmp_path, status=start)

    with session_local() as db:
        with pytest.raises(InvalidTransitionError):
            advance(db, STAFF, order_id, target)

    with session_local() as db:
        assert db.get(Order, order_id).status == start


def test_unknown_target_status_is_rejected(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)

    with session_local() as db:
        with pytest.raises(InvalidTransitionError):
            advance(db, STAFF, order_id, "cancelled")
        with pytest.raises(InvalidTransitionError):
            advance(db, STAFF, order_id, "queued")


def test_customer_cannot_change_status(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)

    with session_local() as db:
        with pytest.raises(PermissionError):
            advance(db, SessionContext(user_id=2, role="CUSTOMER"), order_id, "preparing")
        assert db.get(Order, order_id).status == "queued"


def test_missing_order_raises_not_found(tmp_path: Path) -> None:
    session_local, _ = _seed_order(tmp_path)

    with session_local() as db:
        with pytest.raises(OrderNotFoundError):
            advance(db, STAFF, "00000000-0000-0000-0000-000000000000", "preparing")


def test_concurrent_update_of_same_order_fails_fast(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)
    guard = OrderUpdateGuard()

    with session_local() as db:
        with guard.hold(order_id):
            assert guard.is_updating(order_id)
            with pytest.raises(OrderBusyError):
                advance(db, STAFF, order_id, "preparing", guard=guard)
        assert not guard.is_updating(order_id)

        assert advance(db, STAFF, order_id, "preparing", guard=guard).status == "preparing"


def test_stale_writer_loses_compare_and_set(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)

    with session_local() as first, session_local() as second:
        stale = second.get(Order, order_id)
        assert stale.status == "queued"

        advance(first, STAFF, order_id, "preparing")

        # The second session still holds the queued row in its identity map.
        with pytest.raises(InvalidTransitionError):
            advance(second, STAFF, order_id, "preparing")

    with session_local() as db:
        assert db.get(Order, order_id).status == "preparing"


def test_created_at_is_untouched_by_status_changes(tmp_path: Path) -> None:
    session_local, order_id = _seed_order(tmp_path)

    with session_local() as db:
        advance(db, STAFF, order_id, "preparing")
        stored = db.get(Order, order_id)
        assert stored.created_at == datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc)
