"""Read-side order queries shared by the API and the notification channel."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.order import Order


def get_order(db: Session, order_id: str) -> Order | None:
    return db.get(Order, order_id)


def list_active_orders(db: Session) -> list[Order]:
    """Return the staff queue: every non-completed order, oldest first."""
    return list(
        db.scalars(
            select(Order)
            .where(Order.status != "completed")
            .order_by(Order.created_at.asc(), Order.token_number.asc())
        ).all()
    )


def list_user_orders(db: Session, user_id: int) -> list[Order]:
    """Return a customer's order history, most recent first."""
    return list(
        db.scalars(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.token_number.desc())
        ).all()
    )


def count_active_orders(db: Session) -> int:
    return int(db.scalar(select(func.count(Order.id)).where(Order.status != "completed")) or 0)
