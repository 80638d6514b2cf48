"""User ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.types import UTCDateTime

USER_ROLES = ("CUSTOMER", "STAFF")


def normalize_user_role(role: str | None) -> str:
    """Return canonical upper-case role or raise ``ValueError``."""
    normalized = str(role or "").strip().upper()
    if normalized not in USER_ROLES:
        raise ValueError(f"Unknown role: {role!r}")
    return normalized


class User(Base):
    """Account used for email/password login by customers and canteen staff."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    orders: Mapped[list["Order"]] = relationship(back_populates="user")
