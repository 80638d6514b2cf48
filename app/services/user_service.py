"""User service operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.user import User, normalize_user_role


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.strip().lower()).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def create_user(db: Session, email: str, hashed_password: str, role: str) -> User:
    user = User(
        email=email.strip().lower(),
        password_hash=hashed_password,
        role=normalize_user_role(role),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
