"""Shared DB and login helpers for the Streamlit customer/staff consoles."""

from datetime import datetime

import streamlit as st
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.security import SessionContext, verify_password
from app.db.base import Base
from app.services import order_notifications  # noqa: F401  registers order change listeners
from app.services.user_service import get_user_by_email

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base.metadata.create_all(bind=engine)


def get_session() -> Session:
    return SessionLocal()


def now_string() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")


def login_form(role: str) -> SessionContext | None:
    """Render a sidebar login and keep the resulting context in session state."""
    key = f"ctx_{role}"
    if key in st.session_state:
        if st.sidebar.button("Log out"):
            del st.session_state[key]
            st.rerun()
        return st.session_state[key]

    with st.sidebar.form(f"login_{role}"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")
    if not submitted:
        return None

    with get_session() as db:
        user = get_user_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash) or user.role != role:
            st.sidebar.error("Incorrect email or password")
            return None
        st.session_state[key] = SessionContext(user_id=user.id, role=user.role)
    st.rerun()
    return None
