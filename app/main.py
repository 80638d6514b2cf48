"""FastAPI entrypoint for the canteen ordering service."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from app.api.v1.api import api_router
from app.core.config import settings
from app.db import session as db_session
from app.db.base import Base
from app.db.seed import ensure_seed_data, ensure_staff_user
from app.services import order_notifications  # noqa: F401  registers order change listeners

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    if settings.jwt_secret_key.startswith("dev-only"):
        logger.warning("JWT_SECRET_KEY not set; using development fallback secret.")
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            ensure_seed_data(session)
            staff_present = ensure_staff_user(session)
            logger.info("[BOOTSTRAP] staff account configured: %s", "yes" if staff_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.get("/")
def root() -> dict[str, str]:
    return {"service": settings.app_name, "status": "ok"}
