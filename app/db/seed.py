"""Database seeding helpers."""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_password_hash
from app.services.menu_service import seed_starter_menu
from app.services.user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)


def ensure_staff_user(session: Session) -> bool:
    """Create the bootstrap staff account from STAFF_USER/STAFF_PASS when configured."""
    if not settings.staff_user or not settings.staff_pass:
        return False
    if get_user_by_email(db=session, email=settings.staff_user) is not None:
        return True
    create_user(
        db=session,
        email=settings.staff_user,
        hashed_password=get_password_hash(settings.staff_pass),
        role="STAFF",
    )
    logger.warning("[BOOTSTRAP] Staff account %s created from environment.", settings.staff_user)
    return True


def ensure_seed_data(session: Session) -> None:
    """Seed the starter menu in development only."""
    if settings.app_env != "dev":
        return
    created = seed_starter_menu(session)
    if created:
        logger.info("[BOOTSTRAP] Seeded %s starter menu items", created)
