"""Pickup token allocation backed by a database sequence table."""

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db import session as db_session
from app.models.order import TokenIssue
from app.services.errors import AllocationError

logger = logging.getLogger(__name__)


class TokenAllocator:
    """Issue unique, increasing token numbers.

    Each token is one insert into ``token_issues`` committed in its own short
    transaction, so uniqueness under concurrent checkouts comes from the
    database key rather than from application locking. A token whose order is
    never written stays consumed.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def _open_session(self) -> Session:
        factory = self._session_factory or db_session.SessionLocal
        return factory()

    def next_token(self) -> int:
        try:
            with self._open_session() as db:
                issue = TokenIssue()
                db.add(issue)
                db.commit()
                token = int(issue.id)
        except SQLAlchemyError as exc:
            logger.exception("[TOKENS] Token allocation failed")
            raise AllocationError("Could not allocate a token number. Please try again.") from exc
        logger.info("[TOKENS] Issued token %s", token)
        return token


def get_token_allocator() -> TokenAllocator:
    return TokenAllocator()
