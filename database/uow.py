import contextlib
import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from database.database import get_session_factory

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def marketplace_uow(session_factory: Optional[sessionmaker] = None):
    """Per-unit-of-work transaction scope.

    Yields a Session. Commits on success, rolls back on exception (including
    the business-rule errors raised by the core services, so a rejected
    operation never leaves a partial write behind), always closes.

    Usage:
        with marketplace_uow() as session:
            SelectionService(session).auto_select(request_id)
        # commit happens automatically on successful exit
    """
    session: Session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
