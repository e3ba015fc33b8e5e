import logging
from typing import Optional

from sqlalchemy.engine import Engine
from tenacity import retry, stop_after_attempt, wait_fixed, before_sleep_log

from database.models import Base

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), before_sleep=before_sleep_log(logger, logging.WARNING), reraise=True)
def init_db(engine: Optional[Engine] = None):
    """Create tables if missing. Retried while the database comes up."""
    if engine is None:
        from database.database import get_session_factory
        engine = get_session_factory().kw['bind']

    logger.info("Initializing database...")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise
