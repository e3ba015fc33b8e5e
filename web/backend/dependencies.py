#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import uuid
from functools import lru_cache
from typing import Generator, Optional

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from core.config_loader import AppConfig
from database.database import make_engine, make_session_factory
from .config import get_config


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, config: AppConfig):
        self.engine = make_engine(
            config.database.url,
            pool_size=10,
            max_overflow=20
        )
        self.SessionLocal = make_session_factory(self.engine)

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Routers commit explicitly once the service call succeeded; closing
        an uncommitted session rolls the transaction back.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Global database manager, created on first request."""
    return DatabaseManager(get_config())


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: Database session that will be automatically closed.
    """
    yield from get_db_manager().get_session()


def get_actor_id(x_user_id: Optional[str] = Header(default=None)) -> uuid.UUID:
    """
    The acting user's id.

    Authentication happens upstream; the gateway forwards the
    authenticated user id in the X-User-Id header.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid X-User-Id header: {x_user_id}")
