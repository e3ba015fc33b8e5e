from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories share the caller's session and never commit."""

    def __init__(self, db: Session):
        self.db = db
