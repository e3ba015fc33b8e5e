import logging
from typing import Any, Optional

from sqlalchemy import select

from database.models import User, RoasterProfile, CreatorProfile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    def get_user(self, user_id: Any) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_roaster_profile(self, user_id: Any) -> Optional[RoasterProfile]:
        stmt = select(RoasterProfile).where(RoasterProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_creator_profile(self, user_id: Any) -> Optional[CreatorProfile]:
        stmt = select(CreatorProfile).where(CreatorProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()
