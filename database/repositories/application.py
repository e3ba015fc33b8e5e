import logging
from typing import Any, List, Optional, Iterable

from sqlalchemy import select, func

from database.models import RoastApplication, ApplicationStatus, HELD_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationRepository(BaseRepository):
    def get_for_pair(self, roast_request_id: Any, roaster_id: Any) -> Optional[RoastApplication]:
        stmt = select(RoastApplication).where(
            RoastApplication.roast_request_id == roast_request_id,
            RoastApplication.roaster_id == roaster_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(
        self,
        roast_request_id: Any,
        roaster_id: Any,
        score: int,
        motivation: Optional[str] = None
    ) -> RoastApplication:
        """Insert a pending application and flush it.

        The flush surfaces the (request, roaster) unique constraint as an
        IntegrityError right here rather than at commit time.
        """
        application = RoastApplication(
            roast_request_id=roast_request_id,
            roaster_id=roaster_id,
            score=score,
            motivation=motivation,
            status=ApplicationStatus.PENDING
        )
        self.db.add(application)
        self.db.flush()
        return application

    def count_for_request(self, roast_request_id: Any) -> int:
        stmt = select(func.count(RoastApplication.id)).where(
            RoastApplication.roast_request_id == roast_request_id
        )
        return self.db.execute(stmt).scalar_one()

    def list_for_request(
        self,
        roast_request_id: Any,
        statuses: Optional[Iterable[ApplicationStatus]] = None
    ) -> List[RoastApplication]:
        """Applications of a request, best score first, earliest first on ties."""
        stmt = select(RoastApplication).where(
            RoastApplication.roast_request_id == roast_request_id
        )
        if statuses is not None:
            stmt = stmt.where(RoastApplication.status.in_(list(statuses)))

        stmt = stmt.order_by(
            RoastApplication.score.desc(),
            RoastApplication.created_at.asc()
        )
        return self.db.execute(stmt).scalars().all()

    def list_pending_ranked(self, roast_request_id: Any) -> List[RoastApplication]:
        return self.list_for_request(roast_request_id, statuses=[ApplicationStatus.PENDING])

    def list_held_for_roaster(self, roaster_id: Any) -> List[RoastApplication]:
        stmt = (
            select(RoastApplication)
            .where(
                RoastApplication.roaster_id == roaster_id,
                RoastApplication.status.in_(HELD_STATUSES)
            )
            .order_by(RoastApplication.selected_at.desc())
        )
        return self.db.execute(stmt).scalars().all()

    def count_held_for_roaster(self, roaster_id: Any) -> int:
        stmt = select(func.count(RoastApplication.id)).where(
            RoastApplication.roaster_id == roaster_id,
            RoastApplication.status.in_(HELD_STATUSES)
        )
        return self.db.execute(stmt).scalar_one()
