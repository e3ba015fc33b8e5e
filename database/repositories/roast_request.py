import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, update, func, exists

from database.models import RoastRequest, RequestStatus, RoastApplication, ApplicationStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RoastRequestRepository(BaseRepository):
    def get_by_id(self, request_id: Any) -> Optional[RoastRequest]:
        return self.db.get(RoastRequest, request_id)

    def get_for_update(self, request_id: Any) -> Optional[RoastRequest]:
        """Load a request and take a row lock on it for the rest of the transaction.

        Every mutator of a request's applications goes through this, so
        concurrent apply/select calls on the same request are serialized
        by the database. Dialects without row locks (SQLite) ignore it.
        """
        self.db.flush()
        stmt = (
            select(RoastRequest)
            .where(RoastRequest.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, **fields) -> RoastRequest:
        roast_request = RoastRequest(**fields)
        self.db.add(roast_request)
        self.db.flush()
        return roast_request

    def reserve_slots(self, roast_request: RoastRequest, delta: int) -> bool:
        """Atomically add delta to held_slots if capacity allows.

        Single conditional UPDATE: the row only changes when
        held_slots + delta <= feedbacks_requested at write time, so two
        racing callers can never jointly overshoot. Returns False when
        no row was updated.
        """
        self.db.flush()
        stmt = (
            update(RoastRequest)
            .where(
                RoastRequest.id == roast_request.id,
                RoastRequest.held_slots + delta <= RoastRequest.feedbacks_requested
            )
            .values(held_slots=RoastRequest.held_slots + delta)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.expire(roast_request, ['held_slots'])
        return result.rowcount == 1

    def find_due_for_auto_selection(self, cutoff: datetime, limit: int = 100) -> List[Any]:
        """Ids of requests whose selection window has elapsed.

        Due means: still recruiting (open or collecting_applications), no
        slot held yet, at least one pending application, and the first
        application recorded at or before cutoff. Oldest first.
        """
        first_applied = (
            select(
                RoastApplication.roast_request_id.label('roast_request_id'),
                func.min(RoastApplication.created_at).label('first_applied_at')
            )
            .group_by(RoastApplication.roast_request_id)
            .subquery()
        )
        has_pending = exists().where(
            RoastApplication.roast_request_id == RoastRequest.id,
            RoastApplication.status == ApplicationStatus.PENDING
        )
        stmt = (
            select(RoastRequest.id)
            .join(first_applied, first_applied.c.roast_request_id == RoastRequest.id)
            .where(
                RoastRequest.status.in_([RequestStatus.OPEN, RequestStatus.COLLECTING_APPLICATIONS]),
                RoastRequest.held_slots == 0,
                first_applied.c.first_applied_at <= cutoff,
                has_pending
            )
            .order_by(first_applied.c.first_applied_at)
            .limit(limit)
        )
        return self.db.execute(stmt).scalars().all()
