import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, func, and_

from database.models import Feedback, FeedbackStatus, FeedbackRating, RoastApplication, HELD_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class FeedbackRepository(BaseRepository):
    def get_by_id(self, feedback_id: Any) -> Optional[Feedback]:
        return self.db.get(Feedback, feedback_id)

    def get_for_pair(self, roast_request_id: Any, roaster_id: Any) -> Optional[Feedback]:
        stmt = select(Feedback).where(
            Feedback.roast_request_id == roast_request_id,
            Feedback.roaster_id == roaster_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_owned(self, feedback_id: Any, roaster_id: Any) -> Optional[Feedback]:
        stmt = select(Feedback).where(
            Feedback.id == feedback_id,
            Feedback.roaster_id == roaster_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, roast_request_id: Any, roaster_id: Any, **fields) -> Feedback:
        feedback = Feedback(
            roast_request_id=roast_request_id,
            roaster_id=roaster_id,
            **fields
        )
        self.db.add(feedback)
        self.db.flush()
        return feedback

    def delete(self, feedback: Feedback) -> None:
        self.db.delete(feedback)
        self.db.flush()

    def replace_ratings(self, feedback: Feedback, ratings: List[Dict[str, Any]]) -> List[FeedbackRating]:
        self.db.execute(delete(FeedbackRating).where(FeedbackRating.feedback_id == feedback.id))
        self.db.expire(feedback, ['ratings'])

        records = [FeedbackRating(feedback_id=feedback.id, **rating) for rating in ratings]
        self.db.add_all(records)
        self.db.flush()
        return records

    def list_ratings(self, feedback_id: Any) -> List[FeedbackRating]:
        stmt = (
            select(FeedbackRating)
            .where(FeedbackRating.feedback_id == feedback_id)
            .order_by(FeedbackRating.domain)
        )
        return self.db.execute(stmt).scalars().all()

    def _completed_for_held_slot(self, roaster_id: Any):
        # Only feedback on requests where the roaster actually held a slot counts
        return (
            select(Feedback)
            .join(
                RoastApplication,
                and_(
                    RoastApplication.roast_request_id == Feedback.roast_request_id,
                    RoastApplication.roaster_id == Feedback.roaster_id
                )
            )
            .where(
                Feedback.roaster_id == roaster_id,
                Feedback.status == FeedbackStatus.COMPLETED,
                RoastApplication.status.in_(HELD_STATUSES)
            )
        )

    def count_completed_for_roaster(self, roaster_id: Any) -> int:
        stmt = select(func.count()).select_from(self._completed_for_held_slot(roaster_id).subquery())
        return self.db.execute(stmt).scalar_one()

    def total_earned_for_roaster(self, roaster_id: Any) -> Decimal:
        completed = self._completed_for_held_slot(roaster_id).subquery()
        stmt = select(func.coalesce(func.sum(completed.c.final_price), 0))
        return Decimal(str(self.db.execute(stmt).scalar_one()))
