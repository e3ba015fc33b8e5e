#!/usr/bin/env python3
"""
Feedback Service - the gate in front of feedback submission.

submit() admits a feedback only if, in order:
1. the submitter is a roaster (profile + primary role)   -> RoleMismatch
2. the request exists and is still active                -> NotFound / RequestClosed
3. the submitter is not the request's creator            -> SelfFeedback
4. the submitter holds a slot on the request             -> NotSelected
5. no feedback exists yet for (request, roaster)         -> DuplicateFeedback
6. final_price does not exceed the request's max_price   -> PriceExceedsBudget
"""

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import Feedback, FeedbackStatus, FeedbackRating, UserRole, HELD_STATUSES
from database.repositories import (
    ApplicationRepository, FeedbackRepository, ProfileRepository, RoastRequestRepository
)
from core.errors import (
    DuplicateFeedback, FeedbackLocked, InvalidInput, NotFound, NotSelected, PriceExceedsBudget,
    RequestClosed, RoleMismatch, SelfFeedback, Unauthorized
)
from core.roaster_stats import RoasterStatsService
from core.scoring import round_half_up
from core import lifecycle

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class FeedbackSubmission:
    """Feedback payload. Content fields are stored as-is."""
    final_price: Decimal
    first_impression: Optional[str] = None
    strengths_found: List[str] = field(default_factory=list)
    weaknesses_found: List[str] = field(default_factory=list)
    actionable_steps: List[str] = field(default_factory=list)
    competitor_comparison: Optional[str] = None


@dataclass
class RatingInput:
    overall: int
    domain: Optional[str] = None
    comment: Optional[str] = None


def _as_money(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class FeedbackService:
    def __init__(self, db: Session):
        self.db = db
        self.requests = RoastRequestRepository(db)
        self.applications = ApplicationRepository(db)
        self.feedbacks = FeedbackRepository(db)
        self.profiles = ProfileRepository(db)
        self.stats = RoasterStatsService(db)

    def submit(self, request_id: uuid.UUID, roaster_id: uuid.UUID, payload: FeedbackSubmission) -> Feedback:
        """
        Admit a completed feedback and move the request to in_progress.

        Raises:
            RoleMismatch, NotFound, RequestClosed, SelfFeedback, NotSelected,
            DuplicateFeedback, PriceExceedsBudget
        """
        user = self.profiles.get_user(roaster_id)
        profile = self.profiles.get_roaster_profile(roaster_id)
        if profile is None or user is None:
            raise RoleMismatch("A roaster profile is required to submit feedback")
        if user.primary_role != UserRole.ROASTER:
            raise RoleMismatch("Only roasters can submit feedback. Switch role to continue.")

        roast_request = self.requests.get_for_update(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")
        if roast_request.status not in lifecycle.FEEDBACK_STATUSES:
            raise RequestClosed("This request is no longer open")

        if roast_request.creator_id == roaster_id:
            raise SelfFeedback()

        application = self.applications.get_for_pair(request_id, roaster_id)
        if application is None or application.status not in HELD_STATUSES:
            raise NotSelected()

        if self.feedbacks.get_for_pair(request_id, roaster_id) is not None:
            raise DuplicateFeedback()

        final_price = _as_money(payload.final_price)
        if final_price > roast_request.max_price:
            raise PriceExceedsBudget(f"Price cannot exceed the maximum budget of {roast_request.max_price}")

        try:
            feedback = self.feedbacks.create(
                roast_request_id=request_id,
                roaster_id=roaster_id,
                status=FeedbackStatus.COMPLETED,
                final_price=final_price,
                first_impression=payload.first_impression,
                strengths_found=list(payload.strengths_found),
                weaknesses_found=list(payload.weaknesses_found),
                actionable_steps=list(payload.actionable_steps),
                competitor_comparison=payload.competitor_comparison or None
            )
        except IntegrityError as e:
            logger.warning(f"Duplicate feedback for request {request_id} by {roaster_id}: {e.orig}")
            raise DuplicateFeedback() from e

        profile.completed_roasts = (profile.completed_roasts or 0) + 1
        profile.total_earned = _as_money(profile.total_earned or 0) + final_price
        self.stats.refresh_profile(profile)

        lifecycle.mark_in_progress(roast_request)

        logger.info(f"Feedback {feedback.id} admitted for request {request_id} from roaster {roaster_id}")
        return feedback

    def update_status(self, feedback_id: uuid.UUID, roaster_id: uuid.UUID, status) -> Feedback:
        try:
            new_status = FeedbackStatus(getattr(status, 'value', status))
        except ValueError:
            raise InvalidInput(f"Unknown feedback status '{status}'")

        feedback = self.feedbacks.get_owned(feedback_id, roaster_id)
        if feedback is None:
            raise NotFound(f"Feedback {feedback_id} not found")
        # Once out of pending, feedback never goes back; delete() relies on it
        if new_status == FeedbackStatus.PENDING and feedback.status != FeedbackStatus.PENDING:
            raise FeedbackLocked(f"Feedback {feedback_id} is {feedback.status.value} and cannot return to pending")

        feedback.status = new_status
        self.db.flush()
        return feedback

    def delete(self, feedback_id: uuid.UUID, roaster_id: uuid.UUID) -> None:
        """Delete the roaster's own feedback; completed feedback is permanent."""
        feedback = self.feedbacks.get_owned(feedback_id, roaster_id)
        if feedback is None:
            raise NotFound(f"Feedback {feedback_id} not found")
        if feedback.status != FeedbackStatus.PENDING:
            raise FeedbackLocked()

        price = _as_money(feedback.final_price or 0)
        self.feedbacks.delete(feedback)

        profile = self.profiles.get_roaster_profile(roaster_id)
        if profile is not None:
            profile.completed_roasts = max((profile.completed_roasts or 0) - 1, 0)
            profile.total_earned = max(_as_money(profile.total_earned or 0) - price, Decimal('0'))
            self.stats.refresh_profile(profile)
        logger.info(f"Feedback {feedback_id} deleted by roaster {roaster_id}")

    def rate(self, feedback_id: uuid.UUID, actor_id: uuid.UUID, ratings: Sequence[RatingInput]) -> List[FeedbackRating]:
        """
        Replace the creator's ratings of a feedback.

        Each rating's overall score is copied to every criterion; the rounded
        average of overall becomes the feedback's creator_rating.
        """
        feedback = self.feedbacks.get_by_id(feedback_id)
        if feedback is None:
            raise NotFound(f"Feedback {feedback_id} not found")
        if feedback.roast_request.creator_id != actor_id:
            raise Unauthorized("Only the request creator can rate feedback")

        if not ratings:
            raise InvalidInput("At least one rating is required")
        for rating in ratings:
            if not MIN_RATING <= rating.overall <= MAX_RATING:
                raise InvalidInput(f"Ratings must be between {MIN_RATING} and {MAX_RATING}")

        records = self.feedbacks.replace_ratings(feedback, [
            {
                'domain': r.domain,
                'clarity': r.overall,
                'relevance': r.overall,
                'depth': r.overall,
                'actionable': r.overall,
                'overall': r.overall,
                'comment': r.comment,
            }
            for r in ratings
        ])

        average = sum(r.overall for r in ratings) / len(ratings)
        feedback.creator_rating = round_half_up(average)
        logger.info(f"Feedback {feedback_id} rated {feedback.creator_rating}/5 over {len(ratings)} domain(s)")
        return records
