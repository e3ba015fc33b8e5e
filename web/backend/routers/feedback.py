#!/usr/bin/env python3
"""
Feedback endpoints - submit feedback and rate it.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db, get_actor_id
from ..models.requests import FeedbackRequest, RateFeedbackRequest
from ..models.responses import FeedbackResponse, FeedbackSummary, RatingsResponse
from ..utils import safe_float, safe_datetime_iso, enum_value, parse_uuid
from core.feedback import FeedbackService, FeedbackSubmission, RatingInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])


@router.post("/requests/{request_id}/feedback", response_model=FeedbackResponse, status_code=201)
def submit_feedback(
    request_id: str,
    body: FeedbackRequest,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """
    Submit feedback as a selected roaster.

    The roaster must hold an accepted or auto-selected application on the
    request, and the price may not exceed the request's budget.
    """
    service = FeedbackService(db)
    feedback = service.submit(
        parse_uuid(request_id, "request ID"),
        actor_id,
        FeedbackSubmission(**body.model_dump())
    )
    db.commit()

    return FeedbackResponse(
        success=True,
        feedback=FeedbackSummary(
            feedback_id=str(feedback.id),
            request_id=str(feedback.roast_request_id),
            roaster_id=str(feedback.roaster_id),
            status=enum_value(feedback.status),
            final_price=safe_float(feedback.final_price),
            creator_rating=feedback.creator_rating,
            created_at=safe_datetime_iso(feedback.created_at)
        )
    )


@router.post("/feedback/{feedback_id}/ratings", response_model=RatingsResponse)
def rate_feedback(
    feedback_id: str,
    body: RateFeedbackRequest,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Replace the creator's ratings of a feedback."""
    feedback_uuid = parse_uuid(feedback_id, "feedback ID")
    service = FeedbackService(db)
    records = service.rate(
        feedback_uuid,
        actor_id,
        [RatingInput(overall=r.overall, domain=r.domain, comment=r.comment) for r in body.ratings]
    )
    db.commit()

    feedback = service.feedbacks.get_by_id(feedback_uuid)
    return RatingsResponse(
        success=True,
        feedback_id=feedback_id,
        creator_rating=feedback.creator_rating,
        ratings=[
            {
                'domain': r.domain,
                'overall': r.overall,
                'comment': r.comment
            }
            for r in records
        ]
    )
