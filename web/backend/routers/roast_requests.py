#!/usr/bin/env python3
"""
Roast request endpoints - post, cancel and complete requests.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import get_config
from ..dependencies import get_db, get_actor_id
from ..models.requests import CreateRoastRequest
from ..models.responses import RoastRequestResponse, RoastRequestSummary
from ..utils import safe_float, safe_datetime_iso, enum_value, parse_uuid
from core.roast_requests import RoastRequestService, RoastRequestDraft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["requests"])


def to_summary(roast_request) -> RoastRequestSummary:
    return RoastRequestSummary(
        request_id=str(roast_request.id),
        creator_id=str(roast_request.creator_id),
        title=roast_request.title,
        status=enum_value(roast_request.status),
        max_price=safe_float(roast_request.max_price),
        feedbacks_requested=roast_request.feedbacks_requested,
        held_slots=roast_request.held_slots,
        focus_areas=list(roast_request.focus_areas or []),
        is_urgent=bool(roast_request.is_urgent),
        deadline=safe_datetime_iso(roast_request.deadline),
        created_at=safe_datetime_iso(roast_request.created_at)
    )


@router.post("", response_model=RoastRequestResponse, status_code=201)
def create_request(
    body: CreateRoastRequest,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Post a new roast request as the acting creator."""
    service = RoastRequestService(db, limits=get_config().requests)
    roast_request = service.create(actor_id, RoastRequestDraft(**body.model_dump()))
    db.commit()
    return RoastRequestResponse(success=True, request=to_summary(roast_request))


@router.get("/{request_id}", response_model=RoastRequestResponse)
def get_request(request_id: str, db: Session = Depends(get_db)):
    roast_request = RoastRequestService(db).get(parse_uuid(request_id, "request ID"))
    return RoastRequestResponse(success=True, request=to_summary(roast_request))


@router.post("/{request_id}/cancel", response_model=RoastRequestResponse)
def cancel_request(
    request_id: str,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Cancel a request that is not completed or cancelled yet. Creator only."""
    roast_request = RoastRequestService(db).cancel(parse_uuid(request_id, "request ID"), actor_id)
    db.commit()
    return RoastRequestResponse(success=True, request=to_summary(roast_request))


@router.post("/{request_id}/complete", response_model=RoastRequestResponse)
def complete_request(
    request_id: str,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Mark an in-progress request completed. Creator only."""
    roast_request = RoastRequestService(db).complete(parse_uuid(request_id, "request ID"), actor_id)
    db.commit()
    return RoastRequestResponse(success=True, request=to_summary(roast_request))
