#!/usr/bin/env python3
"""
Application endpoints - apply to a request, list applications, and select
roasters manually or automatically.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import get_config
from ..dependencies import get_db, get_actor_id
from ..models.requests import ApplyRequest, SelectionRequest
from ..models.responses import (
    ApplicationResponse,
    ApplicationsListResponse,
    ApplicationSummary,
    SelectionResponse
)
from ..utils import safe_datetime_iso, enum_value, parse_uuid
from core.applications import ApplicationService
from core.selection import SelectionService
from core.errors import InvalidInput, Unauthorized
from database.repositories import RoastRequestRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["applications"])


def to_summary(application) -> ApplicationSummary:
    return ApplicationSummary(
        application_id=str(application.id),
        request_id=str(application.roast_request_id),
        roaster_id=str(application.roaster_id),
        status=enum_value(application.status),
        score=application.score,
        motivation=application.motivation,
        created_at=safe_datetime_iso(application.created_at),
        selected_at=safe_datetime_iso(application.selected_at)
    )


@router.post("/{request_id}/applications", response_model=ApplicationResponse, status_code=201)
def apply_to_request(
    request_id: str,
    body: ApplyRequest,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Apply to a roast request as the acting roaster."""
    config = get_config()
    max_length = config.requests.motivation_max_length
    if body.motivation and len(body.motivation) > max_length:
        raise InvalidInput(f"Motivation must be at most {max_length} characters")

    service = ApplicationService(db, scoring_config=config.scoring)
    application = service.apply(parse_uuid(request_id, "request ID"), actor_id, body.motivation)
    db.commit()
    return ApplicationResponse(success=True, application=to_summary(application))


@router.get("/{request_id}/applications", response_model=ApplicationsListResponse)
def list_applications(
    request_id: str,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """
    List applications of a request, best score first.

    Only the request's creator can see them.
    """
    applications = ApplicationService(db).list_for_request(parse_uuid(request_id, "request ID"), actor_id)
    return ApplicationsListResponse(
        success=True,
        count=len(applications),
        applications=[to_summary(a) for a in applications]
    )


@router.post("/{request_id}/selection", response_model=SelectionResponse)
def select_roasters(
    request_id: str,
    body: SelectionRequest,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Accept the given applications and reject the other pending ones."""
    request_uuid = parse_uuid(request_id, "request ID")
    application_ids = [parse_uuid(app_id, "application ID") for app_id in body.application_ids]

    result = SelectionService(db).manual_select(request_uuid, actor_id, application_ids)
    db.commit()
    return _selection_response(db, result)


@router.post("/{request_id}/auto-selection", response_model=SelectionResponse)
def auto_select_roasters(
    request_id: str,
    actor_id=Depends(get_actor_id),
    db: Session = Depends(get_db)
):
    """Fill the free slots with the best-scored pending applications. Creator only."""
    request_uuid = parse_uuid(request_id, "request ID")
    roast_request = RoastRequestRepository(db).get_by_id(request_uuid)
    if roast_request is not None and roast_request.creator_id != actor_id:
        raise Unauthorized("Only the creator can select roasters")

    result = SelectionService(db).auto_select(request_uuid)
    db.commit()
    return _selection_response(db, result)


def _selection_response(db: Session, result) -> SelectionResponse:
    roast_request = RoastRequestRepository(db).get_by_id(result.request_id)
    return SelectionResponse(
        success=True,
        request_id=str(result.request_id),
        mode=result.mode,
        selected_count=result.selected_count,
        selected_ids=[str(i) for i in result.selected_ids],
        rejected_ids=[str(i) for i in result.rejected_ids],
        held_slots=result.held_slots,
        status=enum_value(roast_request.status)
    )
