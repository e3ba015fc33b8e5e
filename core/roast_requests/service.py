#!/usr/bin/env python3
"""
Roast Request Service - creating requests and creator-driven status changes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from database.models import RoastRequest, RequestStatus, UserRole
from database.repositories import ProfileRepository, RoastRequestRepository
from core.config_loader import RequestLimitsConfig
from core.errors import InvalidInput, NotFound, ProfileMissing, RoleMismatch, Unauthorized
from core import lifecycle

logger = logging.getLogger(__name__)


@dataclass
class RoastRequestDraft:
    title: str
    max_price: Decimal
    feedbacks_requested: int
    focus_areas: List[str] = field(default_factory=list)
    app_url: Optional[str] = None
    description: Optional[str] = None
    target_audience: Optional[str] = None
    category: Optional[str] = None
    deadline: Optional[datetime] = None
    is_urgent: bool = False


class RoastRequestService:
    def __init__(self, db: Session, limits: Optional[RequestLimitsConfig] = None):
        self.db = db
        self.limits = limits or RequestLimitsConfig()
        self.requests = RoastRequestRepository(db)
        self.profiles = ProfileRepository(db)

    def create(self, creator_id: uuid.UUID, draft: RoastRequestDraft) -> RoastRequest:
        """
        Post a new request in status open.

        Raises:
            ProfileMissing: creator has no creator profile.
            RoleMismatch: creator is currently acting as a roaster.
            InvalidInput: capacity, price or focus areas out of bounds.
        """
        user = self.profiles.get_user(creator_id)
        creator_profile = self.profiles.get_creator_profile(creator_id)
        if user is None or creator_profile is None:
            raise ProfileMissing("A creator profile is required to post a request")
        if user.primary_role == UserRole.ROASTER:
            raise RoleMismatch("Roasters cannot post requests. Switch role to continue.")

        self._validate(draft)

        roast_request = self.requests.create(
            creator_id=creator_id,
            title=draft.title,
            app_url=draft.app_url,
            description=draft.description,
            target_audience=draft.target_audience,
            category=draft.category,
            focus_areas=list(dict.fromkeys(draft.focus_areas)),
            max_price=Decimal(str(draft.max_price)),
            feedbacks_requested=draft.feedbacks_requested,
            held_slots=0,
            deadline=draft.deadline,
            is_urgent=draft.is_urgent,
            status=RequestStatus.OPEN
        )
        creator_profile.projects_posted = (creator_profile.projects_posted or 0) + 1

        logger.info(
            f"Creator {creator_id} posted request {roast_request.id} "
            f"({draft.feedbacks_requested} feedbacks, max {draft.max_price})"
        )
        return roast_request

    def get(self, request_id: uuid.UUID) -> RoastRequest:
        roast_request = self.requests.get_by_id(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")
        return roast_request

    def cancel(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> RoastRequest:
        roast_request = self._get_owned_for_update(request_id, actor_id)
        lifecycle.cancel(roast_request)
        return roast_request

    def complete(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> RoastRequest:
        roast_request = self._get_owned_for_update(request_id, actor_id)
        lifecycle.complete(roast_request)
        return roast_request

    def _get_owned_for_update(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> RoastRequest:
        roast_request = self.requests.get_for_update(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")
        if roast_request.creator_id != actor_id:
            raise Unauthorized("Only the creator can change this request")
        return roast_request

    def _validate(self, draft: RoastRequestDraft) -> None:
        errors = []
        if not draft.title or not draft.title.strip():
            errors.append("title is required")
        if not self.limits.min_feedbacks <= draft.feedbacks_requested <= self.limits.max_feedbacks:
            errors.append(
                f"feedbacks_requested must be between {self.limits.min_feedbacks} and {self.limits.max_feedbacks}"
            )
        if Decimal(str(draft.max_price)) < Decimal(str(self.limits.min_price)):
            errors.append(f"max_price must be at least {self.limits.min_price}")
        if not draft.focus_areas:
            errors.append("at least one focus area is required")

        if errors:
            raise InvalidInput("Invalid request: " + ", ".join(errors))
