#!/usr/bin/env python3
"""
Application Service - roasters applying to roast requests.

apply() checks, in order (first failure wins):
1. the roaster has a profile                        -> ProfileMissing
2. the request exists                               -> NotFound
3. the request status still takes applications      -> RequestClosed
4. a slot is still free                             -> CapacityExceeded
5. the roaster is not the request's creator         -> SelfApplication
6. the roaster has not applied yet                  -> DuplicateApplication

The request row is locked for the whole unit of work, and the
(request, roaster) unique constraint backs up check 6 against a racing
insert.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import RoastApplication, RoastRequest
from database.repositories import ApplicationRepository, ProfileRepository, RoastRequestRepository
from core.config_loader import ScoringConfig
from core.errors import (
    CapacityExceeded, DuplicateApplication, NotFound, ProfileMissing, RequestClosed,
    SelfApplication, Unauthorized
)
from core.scoring import calculate_roaster_score
from core import lifecycle

logger = logging.getLogger(__name__)


class ApplicationService:
    """Records applications and answers application queries."""

    def __init__(self, db: Session, scoring_config: Optional[ScoringConfig] = None):
        self.db = db
        self.scoring_config = scoring_config or ScoringConfig()
        self.requests = RoastRequestRepository(db)
        self.applications = ApplicationRepository(db)
        self.profiles = ProfileRepository(db)

    def apply(
        self,
        request_id: uuid.UUID,
        roaster_id: uuid.UUID,
        motivation: Optional[str] = None
    ) -> RoastApplication:
        """
        Record a pending application with a frozen fit score.

        Args:
            request_id: Roast request to apply to.
            roaster_id: Applying user.
            motivation: Optional pitch, already length-validated by the caller.

        Returns:
            The new application.

        Raises:
            ProfileMissing, NotFound, RequestClosed, CapacityExceeded,
            SelfApplication, DuplicateApplication
        """
        profile = self.profiles.get_roaster_profile(roaster_id)
        if profile is None:
            raise ProfileMissing("A roaster profile is required to apply")

        roast_request = self.requests.get_for_update(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")

        if not lifecycle.accepts_applications(roast_request):
            raise RequestClosed("This request no longer accepts applications")

        if roast_request.held_slots >= roast_request.feedbacks_requested:
            raise CapacityExceeded("All slots have already been filled")

        if roast_request.creator_id == roaster_id:
            raise SelfApplication()

        if self.applications.get_for_pair(request_id, roaster_id) is not None:
            raise DuplicateApplication()

        is_first = self.applications.count_for_request(request_id) == 0
        score = calculate_roaster_score(profile, roast_request, self.scoring_config)

        try:
            application = self.applications.create(
                roast_request_id=request_id,
                roaster_id=roaster_id,
                score=score,
                motivation=motivation
            )
        except IntegrityError as e:
            # Lost a race with a concurrent apply for the same pair
            logger.warning(f"Duplicate application for request {request_id} by {roaster_id}: {e.orig}")
            raise DuplicateApplication() from e

        if is_first and roast_request.status == lifecycle.OPEN:
            lifecycle.mark_collecting(roast_request)

        logger.info(f"Roaster {roaster_id} applied to request {request_id} with score {score}")
        return application

    def list_for_request(self, request_id: uuid.UUID, actor_id: uuid.UUID) -> List[RoastApplication]:
        """Applications of a request, best score first. Creator only."""
        roast_request = self._get_request(request_id)
        if roast_request.creator_id != actor_id:
            raise Unauthorized("Only the creator can view applications")
        return self.applications.list_for_request(request_id)

    def has_applied(self, request_id: uuid.UUID, roaster_id: uuid.UUID) -> bool:
        return self.applications.get_for_pair(request_id, roaster_id) is not None

    def accepted_for_roaster(self, roaster_id: uuid.UUID) -> List[RoastApplication]:
        """The roaster's accepted/auto-selected applications, latest selection first."""
        return self.applications.list_held_for_roaster(roaster_id)

    def _get_request(self, request_id: uuid.UUID) -> RoastRequest:
        roast_request = self.requests.get_by_id(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")
        return roast_request
