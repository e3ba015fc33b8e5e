#!/usr/bin/env python3
"""
Selection Service - turning pending applications into held slots.

Two entry points share one capacity primitive,
_enforce_capacity_and_transition(), so the invariant

    count(accepted + auto_selected) <= feedbacks_requested

is checked in exactly one place. The check is a conditional UPDATE on the
request's held_slots counter made while holding the request row lock; it
runs before any application is touched, so a failed call writes nothing.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from database.models import RoastApplication, RoastRequest, ApplicationStatus, HELD_STATUSES
from database.repositories import ApplicationRepository, RoastRequestRepository
from core.errors import CapacityExceeded, NotFound, RequestClosed, Unauthorized
from core import lifecycle

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SelectionResult:
    """Outcome of one selection round."""
    request_id: uuid.UUID
    mode: str
    selected_ids: List[uuid.UUID] = field(default_factory=list)
    rejected_ids: List[uuid.UUID] = field(default_factory=list)
    held_slots: int = 0

    @property
    def selected_count(self) -> int:
        return len(self.selected_ids)


class SelectionService:
    """Automatic (top score) and manual (creator choice) selection."""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or _utcnow
        self.requests = RoastRequestRepository(db)
        self.applications = ApplicationRepository(db)

    def auto_select(self, request_id: uuid.UUID, expect_unselected: bool = False) -> SelectionResult:
        """
        Select the best-scored pending applications, reject the rest.

        Meant for requests nobody has selected on yet (fired by the
        scheduler after the application window). If slots are already held,
        only the free ones are filled.

        Raises:
            NotFound: request does not exist.
            RequestClosed: request is completed or cancelled, or expect_unselected is set
                and a selection round already happened.
        """
        roast_request = self._load_open_request(request_id)
        if expect_unselected and (
            roast_request.held_slots > 0 or roast_request.status == lifecycle.IN_PROGRESS
        ):
            raise RequestClosed(f"Request {request_id} already went through selection")

        ranked = self.applications.list_pending_ranked(request_id)
        free_slots = roast_request.feedbacks_requested - roast_request.held_slots
        winners = ranked[:max(free_slots, 0)]
        losers = ranked[len(winners):]

        self._enforce_capacity_and_transition(roast_request, len(winners))

        now = self.clock()
        for application in winners:
            application.status = ApplicationStatus.AUTO_SELECTED
            application.selected_at = now
        for application in losers:
            application.status = ApplicationStatus.REJECTED
        self.db.flush()

        result = SelectionResult(
            request_id=request_id,
            mode='auto',
            selected_ids=[a.id for a in winners],
            rejected_ids=[a.id for a in losers],
            held_slots=roast_request.held_slots
        )
        logger.info(
            f"Auto-selected {result.selected_count} of {len(ranked)} pending applications "
            f"for request {request_id} ({result.held_slots}/{roast_request.feedbacks_requested} slots held)"
        )
        return result

    def manual_select(
        self,
        request_id: uuid.UUID,
        actor_id: uuid.UUID,
        application_ids: Iterable[uuid.UUID]
    ) -> SelectionResult:
        """
        Accept the given applications and reject every other pending one.

        Applications that already hold a slot are left as they are, whether
        or not they appear in application_ids, so selection can be done over
        several rounds without undoing earlier ones. Resending a held id
        still counts against capacity.

        Raises:
            NotFound: request, or one of application_ids, does not exist on it.
            Unauthorized: actor is not the request's creator.
            RequestClosed: request is completed or cancelled.
            CapacityExceeded: len(application_ids) + held slots > feedbacks_requested.
        """
        roast_request = self.requests.get_for_update(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")

        if roast_request.creator_id != actor_id:
            raise Unauthorized("Only the creator can select roasters")

        if lifecycle.is_terminal(roast_request):
            raise RequestClosed(f"Request is {roast_request.status.value}")

        application_ids = list(application_ids)
        wanted = list(dict.fromkeys(application_ids))
        wanted_set = set(wanted)
        by_id = {a.id: a for a in self.applications.list_for_request(request_id)}

        unknown = [app_id for app_id in wanted if app_id not in by_id]
        if unknown:
            raise NotFound(f"Applications not found on request {request_id}: {', '.join(str(u) for u in unknown)}")

        to_accept = [by_id[app_id] for app_id in wanted if by_id[app_id].status not in HELD_STATUSES]
        to_reject = [
            a for app_id, a in by_id.items()
            if a.status == ApplicationStatus.PENDING and app_id not in wanted_set
        ]

        # Every id in the batch counts, held ones included
        self._enforce_capacity_and_transition(roast_request, len(to_accept), requested_count=len(application_ids))

        now = self.clock()
        for application in to_accept:
            application.status = ApplicationStatus.ACCEPTED
            application.selected_at = now
        for application in to_reject:
            application.status = ApplicationStatus.REJECTED
        self.db.flush()

        result = SelectionResult(
            request_id=request_id,
            mode='manual',
            selected_ids=[a.id for a in to_accept],
            rejected_ids=[a.id for a in to_reject],
            held_slots=roast_request.held_slots
        )
        logger.info(
            f"Creator {actor_id} accepted {result.selected_count} and rejected {len(to_reject)} "
            f"applications on request {request_id} ({result.held_slots}/{roast_request.feedbacks_requested} slots held)"
        )
        return result

    def _enforce_capacity_and_transition(
        self,
        roast_request: RoastRequest,
        accepted_delta: int,
        requested_count: Optional[int] = None
    ) -> None:
        """Reserve accepted_delta slots and move the request to in_progress.

        requested_count is the size of the caller's batch, checked against the
        free slots before anything is reserved. It defaults to accepted_delta.

        Raises:
            CapacityExceeded: the batch or the reservation would overshoot
                feedbacks_requested.
        """
        if requested_count is None:
            requested_count = accepted_delta
        if requested_count + roast_request.held_slots > roast_request.feedbacks_requested:
            self._raise_capacity_exceeded(roast_request, requested_count)
        if not self.requests.reserve_slots(roast_request, accepted_delta):
            self._raise_capacity_exceeded(roast_request, accepted_delta)
        lifecycle.mark_in_progress(roast_request)

    def _raise_capacity_exceeded(self, roast_request: RoastRequest, requested: int) -> None:
        feedbacks_requested = roast_request.feedbacks_requested
        held = roast_request.held_slots
        remaining = max(feedbacks_requested - held, 0)
        logger.warning(
            f"Capacity exceeded on request {roast_request.id}: "
            f"{requested} requested, {held}/{feedbacks_requested} held"
        )
        raise CapacityExceeded(
            f"You can only select {remaining} more roaster(s) "
            f"({held}/{feedbacks_requested} already selected)"
        )

    def _load_open_request(self, request_id: uuid.UUID) -> RoastRequest:
        roast_request = self.requests.get_for_update(request_id)
        if roast_request is None:
            raise NotFound(f"Roast request {request_id} not found")
        if lifecycle.is_terminal(roast_request):
            raise RequestClosed(f"Request is {roast_request.status.value}")
        return roast_request
