#!/usr/bin/env python3
"""
Roast request status state machine.

    open -> collecting_applications -> in_progress -> completed
     |               |                    |
     +---------------+--------------------+-------> cancelled

All status writes go through the named transitions below so the set of
legal edges is enumerable in one place (TRANSITIONS).
"""

import logging
from typing import Dict, FrozenSet, Tuple

from database.models import RoastRequest, RequestStatus
from core.errors import InvalidTransition

logger = logging.getLogger(__name__)

OPEN = RequestStatus.OPEN
COLLECTING = RequestStatus.COLLECTING_APPLICATIONS
IN_PROGRESS = RequestStatus.IN_PROGRESS
COMPLETED = RequestStatus.COMPLETED
CANCELLED = RequestStatus.CANCELLED

TERMINAL_STATUSES: FrozenSet[RequestStatus] = frozenset({COMPLETED, CANCELLED})

# Statuses in which new applications may be recorded
APPLICATION_STATUSES: FrozenSet[RequestStatus] = frozenset({OPEN, COLLECTING, IN_PROGRESS})

# Statuses in which feedback may still be submitted
FEEDBACK_STATUSES: FrozenSet[RequestStatus] = frozenset({OPEN, COLLECTING, IN_PROGRESS})

# transition name -> (allowed source statuses, target status)
TRANSITIONS: Dict[str, Tuple[FrozenSet[RequestStatus], RequestStatus]] = {
    'mark_collecting': (frozenset({OPEN}), COLLECTING),
    'mark_in_progress': (frozenset({OPEN, COLLECTING, IN_PROGRESS}), IN_PROGRESS),
    'complete': (frozenset({IN_PROGRESS}), COMPLETED),
    'cancel': (frozenset({OPEN, COLLECTING, IN_PROGRESS}), CANCELLED),
}


def is_terminal(roast_request: RoastRequest) -> bool:
    return roast_request.status in TERMINAL_STATUSES


def accepts_applications(roast_request: RoastRequest) -> bool:
    """Whether the status alone allows new applications.

    in_progress is included: a creator may select fewer roasters than
    requested and the request keeps recruiting for the free slots. Whether
    a slot is actually free is the capacity check, made separately.
    """
    return roast_request.status in APPLICATION_STATUSES


def transition(roast_request: RoastRequest, name: str) -> bool:
    """Apply a named transition. Returns True if the status changed.

    Raises:
        InvalidTransition: the current status is not a source of this edge.
    """
    if name not in TRANSITIONS:
        raise InvalidTransition(f"Unknown transition '{name}'")

    sources, target = TRANSITIONS[name]
    current = roast_request.status
    current_label = getattr(current, 'value', current)
    if current not in sources:
        raise InvalidTransition(
            f"Cannot {name.replace('_', ' ')} request {roast_request.id} from status '{current_label}'"
        )

    if current == target:
        return False

    roast_request.status = target
    logger.info(f"Request {roast_request.id}: {current_label} -> {target.value}")
    return True


def mark_collecting(roast_request: RoastRequest) -> bool:
    return transition(roast_request, 'mark_collecting')


def mark_in_progress(roast_request: RoastRequest) -> bool:
    return transition(roast_request, 'mark_in_progress')


def complete(roast_request: RoastRequest) -> bool:
    return transition(roast_request, 'complete')


def cancel(roast_request: RoastRequest) -> bool:
    return transition(roast_request, 'cancel')
