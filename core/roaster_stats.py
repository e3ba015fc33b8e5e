#!/usr/bin/env python3
"""
Roaster statistics computed from applications and feedback rather than
from the counters on RoasterProfile, so they cannot drift.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from database.models import RoasterProfile
from database.repositories import ApplicationRepository, FeedbackRepository

logger = logging.getLogger(__name__)


@dataclass
class RoasterStats:
    roaster_id: uuid.UUID
    completed_roasts: int
    total_earned: Decimal
    current_active: int
    completion_rate: int


class RoasterStatsService:
    def __init__(self, db: Session):
        self.db = db
        self.applications = ApplicationRepository(db)
        self.feedbacks = FeedbackRepository(db)

    def compute(self, roaster_id: uuid.UUID) -> RoasterStats:
        """
        Live stats for a roaster.

        completed_roasts counts completed feedback on requests where the
        roaster held a slot; current_active is held slots still awaiting
        that feedback. completion_rate is 100 for a roaster never selected.
        """
        held = self.applications.count_held_for_roaster(roaster_id)
        completed = self.feedbacks.count_completed_for_roaster(roaster_id)
        total_earned = self.feedbacks.total_earned_for_roaster(roaster_id)

        completion_rate = round((completed / held) * 100) if held > 0 else 100

        return RoasterStats(
            roaster_id=roaster_id,
            completed_roasts=completed,
            total_earned=total_earned,
            current_active=max(held - completed, 0),
            completion_rate=completion_rate
        )

    def refresh_profile(self, profile: RoasterProfile) -> RoasterStats:
        """Write the live completion rate back onto the profile used for scoring."""
        self.db.flush()
        stats = self.compute(profile.user_id)
        profile.completion_rate = float(stats.completion_rate)
        return stats
