#!/usr/bin/env python3
"""
Unit tests for RoasterStatsService.
"""

import unittest
from decimal import Decimal

from core.applications import ApplicationService
from core.selection import SelectionService
from core.feedback import FeedbackService, FeedbackSubmission
from core.roaster_stats import RoasterStatsService
from tests.fixtures.marketplace_fixtures import (
    MarketplaceTestCase, create_creator, create_roaster, create_request
)


class TestRoasterStats(MarketplaceTestCase):

    def setUp(self):
        super().setUp()
        self.creator = create_creator(self.session)
        self.roaster = create_roaster(self.session)
        self.stats = RoasterStatsService(self.session)

    def hold_slot(self, max_price="50.00"):
        roast_request = create_request(self.session, self.creator, max_price=max_price)
        application = ApplicationService(self.session).apply(roast_request.id, self.roaster.id)
        SelectionService(self.session).manual_select(roast_request.id, self.creator.id, [application.id])
        return roast_request

    def test_never_selected_roaster(self):
        stats = self.stats.compute(self.roaster.id)

        self.assertEqual(stats.completed_roasts, 0)
        self.assertEqual(stats.total_earned, Decimal("0"))
        self.assertEqual(stats.current_active, 0)
        self.assertEqual(stats.completion_rate, 100)

    def test_partially_completed(self):
        done = self.hold_slot()
        self.hold_slot()
        self.hold_slot()
        FeedbackService(self.session).submit(done.id, self.roaster.id, FeedbackSubmission(final_price=Decimal("12.50")))

        stats = self.stats.compute(self.roaster.id)

        self.assertEqual(stats.completed_roasts, 1)
        self.assertEqual(stats.total_earned, Decimal("12.50"))
        self.assertEqual(stats.current_active, 2)
        self.assertEqual(stats.completion_rate, 33)

    def test_submit_refreshes_profile_completion_rate(self):
        first = self.hold_slot()
        self.hold_slot()
        FeedbackService(self.session).submit(first.id, self.roaster.id, FeedbackSubmission(final_price=Decimal("5")))

        profile = self.roaster.roaster_profile
        self.assertEqual(profile.completion_rate, 50.0)


if __name__ == '__main__':
    unittest.main()
