#!/usr/bin/env python3
"""
Unit tests for SelectionService: automatic and manual selection sharing
one capacity check.
"""

import unittest
import uuid
from datetime import datetime, timedelta, timezone

from core.selection import SelectionService
from core.errors import CapacityExceeded, NotFound, RequestClosed, Unauthorized
from database.models import RoastApplication, RoastRequest, RequestStatus, ApplicationStatus
from database.uow import marketplace_uow
from tests.fixtures.marketplace_fixtures import (
    MarketplaceTestCase, create_creator, create_roaster, create_request
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class SelectionTestCase(MarketplaceTestCase):

    def setUp(self):
        super().setUp()
        self.creator = create_creator(self.session)
        self.request = create_request(
            self.session,
            self.creator,
            feedbacks_requested=2,
            status=RequestStatus.COLLECTING_APPLICATIONS
        )
        self.service = SelectionService(self.session, clock=lambda: FIXED_NOW)

    def add_application(self, score: int, name: str = "Roaster", created_at=None) -> RoastApplication:
        roaster = create_roaster(self.session, name=name)
        application = RoastApplication(
            roast_request_id=self.request.id,
            roaster_id=roaster.id,
            score=score,
            status=ApplicationStatus.PENDING,
            created_at=created_at or FIXED_NOW - timedelta(hours=1)
        )
        self.session.add(application)
        self.session.flush()
        return application

    def held_count(self) -> int:
        return (
            self.session.query(RoastApplication)
            .filter(
                RoastApplication.roast_request_id == self.request.id,
                RoastApplication.status.in_([ApplicationStatus.ACCEPTED, ApplicationStatus.AUTO_SELECTED])
            )
            .count()
        )


class TestAutoSelect(SelectionTestCase):

    def test_top_scores_are_selected(self):
        app_80 = self.add_application(80, "Eighty")
        app_60 = self.add_application(60, "Sixty")
        app_90 = self.add_application(90, "Ninety")

        result = self.service.auto_select(self.request.id)

        self.assertEqual(result.mode, 'auto')
        self.assertEqual(result.selected_ids, [app_90.id, app_80.id])
        self.assertEqual(result.rejected_ids, [app_60.id])
        self.assertEqual(app_90.status, ApplicationStatus.AUTO_SELECTED)
        self.assertEqual(app_80.status, ApplicationStatus.AUTO_SELECTED)
        self.assertEqual(app_60.status, ApplicationStatus.REJECTED)
        self.assertIsNotNone(app_90.selected_at)
        self.assertIsNone(app_60.selected_at)
        self.assertEqual(self.request.status, RequestStatus.IN_PROGRESS)
        self.assertEqual(self.request.held_slots, 2)

    def test_ties_go_to_earliest_application(self):
        late = self.add_application(70, "Late", created_at=FIXED_NOW - timedelta(minutes=5))
        early = self.add_application(70, "Early", created_at=FIXED_NOW - timedelta(hours=5))
        top = self.add_application(95, "Top")

        result = self.service.auto_select(self.request.id)

        self.assertEqual(result.selected_ids, [top.id, early.id])
        self.assertEqual(late.status, ApplicationStatus.REJECTED)

    def test_fewer_applications_than_slots(self):
        only = self.add_application(40)

        result = self.service.auto_select(self.request.id)

        self.assertEqual(result.selected_ids, [only.id])
        self.assertEqual(result.rejected_ids, [])
        self.assertEqual(self.request.held_slots, 1)
        self.assertEqual(self.request.status, RequestStatus.IN_PROGRESS)

    def test_only_free_slots_are_filled(self):
        chosen = self.add_application(50, "Chosen")
        self.service.manual_select(self.request.id, self.creator.id, [chosen.id])
        newcomer_high = self.add_application(90, "High")
        newcomer_low = self.add_application(30, "Low")

        result = self.service.auto_select(self.request.id)

        self.assertEqual(result.selected_ids, [newcomer_high.id])
        self.assertEqual(newcomer_low.status, ApplicationStatus.REJECTED)
        self.assertEqual(chosen.status, ApplicationStatus.ACCEPTED)
        self.assertEqual(self.held_count(), 2)
        self.assertEqual(self.request.held_slots, 2)

    def test_expect_unselected_refuses_after_manual_selection(self):
        chosen = self.add_application(50, "Chosen")
        self.add_application(90, "Other")
        self.service.manual_select(self.request.id, self.creator.id, [chosen.id])

        with self.assertRaises(RequestClosed):
            self.service.auto_select(self.request.id, expect_unselected=True)

    def test_closed_request(self):
        self.add_application(80)
        self.request.status = RequestStatus.CANCELLED
        self.session.flush()

        with self.assertRaises(RequestClosed):
            self.service.auto_select(self.request.id)
        self.assertEqual(self.held_count(), 0)

    def test_unknown_request(self):
        with self.assertRaises(NotFound):
            self.service.auto_select(uuid.uuid4())


class TestManualSelect(SelectionTestCase):

    def setUp(self):
        super().setUp()
        self.app_a = self.add_application(80, "A")
        self.app_b = self.add_application(60, "B")
        self.app_c = self.add_application(90, "C")

    def test_selection_over_two_rounds(self):
        first = self.service.manual_select(self.request.id, self.creator.id, [self.app_b.id])

        self.assertEqual(first.mode, 'manual')
        self.assertEqual(first.selected_ids, [self.app_b.id])
        self.assertEqual(set(first.rejected_ids), {self.app_a.id, self.app_c.id})
        self.assertEqual(self.app_b.status, ApplicationStatus.ACCEPTED)
        self.assertEqual(self.app_a.status, ApplicationStatus.REJECTED)
        self.assertEqual(self.app_c.status, ApplicationStatus.REJECTED)
        self.assertEqual(self.request.status, RequestStatus.IN_PROGRESS)
        self.assertEqual(self.request.held_slots, 1)

        self.reload(self.app_b)
        first_selected_at = self.app_b.selected_at

        late = self.add_application(70, "Late")
        second = SelectionService(
            self.session, clock=lambda: FIXED_NOW + timedelta(days=1)
        ).manual_select(self.request.id, self.creator.id, [late.id])

        self.assertEqual(second.selected_ids, [late.id])
        self.assertEqual(second.held_slots, 2)
        self.reload(self.app_b)
        self.assertEqual(self.app_b.status, ApplicationStatus.ACCEPTED)
        self.assertEqual(self.app_b.selected_at, first_selected_at)
        self.assertEqual(self.held_count(), 2)

    def test_reselecting_held_application_within_capacity_is_a_no_op(self):
        self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])
        result = self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])

        self.assertEqual(result.selected_ids, [])
        self.assertEqual(result.held_slots, 1)
        self.assertEqual(self.held_count(), 1)

    def test_resent_held_application_counts_against_capacity(self):
        self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])
        late = self.add_application(70, "Late")

        # 2 ids + 1 held > 2 requested
        with self.assertRaises(CapacityExceeded) as ctx:
            self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id, late.id])

        self.assertIn("1 more", ctx.exception.message)
        self.reload(late)
        self.assertEqual(late.status, ApplicationStatus.PENDING)
        self.reload(self.request)
        self.assertEqual(self.request.held_slots, 1)
        self.assertEqual(self.held_count(), 1)

    def test_duplicate_ids_count_against_capacity(self):
        self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])

        with self.assertRaises(CapacityExceeded):
            self.service.manual_select(self.request.id, self.creator.id, [self.app_c.id, self.app_c.id])
        self.reload(self.app_c)
        self.assertEqual(self.app_c.status, ApplicationStatus.REJECTED)

    def test_rejected_application_can_be_accepted_later(self):
        self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])
        self.assertEqual(self.app_c.status, ApplicationStatus.REJECTED)

        result = self.service.manual_select(self.request.id, self.creator.id, [self.app_c.id])

        self.assertEqual(result.selected_ids, [self.app_c.id])
        self.assertEqual(self.app_c.status, ApplicationStatus.ACCEPTED)
        self.assertEqual(self.request.held_slots, 2)

    def test_capacity_exceeded_changes_nothing(self):
        with self.assertRaises(CapacityExceeded) as ctx:
            self.service.manual_select(
                self.request.id, self.creator.id, [self.app_a.id, self.app_b.id, self.app_c.id]
            )

        self.assertIn("2 more", ctx.exception.message)
        for application in (self.app_a, self.app_b, self.app_c):
            self.reload(application)
            self.assertEqual(application.status, ApplicationStatus.PENDING)
        self.reload(self.request)
        self.assertEqual(self.request.held_slots, 0)
        self.assertEqual(self.request.status, RequestStatus.COLLECTING_APPLICATIONS)

    def test_capacity_counts_earlier_rounds(self):
        self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])
        late_1 = self.add_application(10, "Late one")
        late_2 = self.add_application(20, "Late two")

        with self.assertRaises(CapacityExceeded) as ctx:
            self.service.manual_select(self.request.id, self.creator.id, [late_1.id, late_2.id])
        self.assertIn("1 more", ctx.exception.message)

    def test_only_creator_can_select(self):
        outsider = create_roaster(self.session, name="Outsider")
        with self.assertRaises(Unauthorized):
            self.service.manual_select(self.request.id, outsider.id, [self.app_a.id])
        self.assertEqual(self.app_a.status, ApplicationStatus.PENDING)

    def test_unknown_application_id(self):
        with self.assertRaises(NotFound):
            self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id, uuid.uuid4()])
        self.assertEqual(self.held_count(), 0)

    def test_application_of_another_request_is_unknown(self):
        other_request = create_request(self.session, self.creator)
        roaster = create_roaster(self.session, name="Elsewhere")
        foreign = RoastApplication(
            roast_request_id=other_request.id, roaster_id=roaster.id, score=99, status=ApplicationStatus.PENDING
        )
        self.session.add(foreign)
        self.session.flush()

        with self.assertRaises(NotFound):
            self.service.manual_select(self.request.id, self.creator.id, [foreign.id])

    def test_completed_request(self):
        self.request.status = RequestStatus.COMPLETED
        self.session.flush()
        with self.assertRaises(RequestClosed):
            self.service.manual_select(self.request.id, self.creator.id, [self.app_a.id])


class TestSelectionUnitOfWork(MarketplaceTestCase):
    """Failed selections inside a unit of work leave the database untouched."""

    def test_failed_selection_rolls_back(self):
        creator = create_creator(self.session)
        roast_request = create_request(self.session, creator, feedbacks_requested=1)
        ids = []
        for name in ("One", "Two"):
            roaster = create_roaster(self.session, name=name)
            application = RoastApplication(
                roast_request_id=roast_request.id, roaster_id=roaster.id, score=50, status=ApplicationStatus.PENDING
            )
            self.session.add(application)
            self.session.flush()
            ids.append(application.id)
        request_id = roast_request.id
        creator_id = creator.id
        self.session.commit()

        with self.assertRaises(CapacityExceeded):
            with marketplace_uow(self.session_factory) as session:
                SelectionService(session).manual_select(request_id, creator_id, ids)

        with marketplace_uow(self.session_factory) as session:
            statuses = {a.status for a in session.query(RoastApplication).all()}
            stored = session.get(RoastRequest, request_id)
            self.assertEqual(statuses, {ApplicationStatus.PENDING})
            self.assertEqual(stored.held_slots, 0)
            self.assertEqual(stored.status, RequestStatus.OPEN)

        with marketplace_uow(self.session_factory) as session:
            result = SelectionService(session).manual_select(request_id, creator_id, ids[:1])
            self.assertEqual(result.held_slots, 1)


if __name__ == '__main__':
    unittest.main()
