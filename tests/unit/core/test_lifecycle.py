#!/usr/bin/env python3
"""
Unit tests for the roast request state machine.
"""

import unittest
import uuid
import warnings
from types import SimpleNamespace

from core import lifecycle
from core.errors import InvalidTransition, RequestClosed
from database.models import RequestStatus


def make_request(status):
    return SimpleNamespace(id=uuid.uuid4(), status=status)


class TestLifecycleTransitions(unittest.TestCase):

    def test_mark_collecting_from_open(self):
        request = make_request(RequestStatus.OPEN)
        self.assertTrue(lifecycle.mark_collecting(request))
        self.assertEqual(request.status, RequestStatus.COLLECTING_APPLICATIONS)

    def test_mark_collecting_only_from_open(self):
        request = make_request(RequestStatus.IN_PROGRESS)
        with self.assertRaises(InvalidTransition):
            lifecycle.mark_collecting(request)
        self.assertEqual(request.status, RequestStatus.IN_PROGRESS)

    def test_mark_in_progress_from_open_and_collecting(self):
        for status in (RequestStatus.OPEN, RequestStatus.COLLECTING_APPLICATIONS):
            request = make_request(status)
            self.assertTrue(lifecycle.mark_in_progress(request))
            self.assertEqual(request.status, RequestStatus.IN_PROGRESS)

    def test_mark_in_progress_is_idempotent(self):
        request = make_request(RequestStatus.IN_PROGRESS)
        self.assertFalse(lifecycle.mark_in_progress(request))
        self.assertEqual(request.status, RequestStatus.IN_PROGRESS)

    def test_complete_requires_in_progress(self):
        request = make_request(RequestStatus.COLLECTING_APPLICATIONS)
        with self.assertRaises(InvalidTransition):
            lifecycle.complete(request)

        request = make_request(RequestStatus.IN_PROGRESS)
        self.assertTrue(lifecycle.complete(request))
        self.assertEqual(request.status, RequestStatus.COMPLETED)

    def test_cancel_from_any_active_status(self):
        for status in (RequestStatus.OPEN, RequestStatus.COLLECTING_APPLICATIONS, RequestStatus.IN_PROGRESS):
            request = make_request(status)
            lifecycle.cancel(request)
            self.assertEqual(request.status, RequestStatus.CANCELLED)

    def test_terminal_statuses_have_no_exits(self):
        for status in (RequestStatus.COMPLETED, RequestStatus.CANCELLED):
            for name in lifecycle.TRANSITIONS:
                request = make_request(status)
                with self.assertRaises(InvalidTransition):
                    lifecycle.transition(request, name)
                self.assertEqual(request.status, status)

    def test_invalid_transition_is_a_request_closed_error(self):
        request = make_request(RequestStatus.CANCELLED)
        with self.assertRaises(RequestClosed) as ctx:
            lifecycle.cancel(request)
        self.assertEqual(ctx.exception.kind, "InvalidTransition")

    def test_unknown_transition(self):
        with self.assertRaises(InvalidTransition):
            lifecycle.transition(make_request(RequestStatus.OPEN), 'reopen')


class TestLifecycleQueries(unittest.TestCase):

    def test_is_terminal(self):
        self.assertTrue(lifecycle.is_terminal(make_request(RequestStatus.COMPLETED)))
        self.assertTrue(lifecycle.is_terminal(make_request(RequestStatus.CANCELLED)))
        self.assertFalse(lifecycle.is_terminal(make_request(RequestStatus.IN_PROGRESS)))

    def test_accepts_applications(self):
        self.assertTrue(lifecycle.accepts_applications(make_request(RequestStatus.OPEN)))
        self.assertTrue(lifecycle.accepts_applications(make_request(RequestStatus.COLLECTING_APPLICATIONS)))
        self.assertTrue(lifecycle.accepts_applications(make_request(RequestStatus.IN_PROGRESS)))
        self.assertFalse(lifecycle.accepts_applications(make_request(RequestStatus.COMPLETED)))
        self.assertFalse(lifecycle.accepts_applications(make_request(RequestStatus.CANCELLED)))


class TestLifecycleModuleSource(unittest.TestCase):

    def test_module_compiles_without_escape_warnings(self):
        with open(lifecycle.__file__, encoding='utf-8') as f:
            source = f.read()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, lifecycle.__file__, "exec")


if __name__ == '__main__':
    unittest.main()
