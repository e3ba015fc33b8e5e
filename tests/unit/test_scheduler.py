#!/usr/bin/env python3
"""
Unit tests for the scheduler entry point.
"""

import unittest
from unittest.mock import patch, MagicMock

import main
from core.auto_selection import SweepReport
from core.config_loader import AppConfig


class TestScheduler(unittest.TestCase):

    def test_run_cycle_sweeps_with_selection_config(self):
        config = AppConfig()
        session_factory = MagicMock()
        report = SweepReport(due=3, selected=['a', 'b'], failed=['c'])

        with patch('main.run_auto_selection_sweep', return_value=report) as sweep:
            result = main.run_cycle(config, session_factory)

        sweep.assert_called_once_with(config.selection, session_factory=session_factory)
        self.assertIs(result, report)

    def test_once_runs_a_single_sweep(self):
        config = AppConfig()
        with patch('main.load_config', return_value=config), \
                patch('main.make_engine') as make_engine, \
                patch('main.make_session_factory') as make_session_factory, \
                patch('main.init_db') as init_db, \
                patch('main.run_cycle') as run_cycle, \
                patch('sys.argv', ['main.py', '--once']):
            main.main()

        make_engine.assert_called_once_with(config.database.url)
        init_db.assert_called_once_with(make_engine.return_value)
        run_cycle.assert_called_once_with(config, make_session_factory.return_value)


if __name__ == '__main__':
    unittest.main()
