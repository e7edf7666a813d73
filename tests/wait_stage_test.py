import unittest
from unittest.mock import MagicMock

from jurl.deadline import Deadline
from jurl.errors import WaitTimeout
from jurl.stages.wait import wait_for_condition

from support import FakeClock, ScriptedSession

POLL = 0.25


class TestConditionWait(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()

    def _navigated_session(self, **kwargs):
        session = ScriptedSession(self.clock, **kwargs)
        session.navigate("https://example.com", "GET", (), None, False, "load", 1)
        return session

    def test_no_selector_is_a_no_op(self):
        """Scenario: no wait selector -> zero probes and zero deadline reads."""
        session = MagicMock()
        deadline = MagicMock()
        probes = wait_for_condition(session, None, deadline, POLL)
        self.assertEqual(probes, 0)
        session.wait_for_selector.assert_not_called()
        self.assertEqual(deadline.method_calls, [])

    def test_selector_found_after_some_polls(self):
        session = self._navigated_session(selector_at=0.6)
        deadline = Deadline(5, clock=self.clock)
        probes = wait_for_condition(session, "div.content", deadline, POLL, sleep=self.clock.sleep)
        self.assertEqual(probes, 3)
        for _, budget in session.probes:
            self.assertLessEqual(budget, POLL)

    def test_selector_never_appears_times_out_within_one_poll(self):
        """Scenario: timeout=2, selector never defined -> WaitTimeout after ~2s."""
        deadline = Deadline(2, clock=self.clock)
        session = self._navigated_session()
        with self.assertRaises(WaitTimeout) as cm:
            wait_for_condition(session, "div.content", deadline, POLL, sleep=self.clock.sleep)
        self.assertEqual(cm.exception.selector, "div.content")
        self.assertEqual(cm.exception.exit_code, 5)
        self.assertLessEqual(deadline.elapsed(), 2 + POLL)
        self.assertGreaterEqual(deadline.elapsed() + 1e-9, 2)

    def test_probe_at_the_boundary_counts_as_timeout(self):
        """Scenario: the selector would be found, but the deadline has been reached."""
        deadline = Deadline(1, clock=self.clock)
        session = self._navigated_session(selector_at=0)
        self.clock.now = deadline.expires_at
        with self.assertRaises(WaitTimeout):
            wait_for_condition(session, "div.content", deadline, POLL, sleep=self.clock.sleep)
        self.assertEqual(session.probes, [])

    def test_last_probe_is_trimmed_to_the_remaining_time(self):
        deadline = Deadline(0.6, clock=self.clock)
        session = ScriptedSession(self.clock)
        with self.assertRaises(WaitTimeout):
            wait_for_condition(session, "#late", deadline, POLL, sleep=self.clock.sleep)
        budgets = [round(b, 6) for _, b in session.probes]
        self.assertEqual(budgets, [0.25, 0.25, 0.1])

    def test_engine_answering_early_is_paced_to_the_poll_interval(self):
        """Scenario: a static engine answers instantly; the stage sleeps between probes."""
        deadline = Deadline(1, clock=self.clock)
        session = MagicMock()
        session.wait_for_selector.return_value = False
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            self.clock.sleep(seconds)

        with self.assertRaises(WaitTimeout):
            wait_for_condition(session, "main", deadline, POLL, sleep=sleep)
        self.assertEqual(session.wait_for_selector.call_count, 4)
        self.assertEqual(sleeps, [POLL] * 4)


if __name__ == "__main__":
    unittest.main()
