"""
Condition wait stage: polls for a CSS selector until found or the deadline passes.
"""

import time
from typing import Optional

from jurl.core import logger
from jurl.deadline import Deadline
from jurl.errors import WaitTimeout
from jurl.session.base import BrowserSession

_log = logger.getChild("wait")


def wait_for_condition(
    session: BrowserSession,
    selector: Optional[str],
    deadline: Deadline,
    poll_interval: float,
    sleep=time.sleep,
) -> int:
    """
    Returns the number of probes issued (0 when no selector was requested).

    Invariants:
    - The deadline is read strictly before every probe; a probe that would
      start at the boundary is a timeout, never a success.
    - Each probe is bounded by min(poll_interval, remaining), so a failure is
      reported no later than one poll interval past the deadline.
    """
    if selector is None:
        return 0

    _log.debug(f"* Waiting for selector: {selector}")
    probes = 0
    while True:
        remaining = deadline.remaining()
        if remaining <= 0:
            raise WaitTimeout(selector, deadline.timeout)

        budget = min(poll_interval, remaining)
        started = deadline.elapsed()
        probes += 1
        if session.wait_for_selector(selector, budget):
            _log.debug(f"* Selector {selector!r} found after {probes} probe(s)")
            return probes

        # Engines that answer early are paced to the poll interval
        spare = budget - (deadline.elapsed() - started)
        if spare > 0:
            sleep(spare)
