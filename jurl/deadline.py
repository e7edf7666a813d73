"""
Deadline Controller: one absolute instant bounding the whole pipeline.
Advisory bookkeeping only; every blocking stage consults it cooperatively.
"""

import time

from jurl.errors import DeadlineExceeded


class Deadline:
    """
    Invariants:
    - Monotonic: measured on a monotonic clock, fixed at construction.
    - Never extended once the run starts.
    - Overdue is reported as zero remaining time plus the `overdue` flag.
    """

    def __init__(self, timeout: float, clock=time.monotonic):
        if not timeout > 0:
            raise ValueError(f"timeout must be > 0, got {timeout!r}")
        self._clock = clock
        self.timeout = float(timeout)
        self.started_at = clock()
        self.expires_at = self.started_at + self.timeout

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def overdue(self) -> bool:
        # Boundary counts as expired
        return self._clock() >= self.expires_at

    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def checkpoint(self, stage: str) -> float:
        """
        Must be called immediately before any potentially slow engine call.
        Returns the remaining seconds, or raises DeadlineExceeded.
        """
        if self.overdue:
            raise DeadlineExceeded(self.timeout, stage)
        return self.remaining()
