"""Cooperative cancellation for long searches."""
import threading
import time
from typing import Optional


class SearchBudget:
    """Wall-clock and evaluation limits plus an explicit cancel flag.

    Solvers poll :meth:`exhausted` at coarse checkpoints. ``cancel`` may be
    called from any thread.

    Args:
        time_limit: Seconds allowed from :meth:`start`, or None
        max_evaluations: Candidate evaluations allowed, or None
    """

    def __init__(self, time_limit: Optional[float] = None, max_evaluations: Optional[int] = None):
        self.time_limit = time_limit
        self.max_evaluations = max_evaluations
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._evaluations = 0
        self._start = time.monotonic()

    @classmethod
    def from_config(cls, config):
        budget = config.get('optimization', {}).get('budget', {})
        return cls(budget.get('time_limit'), budget.get('max_evaluations'))

    def start(self):
        """Reset the clock and evaluation counter."""
        with self._lock:
            self._start = time.monotonic()
            self._evaluations = 0
        return self

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._start

    @property
    def evaluations(self) -> int:
        return self._evaluations

    def charge(self, evaluations: int = 1):
        with self._lock:
            self._evaluations += evaluations

    def reserve(self, evaluations: int = 1) -> bool:
        """Charge ``evaluations`` unless the budget is already exhausted.

        The check and the charge happen under one lock, so concurrent
        callers never overshoot ``max_evaluations``.
        """
        with self._lock:
            if self.exhausted():
                return False
            self._evaluations += evaluations
            return True

    def exhausted(self) -> bool:
        if self._cancelled.is_set():
            return True
        if self.time_limit is not None and self.elapsed >= self.time_limit:
            return True
        if self.max_evaluations is not None and self._evaluations >= self.max_evaluations:
            return True
        return False
