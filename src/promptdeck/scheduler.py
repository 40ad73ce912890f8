"""Cooperative timers for deferred view work and feedback auto-revert."""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ScheduledTask:
    """Handle for one pending callback."""

    def __init__(self, due_at: float, callback: Callable[[], None]) -> None:
        self.due_at = due_at
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        """Prevent the callback from running; no-op once it has run."""
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.done)


class Scheduler:
    """Run callbacks once their delay has elapsed.

    Nothing runs on its own: the owner calls :meth:`run_due` between events,
    so every callback runs to completion on the caller's thread.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule a callback ``delay`` seconds from now."""
        task = ScheduledTask(self._clock() + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due_at, next(self._counter), task))
        return task

    def defer(self, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule a callback for the next pump, after the current event settles."""
        return self.call_later(0.0, callback)

    def run_due(self) -> int:
        """Run due callbacks in due order and return how many ran."""
        now = self._clock()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.done = True
            task.callback()
            ran += 1
        if ran:
            logger.debug("Ran %d scheduled task(s)", ran)
        return ran

    def pending_count(self) -> int:
        """Return the number of callbacks still waiting to run."""
        return sum(1 for _, _, task in self._queue if task.pending)
