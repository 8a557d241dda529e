"""
Cooperative scheduling for deferred engine callbacks (undo expiry).

Nothing here starts a thread. VirtualScheduler runs due callbacks when a test
advances its clock; SystemScheduler runs them when run_pending() is called,
which the API does before touching an engine.
"""
import heapq
import itertools
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a pending callback."""

    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(ABC):
    """Clock plus deferred callbacks."""

    def __init__(self):
        self._queue: List[Tuple[int, int, ScheduledTask]] = []
        self._sequence = itertools.count()

    @abstractmethod
    def now_ms(self) -> int:
        """Current time in milliseconds."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule callback to run once delay_ms from now."""
        task = ScheduledTask(self.now_ms() + delay_ms, callback)
        heapq.heappush(self._queue, (task.due_ms, next(self._sequence), task))
        return task

    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def _run_due(self, now_ms: int) -> int:
        ran = 0
        while self._queue and self._queue[0][0] <= now_ms:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.callback()
            ran += 1
        return ran


class VirtualScheduler(Scheduler):
    """Manually advanced clock for tests."""

    def __init__(self, start_ms: int = 0):
        super().__init__()
        self._now = start_ms

    def now_ms(self) -> int:
        return self._now

    def advance(self, ms: int) -> None:
        """Move the clock forward, running callbacks in due order."""
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            # Callbacks observe the clock at their own due time
            self._now = max(self._now, self._queue[0][0])
            self._run_due(self._now)
        self._now = target


class SystemScheduler(Scheduler):
    """Wall-clock scheduler; due callbacks run on run_pending()."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def run_pending(self) -> int:
        """Run every callback that is due. Returns the number run."""
        ran = self._run_due(self.now_ms())
        if ran:
            logger.debug(f"Ran {ran} scheduled callback(s)")
        return ran
